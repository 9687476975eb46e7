"""Django admin configuration for product catalog models."""

import csv
from django.contrib import admin
from django.utils.html import format_html
from django.http import HttpResponse
from .models import Brand, ProductCategory, Product, ProductColor


class ProductColorInline(admin.TabularInline):
    """Inline editor for a product's colour stock."""

    model = ProductColor
    extra = 1


@admin.register(ProductCategory)
class ProductCategoryAdmin(admin.ModelAdmin):
    list_display = ('category_name', 'parent_category')


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'sort_order', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name',)
    readonly_fields = ('slug',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin configuration for products and inventory."""

    list_display = ('name', 'code', 'category', 'brand', 'price', 'old_price', 'colored_stock', 'is_active')
    list_filter = ('category', 'brand', 'is_active', 'in_stock')
    search_fields = ('name', 'code')
    inlines = [ProductColorInline]
    actions = ['export_to_csv']

    def export_to_csv(self, request, queryset):
        """Export selected products as a CSV inventory report."""
        response = HttpResponse(content_type='text/csv; charset=utf-8-sig')
        response['Content-Disposition'] = 'attachment; filename="inventory_report.csv"'

        writer = csv.writer(response)
        writer.writerow(['Code', 'Product', 'Price', 'Stock'])
        for product in queryset:
            writer.writerow([product.code, product.name, product.price, product.stock])
        return response
    export_to_csv.short_description = "Export selected products to CSV"

    def colored_stock(self, obj):
        """Render stock in color to highlight low inventory."""
        stock = obj.stock
        if stock <= 3:
            color = 'red'
        elif stock <= 10:
            color = 'orange'
        else:
            color = 'green'
        return format_html('<b style="color: {};">{}</b>', color, stock)

    colored_stock.short_description = 'Stock'
    colored_stock.admin_order_field = 'stock'
