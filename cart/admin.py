"""Django admin configuration for shopping cart models."""

from django.contrib import admin
from .models import ShoppingCart, ShoppingCartItem


class ShoppingCartItemInline(admin.TabularInline):
    """Cart lines with the colour the shopper picked."""

    model = ShoppingCartItem
    extra = 0
    fields = ('product', 'selected_color', 'qty', 'subtotal')
    readonly_fields = ('subtotal',)
    raw_id_fields = ('product',)


@admin.register(ShoppingCart)
class ShoppingCartAdmin(admin.ModelAdmin):
    list_display = ('user', 'item_count', 'total_price', 'updated_at')
    search_fields = ('user__username', 'user__email')
    inlines = [ShoppingCartItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Lines'
