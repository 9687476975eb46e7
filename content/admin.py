"""Django admin configuration for storefront content."""

from django.contrib import admin
from .models import Banner, News


@admin.register(News)
class NewsAdmin(admin.ModelAdmin):
    list_display = ('title', 'author', 'is_active', 'is_featured', 'views', 'created_at')
    list_filter = ('is_active', 'is_featured')
    search_fields = ('title', 'summary', 'content')
    readonly_fields = ('views',)


@admin.register(Banner)
class BannerAdmin(admin.ModelAdmin):
    list_display = ('title', 'sort_order', 'is_active')
    list_editable = ('sort_order', 'is_active')
    list_filter = ('is_active',)
