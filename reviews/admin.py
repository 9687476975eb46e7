"""Django admin configuration for reviews."""

from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('product', 'user', 'rating', 'is_visible', 'created_at')
    list_filter = ('rating', 'is_visible')
    search_fields = ('product__name', 'user__username', 'comment')
    raw_id_fields = ('product', 'user', 'replied_by')
    actions = ['hide_reviews']

    def hide_reviews(self, request, queryset):
        queryset.update(is_visible=False)
    hide_reviews.short_description = "Hide selected reviews"
