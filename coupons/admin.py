"""Django admin configuration for coupons."""

from django.contrib import admin
from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ('code', 'type', 'value', 'used_count', 'max_uses', 'valid_from', 'valid_to', 'is_active')
    list_filter = ('type', 'is_active')
    search_fields = ('code',)
    # Usage is counted by checkout only.
    readonly_fields = ('used_count', 'created_at', 'updated_at')
