"""Django admin configuration for orders and related models."""

from django.contrib import admin

from payments.models import PaymentTransaction
from .models import Counter, Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    """Line snapshots; read-only so historical prices cannot be edited."""

    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'name', 'price', 'old_price', 'quantity', 'selected_color')
    fields = readonly_fields
    can_delete = False
    max_num = 0


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ('status', 'note', 'updated_by', 'updated_at')
    fields = readonly_fields
    can_delete = False
    max_num = 0


class PaymentTransactionInline(admin.TabularInline):
    """Payment ledger rows; they only come from the payment flow."""

    model = PaymentTransaction
    extra = 0
    can_delete = False
    max_num = 0

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin configuration for customer orders.

    Status changes go through the API so the history and the payment side
    effects stay consistent; here the status is read-only.
    """

    list_display = ('code', 'user', 'status', 'payment_method', 'payment_status', 'grand_total', 'created_at')
    list_filter = ('status', 'payment_status', 'payment_method', 'created_at')
    search_fields = ('code', 'user__username', 'full_name', 'phone')
    readonly_fields = (
        'code', 'user', 'status', 'payment_status', 'coupon',
        'sub_total', 'total', 'savings', 'shipping_fee', 'discount', 'grand_total',
        'created_at', 'updated_at',
    )
    inlines = [OrderItemInline, OrderStatusHistoryInline, PaymentTransactionInline]


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ('name', 'seq')
    readonly_fields = ('name',)
