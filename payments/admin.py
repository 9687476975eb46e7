"""Django admin configuration for the payment ledger."""

from django.contrib import admin
from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """Read-only view of provider transactions; rows come from the payment flow."""

    list_display = ('id', 'get_order_code', 'provider', 'kind', 'amount', 'trans_id', 'result_code', 'created_at')
    list_filter = ('provider', 'kind', 'created_at')
    search_fields = ('order__code', 'trans_id')
    readonly_fields = [f.name for f in PaymentTransaction._meta.fields]

    def get_order_code(self, obj):
        return obj.order.code
    get_order_code.short_description = 'Order'

    def has_add_permission(self, request):
        return False
