"""DRF serializers for orders APIs."""

from rest_framework import serializers

from payments.serializers import PaymentTransactionSerializer
from .models import Order, OrderItem, OrderStatus, OrderStatusHistory, PaymentMethod


class OrderItemSerializer(serializers.ModelSerializer):
    """Line snapshot taken at checkout."""

    product_id = serializers.ReadOnlyField(source='product.id')

    class Meta:
        model = OrderItem
        fields = ['id', 'product_id', 'name', 'image', 'price', 'old_price', 'quantity', 'selected_color']
        read_only_fields = fields


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ['status', 'note', 'updated_by', 'updated_at']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order view: snapshot lines, totals, history and payment ledger."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    transactions = PaymentTransactionSerializer(many=True, read_only=True)
    shipping_info = serializers.ReadOnlyField()
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    customer_username = serializers.ReadOnlyField(source='user.username')
    coupon_code = serializers.ReadOnlyField(source='coupon.code', default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'code', 'user', 'customer_username',
            'shipping_info', 'payment_method', 'payment_status',
            'status', 'status_display',
            'sub_total', 'total', 'savings', 'shipping_fee', 'discount', 'grand_total',
            'coupon_code', 'items', 'status_history', 'transactions',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ShippingInfoSerializer(serializers.Serializer):
    fullName = serializers.CharField(allow_blank=True, required=False, default='')
    phone = serializers.CharField(allow_blank=True, required=False, default='')
    email = serializers.CharField(allow_blank=True, required=False, default='')
    address = serializers.CharField(allow_blank=True, required=False, default='')
    city = serializers.CharField(allow_blank=True, required=False, default='')
    district = serializers.CharField(allow_blank=True, required=False, default='')
    ward = serializers.CharField(allow_blank=True, required=False, default='')
    note = serializers.CharField(allow_blank=True, required=False, default='')


class CheckoutSerializer(serializers.Serializer):
    """Checkout payload.

    Prices and the discount are always recomputed on the server; a
    ``discount`` sent by the client is ignored.
    """

    shippingInfo = ShippingInfoSerializer()
    paymentMethod = serializers.CharField(required=False, allow_blank=True, default=PaymentMethod.COD.value)
    shippingFee = serializers.JSONField(required=False, default=0)
    couponCode = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True, default='')
