"""DRF serializers for payment APIs."""

from rest_framework import serializers
from .models import PaymentTransaction


class PaymentTransactionSerializer(serializers.ModelSerializer):
    """Ledger row as shown on an order's detail page."""

    class Meta:
        model = PaymentTransaction
        fields = ['id', 'provider', 'kind', 'trans_id', 'amount', 'result_code', 'message', 'created_at']
        read_only_fields = fields


class MomoCreateSerializer(serializers.Serializer):
    orderId = serializers.CharField()
