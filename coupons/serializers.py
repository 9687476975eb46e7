"""DRF serializers for coupon APIs."""

from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers

from .models import Coupon

DEFAULT_VALIDITY = timedelta(days=30)


class CouponSerializer(serializers.ModelSerializer):
    """Admin-facing coupon serializer with the back-office validation rules."""

    valid_from = serializers.DateTimeField(required=False)
    valid_to = serializers.DateTimeField(required=False)
    is_valid_now = serializers.SerializerMethodField()

    class Meta:
        model = Coupon
        fields = [
            'id', 'code', 'type', 'value', 'max_uses', 'used_count',
            'valid_from', 'valid_to', 'min_order_value', 'is_active',
            'is_valid_now', 'created_at', 'updated_at',
        ]
        read_only_fields = ['used_count', 'created_at', 'updated_at']
        # Uniqueness is enforced on the normalized code in validate_code.
        extra_kwargs = {'code': {'validators': []}}

    def validate_code(self, value):
        code = Coupon.normalize_code(value)
        if not code:
            raise serializers.ValidationError('Coupon code is required.')
        return code

    def validate_max_uses(self, value):
        if value is not None and value < 1:
            raise serializers.ValidationError('Max uses must be at least 1.')
        return value or None

    def validate(self, attrs):
        instance = getattr(self, 'instance', None)
        coupon_type = attrs.get('type', getattr(instance, 'type', None))
        value = attrs.get('value', getattr(instance, 'value', None))

        if value is not None:
            if coupon_type == Coupon.TYPE_PERCENT and not (0 <= value <= 100):
                raise serializers.ValidationError({'value': 'Percentage must be between 0 and 100.'})
            if coupon_type == Coupon.TYPE_FIXED and value <= 0:
                raise serializers.ValidationError({'value': 'Discount amount must be greater than 0.'})

        if instance is None:
            attrs.setdefault('valid_from', timezone.now())
            attrs.setdefault('valid_to', attrs['valid_from'] + DEFAULT_VALIDITY)

        valid_from = attrs.get('valid_from', getattr(instance, 'valid_from', None))
        valid_to = attrs.get('valid_to', getattr(instance, 'valid_to', None))
        if valid_from and valid_to and valid_to < valid_from:
            raise serializers.ValidationError({'valid_to': 'End of validity must not precede its start.'})
        return attrs

    def get_is_valid_now(self, obj):
        return obj.is_valid()


class CouponValidateSerializer(serializers.Serializer):
    """Payload for the public "check my code" endpoint."""

    code = serializers.CharField()
    orderTotal = serializers.CharField(required=False, allow_blank=True, default='0')
