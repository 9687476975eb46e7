"""Coupon APIs.

Administrators manage coupons; anyone may check a code against a cart total.
"""

from django.db import IntegrityError, transaction
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.permissions import IsAdminRole
from core.exceptions import Conflict
from orders.totals import to_number
from products.views import StandardResultsSetPagination
from .evaluator import find_coupon
from .models import Coupon
from .serializers import CouponSerializer, CouponValidateSerializer


class CouponViewSet(viewsets.ModelViewSet):
    """Coupon CRUD for administrators plus the public ``validate`` action."""

    queryset = Coupon.objects.all()
    serializer_class = CouponSerializer
    permission_classes = [IsAdminRole]
    pagination_class = StandardResultsSetPagination

    def get_permissions(self):
        if self.action == 'validate':
            return [AllowAny()]
        return super().get_permissions()

    def perform_create(self, serializer):
        self._save_unique(serializer)

    def perform_update(self, serializer):
        self._save_unique(serializer)

    def _save_unique(self, serializer):
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError:
            raise Conflict('Coupon code already exists.')

    @action(detail=False, methods=['post'])
    def validate(self, request):
        """Check a code against an order total and report the discount it grants."""
        payload = CouponValidateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        coupon = find_coupon(payload.validated_data['code'])
        if coupon is None:
            raise NotFound('Coupon code does not exist.')

        if not coupon.is_valid():
            raise ValidationError({'code': 'Coupon has expired or has no uses left.'})

        order_total = to_number(payload.validated_data.get('orderTotal'))
        if order_total < coupon.min_order_value:
            raise ValidationError({
                'orderTotal': f'Minimum order value for this coupon is {coupon.min_order_value:,.0f}.'
            })

        return Response({
            'success': True,
            'coupon': {
                'id': coupon.id,
                'code': coupon.code,
                'type': coupon.type,
                'value': coupon.value,
            },
            'discount': coupon.calculate_discount(order_total),
        }, status=status.HTTP_200_OK)
