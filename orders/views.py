"""Orders API views.

Checkout, the customer's own order list and detail, customer cancel /
confirm-received, and the admin status update, list and dashboard.
"""

from django.db.models import Prefetch
from django.utils.dateparse import parse_date
from rest_framework import viewsets, permissions, filters, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, NotFound, ValidationError
from rest_framework.response import Response

from accounts.permissions import IsAdminRole, actor_role
from products.views import StandardResultsSetPagination
from . import lifecycle
from .models import Order, OrderItem, OrderStatus
from .serializers import CheckoutSerializer, OrderSerializer, StatusUpdateSerializer
from .stats import dashboard


class OrderViewSet(viewsets.GenericViewSet):
    """Order API endpoints for customers and administrators.

    Customers create orders from their cart and see only their own orders.
    Administrators see every order and move orders through the lifecycle.
    """

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = StandardResultsSetPagination
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ['created_at', 'grand_total']
    ordering = ['-created_at', '-id']
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in ('all_orders', 'set_status', 'stats'):
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def _base_queryset(self):
        return (
            Order.objects.select_related('user', 'coupon')
            .prefetch_related(
                Prefetch('items', queryset=OrderItem.objects.select_related('product')),
                'status_history',
                'transactions',
            )
        )

    def get_queryset(self):
        return self._base_queryset().filter(user=self.request.user)

    def _paginated(self, queryset):
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    def _visible_order(self, pk):
        """Order ``pk`` if the caller owns it or is an administrator."""
        order = self._base_queryset().filter(pk=pk).first()
        if order is None:
            raise NotFound('Order not found.')
        if order.user_id != self.request.user.id and not self.request.user.is_admin:
            raise PermissionDenied('You do not have access to this order.')
        return order

    def list(self, request):
        """The authenticated customer's orders, newest first."""
        return self._paginated(self.get_queryset())

    @action(detail=False, methods=['get'], url_path='my-orders')
    def my_orders(self, request):
        return self.list(request)

    def retrieve(self, request, pk=None):
        order = self._visible_order(pk)
        return Response(self.get_serializer(order).data)

    def create(self, request):
        """Checkout: turn the cart into an order."""
        payload = CheckoutSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        order = lifecycle.create_order(
            user=request.user,
            shipping_info=data['shippingInfo'],
            payment_method=data.get('paymentMethod'),
            shipping_fee=data.get('shippingFee'),
            coupon_code=data.get('couponCode'),
        )
        order = self._base_queryset().get(pk=order.pk)
        return Response(
            {'success': True, 'message': 'Order placed successfully.', 'data': self.get_serializer(order).data},
            status=status.HTTP_201_CREATED,
        )

    def _customer_transition(self, request, pk, new_status, note):
        order = self._visible_order(pk)
        if order.user_id != request.user.id:
            raise PermissionDenied('Only the customer who placed the order can do this.')
        lifecycle.transition(order.pk, new_status, actor=request.user, role=lifecycle.ROLE_CUSTOMER, note=note)
        order = self._base_queryset().get(pk=order.pk)
        return Response({'success': True, 'data': self.get_serializer(order).data})

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Customer cancels their order while it is pending or processing."""
        return self._customer_transition(request, pk, OrderStatus.CANCELLED.value, 'Cancelled by customer')

    @action(detail=True, methods=['post'], url_path='confirm-received')
    def confirm_received(self, request, pk=None):
        """Customer confirms a delivered order arrived."""
        return self._customer_transition(request, pk, OrderStatus.RECEIVED.value, 'Customer confirmed receipt')

    @action(detail=True, methods=['patch'], url_path='status')
    def set_status(self, request, pk=None):
        """Admin-only: move the order to another status.

        Payload: { status: str, note?: str }
        """
        payload = StatusUpdateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        lifecycle.transition(
            pk,
            payload.validated_data['status'],
            actor=request.user,
            role=actor_role(request.user),
            note=payload.validated_data.get('note'),
        )
        order = self._base_queryset().get(pk=pk)
        return Response({'success': True, 'data': self.get_serializer(order).data})

    @action(detail=False, methods=['get'], url_path='all')
    def all_orders(self, request):
        """Admin-only: every order, optionally filtered by ``status``."""
        orders = self._base_queryset()
        status_filter = (request.query_params.get('status') or '').strip()
        if status_filter in OrderStatus.values:
            orders = orders.filter(status=status_filter)
        return self._paginated(orders)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Admin-only dashboard: users, orders by status, revenue and the last 7 days.

        Query: ``startDate`` and ``endDate`` (YYYY-MM-DD, both or neither).
        """
        start_raw = request.query_params.get('startDate')
        end_raw = request.query_params.get('endDate')
        start = end = None
        if start_raw and end_raw:
            try:
                start, end = parse_date(start_raw), parse_date(end_raw)
            except ValueError:
                start = end = None
            if start is None or end is None:
                raise ValidationError({'startDate': 'Dates must use the YYYY-MM-DD format.'})
            if start > end:
                raise ValidationError({'startDate': 'Start date must not be after end date.'})
        return Response({'success': True, 'data': dashboard(start, end)})
