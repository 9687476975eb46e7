"""MoMo payment endpoints.

- ``POST momo/create/``: owner asks for a payment link for one of their orders
- ``GET momo/return/``: browser redirect back from MoMo, forwarded to the SPA
- ``POST momo/ipn/``: server-to-server result notification
"""

from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import OrderStatus, PaymentStatus
from . import momo
from .serializers import MomoCreateSerializer


class MomoCreatePaymentView(APIView):
    """Start a MoMo payment for an unpaid order owned by the caller."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = MomoCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = momo.find_order(serializer.validated_data['orderId'])
        if order is None:
            raise NotFound('Order not found.')
        if order.user_id != request.user.id and not request.user.is_admin:
            raise PermissionDenied('You do not have access to this order.')
        if order.status == OrderStatus.CANCELLED.value:
            raise ValidationError({'orderId': 'This order has been cancelled.'})
        if order.payment_status != PaymentStatus.UNPAID.value:
            raise ValidationError({'orderId': 'This order has already been paid.'})
        if order.grand_total <= 0:
            raise ValidationError({'orderId': 'Order total must be greater than 0.'})

        pay_url = momo.create_payment(order)
        return Response({'success': True, 'payUrl': pay_url}, status=status.HTTP_200_OK)


class MomoReturnView(APIView):
    """Redirect the payer to the storefront result page."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        order, error = momo.handle_return(request.query_params)
        target = settings.MOMO['FRONTEND_RESULT_URL']
        if error:
            params = {'error': error}
        else:
            params = {
                'orderId': order.id if order is not None else request.query_params.get('orderId', ''),
                'transId': request.query_params.get('transId', ''),
            }
        return HttpResponseRedirect(f'{target}?{urlencode(params)}')


class MomoIPNView(APIView):
    """Receive MoMo's signed payment result. Answers 204 once applied."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        momo.handle_notification(request.data)
        return Response(status=status.HTTP_204_NO_CONTENT)
