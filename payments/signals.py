"""Payment side effects of order status changes."""

import logging

from django.dispatch import receiver

from orders.models import OrderStatus, PaymentStatus
from orders.signals import order_status_changed
from .models import PaymentTransaction

logger = logging.getLogger(__name__)

PAID_ON_ARRIVAL = {OrderStatus.DELIVERED.value, OrderStatus.RECEIVED.value}


@receiver(order_status_changed)
def sync_payment_status(sender, order, previous_status, **kwargs):
    """Keep ``payment_status`` in step with the order lifecycle.

    - cancelled while paid -> refunded, with a refund row in the ledger
    - delivered/received while unpaid -> paid (cash collected by the carrier)
    """
    if order.status == OrderStatus.CANCELLED.value:
        if order.payment_status != PaymentStatus.PAID.value:
            return
        order.payment_status = PaymentStatus.REFUNDED
        order.save(update_fields=['payment_status', 'updated_at'])
        PaymentTransaction.objects.create(
            order=order,
            provider=order.payment_method,
            kind=PaymentTransaction.KIND_REFUND,
            amount=order.grand_total,
            message='Refund due: order cancelled after payment',
        )
        logger.info('Order %s cancelled after payment; refund recorded', order.code)
        return

    if order.status in PAID_ON_ARRIVAL and order.payment_status == PaymentStatus.UNPAID.value:
        order.payment_status = PaymentStatus.PAID
        order.save(update_fields=['payment_status', 'updated_at'])
        PaymentTransaction.objects.create(
            order=order,
            provider=order.payment_method,
            kind=PaymentTransaction.KIND_PAYMENT,
            amount=order.grand_total,
            message=f'Collected on {order.status}',
        )
