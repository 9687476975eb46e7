"""Payment ledger kept alongside orders."""

from django.db import models
from orders.models import Order


class PaymentTransaction(models.Model):
    """One money movement reported by (or owed to) a payment provider."""

    KIND_PAYMENT = 'payment'
    KIND_REFUND = 'refund'
    KIND_CHOICES = (
        (KIND_PAYMENT, 'Payment'),
        (KIND_REFUND, 'Refund'),
    )

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='transactions')
    provider = models.CharField(max_length=32)
    kind = models.CharField(max_length=10, choices=KIND_CHOICES, default=KIND_PAYMENT)
    trans_id = models.CharField(max_length=64, blank=True, default='')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    result_code = models.CharField(max_length=16, blank=True, default='')
    message = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.kind} {self.amount} for {self.order.code}"
