"""Database model for discount coupons."""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Coupon(models.Model):
    """Discount code managed from the back office.

    ``used_count`` only moves up, and only from the order-creation flow.
    """

    TYPE_FIXED = 'fixed'
    TYPE_PERCENT = 'percent'
    TYPE_CHOICES = (
        (TYPE_FIXED, 'Fixed amount'),
        (TYPE_PERCENT, 'Percentage'),
    )

    code = models.CharField(max_length=64, unique=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    value = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    max_uses = models.PositiveIntegerField(null=True, blank=True)  # null = unlimited
    used_count = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField()
    valid_to = models.DateTimeField()
    min_order_value = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'valid_from', 'valid_to'], name='coupon_active_window_idx'),
        ]

    def __str__(self):
        return self.code

    @staticmethod
    def normalize_code(code) -> str:
        return str(code or '').strip().upper()

    def save(self, *args, **kwargs):
        self.code = self.normalize_code(self.code)
        super().save(*args, **kwargs)

    def is_valid(self, now=None) -> bool:
        """Active, inside the inclusive validity window, and under the usage cap."""
        now = now or timezone.now()
        return (
            self.is_active
            and self.valid_from <= now <= self.valid_to
            and (self.max_uses is None or self.used_count < self.max_uses)
        )

    def calculate_discount(self, order_total, now=None) -> Decimal:
        """Discount for ``order_total``; never more than the total itself."""
        order_total = Decimal(order_total)
        if not self.is_valid(now):
            return Decimal('0')
        if order_total < self.min_order_value:
            return Decimal('0')

        if self.type == self.TYPE_FIXED:
            return min(self.value, order_total)
        return min(order_total * self.value / Decimal('100'), order_total)
