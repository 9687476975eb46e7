"""Database models for orders, their line snapshots and status history."""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class OrderStatus(models.TextChoices):
    """Order lifecycle, in forward order; ``cancelled`` may be reached from the open states."""

    PENDING = 'pending', 'Pending confirmation'
    PROCESSING = 'processing', 'Processing'
    HANDOVER_TO_CARRIER = 'handover_to_carrier', 'Handed over to carrier'
    SHIPPING = 'shipping', 'Shipping'
    DELIVERED = 'delivered', 'Delivered'
    RECEIVED = 'received', 'Received by customer'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentMethod(models.TextChoices):
    COD = 'cod', 'Cash on delivery'
    BANK_TRANSFER = 'bank_transfer', 'Bank transfer'
    PAYOO = 'payoo', 'Payoo'
    MOMO = 'momo', 'MoMo'
    ZALOPAY = 'zalopay', 'ZaloPay'


class PaymentStatus(models.TextChoices):
    UNPAID = 'unpaid', 'Unpaid'
    PAID = 'paid', 'Paid'
    REFUNDED = 'refunded', 'Refunded'


class Counter(models.Model):
    """Named integer sequence; ``seq`` holds the last value handed out."""

    name = models.CharField(max_length=64, primary_key=True)
    seq = models.BigIntegerField(default=0)

    def __str__(self):
        return f"{self.name}={self.seq}"


class Order(models.Model):
    """A customer's order.

    Shipping details and totals are copied onto the row at checkout so the
    order never changes when the catalogue or the user profile does.
    """

    code = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')

    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    email = models.CharField(max_length=255, blank=True, default='')
    address = models.CharField(max_length=500)
    city = models.CharField(max_length=120, blank=True, default='')
    district = models.CharField(max_length=120, blank=True, default='')
    ward = models.CharField(max_length=120, blank=True, default='')
    note = models.TextField(blank=True, default='')

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.COD)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    status = models.CharField(max_length=32, choices=OrderStatus.choices, default=OrderStatus.PENDING)

    sub_total = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    total = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    savings = models.DecimalField(max_digits=14, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    shipping_fee = models.DecimalField(max_digits=14, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    grand_total = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])

    coupon = models.ForeignKey('coupons.Coupon', on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='order_user_created_idx'),
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]

    def __str__(self):
        return f"Order {self.code}"

    @property
    def shipping_info(self):
        return {
            'fullName': self.full_name,
            'phone': self.phone,
            'email': self.email,
            'address': self.address,
            'city': self.city,
            'district': self.district,
            'ward': self.ward,
            'note': self.note,
        }


class OrderItem(models.Model):
    """Line snapshot taken from the cart at checkout."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('products.Product', on_delete=models.PROTECT, related_name='+')
    name = models.CharField(max_length=255)
    image = models.CharField(max_length=500, blank=True, default='')
    price = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    old_price = models.DecimalField(max_digits=14, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    selected_color = models.CharField(max_length=64, blank=True, default='')

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity} x {self.name} ({self.order.code})"


class OrderStatusHistory(models.Model):
    """Append-only audit trail entry for an order."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='status_history')
    status = models.CharField(max_length=32, choices=OrderStatus.choices)
    note = models.TextField(blank=True, default='')
    updated_by = models.CharField(max_length=64, null=True, blank=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['id']
        verbose_name_plural = "Order status history"

    def __str__(self):
        return f"{self.order.code}: {self.status}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Status history entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Status history entries cannot be deleted.")
