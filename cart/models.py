"""Database models for shopping carts."""

from django.db import models
from django.conf import settings
from products.models import Product


class ShoppingCart(models.Model):
    """Shopping cart owned by an authenticated user."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart of {self.user.username}"

    @property
    def total_price(self):
        return sum(item.subtotal for item in self.items.all())


class ShoppingCartItem(models.Model):
    """Line item inside a shopping cart; one line per product and colour."""

    cart = models.ForeignKey(ShoppingCart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE)
    qty = models.PositiveIntegerField(default=1)
    selected_color = models.CharField(max_length=64, blank=True, default='')

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['cart', 'product', 'selected_color'], name='uniq_cart_line'),
        ]

    def __str__(self):
        return f"{self.qty} x {self.product.name}"

    @property
    def subtotal(self):
        return self.product.price * self.qty
