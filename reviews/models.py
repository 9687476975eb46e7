"""Product reviews written by shoppers and moderated by administrators."""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from products.models import Product


class Review(models.Model):
    """One shopper's rating of one product, with an optional admin reply.

    Hidden reviews stay in the database; they are left out of the public
    product listing and its average rating.
    """

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, default='')
    images = models.JSONField(default=list, blank=True)
    reply_text = models.TextField(blank=True, default='')
    replied_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='review_replies',
    )
    replied_at = models.DateTimeField(null=True, blank=True)
    is_visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['product', 'user'], name='uniq_review_per_user'),
        ]
        indexes = [
            models.Index(fields=['product', 'is_visible'], name='review_product_visible_idx'),
        ]

    def __str__(self):
        return f"{self.user} on {self.product.name}: {self.rating}/5"
