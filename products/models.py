"""Database models for the product catalog, brands and per-colour stock."""

from django.db import models
from django.utils.text import slugify


class ProductCategory(models.Model):
    """Product category with optional parent-child hierarchy."""

    parent_category = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='subcategories')
    category_name = models.CharField(max_length=255)

    def __str__(self):
        return self.category_name

    class Meta:
        verbose_name_plural = "Product Categories"


class Brand(models.Model):
    """Manufacturer shown on product cards; hidden rather than deleted."""

    name = models.CharField(max_length=120, unique=True)
    slug = models.SlugField(max_length=140, unique=True, blank=True)
    description = models.TextField(blank=True, default='')
    image = models.CharField(max_length=500, blank=True, default='')
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sort_order', '-created_at']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.name = (self.name or '').strip()
        self.slug = slugify(self.name) or slugify(self.name, allow_unicode=True)
        super().save(*args, **kwargs)


class Product(models.Model):
    """Sellable product.

    ``price`` is the current (sale) price; ``old_price`` is the list price
    shown struck through when the product is on sale.
    """

    category = models.ForeignKey(ProductCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    brand = models.ForeignKey(Brand, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=64, blank=True, default='')
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(max_digits=14, decimal_places=2)
    old_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    # Image storage is external; the catalogue keeps the public URL only.
    image = models.CharField(max_length=500, blank=True, default='')
    stock = models.IntegerField(default=0)
    in_stock = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['is_active', 'category'], name='product_active_category_idx'),
        ]


class ProductColor(models.Model):
    """Stock kept for one colour of a product (e.g. Black, White)."""

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='colors')
    name = models.CharField(max_length=64)
    stock = models.IntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['product', 'name'], name='uniq_product_color'),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.name}"
