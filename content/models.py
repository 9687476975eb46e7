"""Storefront editorial content: news articles and home-page banners."""

from django.db import models


class News(models.Model):
    title = models.CharField(max_length=255)
    summary = models.CharField(max_length=500, blank=True, default='')
    content = models.TextField()
    image = models.CharField(max_length=500, blank=True, default='')
    author = models.CharField(max_length=120, default='Admin')
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    views = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = "News"

    def __str__(self):
        return self.title


class Banner(models.Model):
    """Slide in the home-page carousel; lower ``sort_order`` shows first."""

    title = models.CharField(max_length=255)
    subtitle = models.CharField(max_length=255, blank=True, default='')
    discount_text = models.CharField(max_length=120, blank=True, default='')
    image = models.CharField(max_length=500)
    link = models.CharField(max_length=500, default='#')
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', '-created_at']

    def __str__(self):
        return self.title
