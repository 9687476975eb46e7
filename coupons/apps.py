"""Coupons app configuration."""

from django.apps import AppConfig


class CouponsConfig(AppConfig):
    """Django app config for discount coupons."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'coupons'
