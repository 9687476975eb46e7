"""Content app configuration."""

from django.apps import AppConfig


class ContentConfig(AppConfig):
    """Django app config for storefront news and banners."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'content'
