"""Reviews app configuration."""

from django.apps import AppConfig


class ReviewsConfig(AppConfig):
    """Django app config for product reviews."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'reviews'
