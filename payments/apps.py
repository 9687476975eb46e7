"""Payments app configuration and signal registration."""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Django app config for payments; hooks into order status changes."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'payments'

    def ready(self):
        import payments.signals  # noqa: F401
