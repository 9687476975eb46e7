"""Coupon lookup and usage accounting used by checkout."""

import logging

from django.db.models import F

from .models import Coupon

logger = logging.getLogger(__name__)


def find_coupon(code):
    """Return the coupon for ``code`` (case-insensitive) or None."""
    normalized = Coupon.normalize_code(code)
    if not normalized:
        return None
    return Coupon.objects.filter(code=normalized).first()


def discount_for(coupon, order_total):
    """Discount ``coupon`` grants on ``order_total``; 0 when there is no coupon."""
    if coupon is None:
        return 0
    return coupon.calculate_discount(order_total)


def increment_used_count(coupon_id):
    """Count one successful application.

    Runs as a single UPDATE so concurrent checkouts never lose an increment.
    The count is not given back when the order is later cancelled.
    """
    updated = Coupon.objects.filter(pk=coupon_id).update(used_count=F('used_count') + 1)
    if not updated:
        logger.warning('Coupon %s vanished before its usage could be recorded', coupon_id)
    return updated
