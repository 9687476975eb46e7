"""API error types and the DRF exception handler.

Every failure leaves the API as ``{"success": false, "message": ..., "detail": ...}``
so the SPA can branch on a single flag.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InvalidTransition(APIException):
    """Order status change not permitted from the current state for this actor."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'


class Conflict(APIException):
    """Duplicate unique key (order code, coupon code)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class PaymentGatewayError(APIException):
    """Payment provider unreachable or returned a failure."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Payment provider is unavailable. Please try again.'
    default_code = 'payment_gateway_error'


class SignatureMismatch(APIException):
    """Inbound payment notification failed signature verification."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid signature.'
    default_code = 'invalid_signature'


def _first_message(detail):
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _first_message(detail['detail'])
        for key, value in detail.items():
            msg = _first_message(value)
            if msg:
                return msg if key == 'non_field_errors' else f'{key}: {msg}'
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    """Wrap DRF's default error response in the success/message envelope."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = response.data
    if response.status_code >= 500:
        logger.warning('API error %s: %s', response.status_code, detail)

    response.data = {
        'success': False,
        'message': _first_message(detail),
        'detail': detail.get('detail', detail) if isinstance(detail, dict) else detail,
    }
    return response
