"""MoMo redirect-gateway adapter.

Flow: ``create_payment`` asks MoMo for a hosted payment page, the payer is
sent back to ``REDIRECT_URL`` (advisory only) and MoMo reports the outcome
server-to-server on ``IPN_URL``. Only the signed IPN marks an order paid.

Signatures are hex HMAC-SHA256 over ``key=value`` pairs joined with ``&``
in alphabetical key order, keyed with the merchant secret.
"""

import hashlib
import hmac
import logging
import time

import requests
from django.conf import settings
from django.db import transaction

from core.exceptions import PaymentGatewayError, SignatureMismatch
from orders.models import Order, OrderStatus, OrderStatusHistory, PaymentStatus
from .models import PaymentTransaction

logger = logging.getLogger(__name__)

PROVIDER = 'momo'
ORDER_INFO = 'Pay with MoMo ATM'

CREATE_SIGNATURE_FIELDS = (
    'accessKey', 'amount', 'extraData', 'ipnUrl', 'orderId', 'orderInfo',
    'partnerCode', 'redirectUrl', 'requestId', 'requestType',
)
RESULT_SIGNATURE_FIELDS = (
    'accessKey', 'amount', 'extraData', 'message', 'orderId', 'orderInfo',
    'orderType', 'partnerCode', 'payType', 'requestId', 'responseTime',
    'resultCode', 'transId',
)


def _config():
    return settings.MOMO


def sign(raw: str, secret: str) -> str:
    return hmac.new(secret.encode('utf-8'), raw.encode('utf-8'), hashlib.sha256).hexdigest()


def _raw(values, fields, access_key):
    """``key=value&...`` over ``fields``; ``values`` may be a dict or a QueryDict."""
    def text(name):
        value = access_key if name == 'accessKey' else values.get(name)
        return '' if value is None else str(value)
    return '&'.join(f'{name}={text(name)}' for name in fields)


def build_create_signature(payload, config=None) -> str:
    config = config or _config()
    return sign(_raw(payload, CREATE_SIGNATURE_FIELDS, config['ACCESS_KEY']), config['SECRET_KEY'])


def build_result_signature(payload, config=None) -> str:
    """Signature MoMo attaches to redirect and IPN results."""
    config = config or _config()
    return sign(_raw(payload, RESULT_SIGNATURE_FIELDS, config['ACCESS_KEY']), config['SECRET_KEY'])


def verify_result(payload, config=None) -> bool:
    supplied = str(payload.get('signature') or '')
    expected = build_result_signature(payload, config)
    return bool(supplied) and hmac.compare_digest(expected, supplied)


def create_payment(order) -> str:
    """Request a hosted payment page for ``order`` and return its URL.

    Raises PaymentGatewayError on network failure, a non-2xx answer or a
    response without ``payUrl``. There is no retry; the order stays unpaid.
    """
    config = _config()
    request_id = str(int(time.time() * 1000))
    payload = {
        'partnerCode': config['PARTNER_CODE'],
        'partnerName': 'MS Store',
        'storeId': config['PARTNER_CODE'],
        'requestId': request_id,
        'amount': int(order.grand_total),
        'orderId': order.code,
        'orderInfo': ORDER_INFO,
        'redirectUrl': config['REDIRECT_URL'],
        'ipnUrl': config['IPN_URL'],
        'lang': 'vi',
        'extraData': '',
        'requestType': config['REQUEST_TYPE'],
    }
    payload['signature'] = build_create_signature(payload, config)

    try:
        response = requests.post(config['ENDPOINT'], json=payload, timeout=config['TIMEOUT'])
        response.raise_for_status()
        body = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning('MoMo create-payment failed for order %s: %s', order.code, exc)
        raise PaymentGatewayError()

    pay_url = body.get('payUrl') if isinstance(body, dict) else None
    if not pay_url:
        message = body.get('message') if isinstance(body, dict) else None
        logger.warning('MoMo refused payment for order %s: %s', order.code, message)
        raise PaymentGatewayError(message or 'Could not create a MoMo payment link.')

    logger.info('MoMo payment link created for order %s (request %s)', order.code, request_id)
    return pay_url


def find_order(reference, queryset=None):
    """Look an order up by its code, then by internal id for numeric references."""
    queryset = queryset if queryset is not None else Order.objects.all()
    reference = str(reference or '').strip()
    if not reference:
        return None
    order = queryset.filter(code=reference).first()
    if order is None and reference.isdigit():
        order = queryset.filter(pk=int(reference)).first()
    return order


def handle_return(query):
    """Interpret the payer's redirect back from MoMo.

    Returns ``(order, error)`` for the result page. Nothing is persisted;
    the IPN is the authoritative signal.
    """
    if str(query.get('resultCode', '')) != '0':
        return None, query.get('message') or 'Payment failed.'
    if not verify_result(query):
        logger.warning('MoMo return signature mismatch for %s', query.get('orderId'))
        return None, 'Signature verification failed.'
    order = find_order(query.get('orderId'))
    return order, None


def handle_notification(payload):
    """Apply a MoMo IPN. Returns the order (or None if the result was not a success).

    Raises SignatureMismatch when the payload was not signed with our secret.
    Repeat notifications for an order that is already settled change nothing.
    A payment landing on a cancelled order is recorded and marked refunded.
    """
    if not verify_result(payload):
        logger.warning('MoMo IPN signature mismatch for %s', payload.get('orderId'))
        raise SignatureMismatch()

    if str(payload.get('resultCode', '')) != '0':
        logger.info('MoMo IPN for %s reported failure %s: %s',
                    payload.get('orderId'), payload.get('resultCode'), payload.get('message'))
        return None

    with transaction.atomic():
        order = find_order(payload.get('orderId'), Order.objects.select_for_update())
        if order is None:
            logger.warning('MoMo IPN for unknown order %s', payload.get('orderId'))
            return None
        if order.payment_status != PaymentStatus.UNPAID.value:
            return order

        trans_id = str(payload.get('transId') or '')
        message = str(payload.get('message') or '')[:255]
        cancelled = order.status == OrderStatus.CANCELLED.value
        note = f'MoMo payment received. Transaction id: {trans_id}'
        if cancelled:
            note += '. Order was already cancelled; amount is owed back.'

        order.payment_status = PaymentStatus.REFUNDED if cancelled else PaymentStatus.PAID
        order.save(update_fields=['payment_status', 'updated_at'])
        OrderStatusHistory.objects.create(
            order=order,
            status=order.status,
            note=note,
            updated_by='system',
        )
        PaymentTransaction.objects.create(
            order=order,
            provider=PROVIDER,
            kind=PaymentTransaction.KIND_PAYMENT,
            trans_id=trans_id,
            amount=order.grand_total,
            result_code=str(payload.get('resultCode')),
            message=message,
        )
        if cancelled:
            PaymentTransaction.objects.create(
                order=order,
                provider=PROVIDER,
                kind=PaymentTransaction.KIND_REFUND,
                trans_id=trans_id,
                amount=order.grand_total,
                message='Paid after cancellation',
            )
            logger.warning('MoMo payment %s arrived for cancelled order %s; refund recorded', trans_id, order.code)
            return order

    logger.info('Order %s marked paid by MoMo transaction %s', order.code, trans_id)
    return order
