"""Order creation and status progression.

Views call into this module; it owns the checkout transaction, the order
code assignment and the (status, role) transition table.
"""

import logging
import random
import time

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from cart.models import ShoppingCart
from core.exceptions import Conflict, InvalidTransition
from coupons.evaluator import find_coupon, increment_used_count
from products.models import Product, ProductColor
from .models import Order, OrderItem, OrderStatus, OrderStatusHistory, PaymentMethod
from .sequence import next_value
from .signals import order_status_changed
from .totals import compute, quantize, to_number

logger = logging.getLogger(__name__)

ORDER_COUNTER = 'order'
CODE_PREFIX = 'MS'

ROLE_CUSTOMER = 'customer'
ROLE_ADMIN = 'admin'

STATUS_LABELS = {
    OrderStatus.PENDING.value: 'Order placed',
    OrderStatus.PROCESSING.value: 'Order is being processed',
    OrderStatus.HANDOVER_TO_CARRIER.value: 'Handed over to the carrier',
    OrderStatus.SHIPPING.value: 'Out for delivery',
    OrderStatus.DELIVERED.value: 'Delivered',
    OrderStatus.RECEIVED.value: 'Customer confirmed receipt',
    OrderStatus.CANCELLED.value: 'Order cancelled',
}

FORWARD_SEQUENCE = [
    OrderStatus.PENDING.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.HANDOVER_TO_CARRIER.value,
    OrderStatus.SHIPPING.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.RECEIVED.value,
]
TERMINAL_STATUSES = {OrderStatus.RECEIVED.value, OrderStatus.CANCELLED.value}


def _admin_targets(current):
    if current in TERMINAL_STATUSES:
        return frozenset()
    later = FORWARD_SEQUENCE[FORWARD_SEQUENCE.index(current) + 1:]
    return frozenset(later) | {OrderStatus.CANCELLED.value}


# (current status, role) -> statuses that role may move the order to.
ALLOWED_TRANSITIONS = {
    (OrderStatus.PENDING.value, ROLE_CUSTOMER): frozenset({OrderStatus.CANCELLED.value}),
    (OrderStatus.PROCESSING.value, ROLE_CUSTOMER): frozenset({OrderStatus.CANCELLED.value}),
    (OrderStatus.DELIVERED.value, ROLE_CUSTOMER): frozenset({OrderStatus.RECEIVED.value}),
}
ALLOWED_TRANSITIONS.update({
    (status, ROLE_ADMIN): _admin_targets(status) for status in OrderStatus.values
})


def is_allowed(current, new_status, role) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get((current, role), frozenset())


def format_code(seq: int) -> str:
    return f'{CODE_PREFIX}{seq:06d}'


def fallback_code() -> str:
    """Timestamp-derived code used once the sequential codes keep colliding."""
    millis = str(int(time.time() * 1000))
    return f'{CODE_PREFIX}{millis[-8:]}{random.randint(0, 999):03d}'


def _clean(value) -> str:
    return str(value or '').strip()


def build_shipping(raw) -> dict:
    """Trim the shipping form and check the required fields."""
    raw = raw or {}
    shipping = {
        'full_name': _clean(raw.get('fullName') or raw.get('full_name')),
        'phone': _clean(raw.get('phone')),
        'email': _clean(raw.get('email')),
        'address': _clean(raw.get('address')),
        'city': _clean(raw.get('city')),
        'district': _clean(raw.get('district')),
        'ward': _clean(raw.get('ward')),
        'note': _clean(raw.get('note')),
    }
    missing = [name for name in ('full_name', 'phone', 'address') if not shipping[name]]
    if missing:
        raise ValidationError({'shippingInfo': 'Full name, phone and address are required.'})
    return shipping


def normalize_payment_method(value) -> str:
    value = _clean(value).lower()
    return value if value in PaymentMethod.values else PaymentMethod.COD


def _snapshot_line(cart_item, product) -> dict:
    price = to_number(product.price)
    old_price = to_number(product.old_price)
    return {
        'product': product,
        'name': product.name,
        'image': product.image or '',
        'price': price,
        'old_price': old_price if old_price > price else price,
        'quantity': int(cart_item.qty),
        'selected_color': cart_item.selected_color or '',
    }


def _check_stock(line, colors_by_product):
    product = line['product']
    if not product.is_active or not product.in_stock:
        raise ValidationError({'items': f'"{product.name}" is out of stock.'})

    color_name = line['selected_color']
    available = product.stock
    colors = colors_by_product.get(product.id, {})
    if colors:
        if color_name in colors:
            available = colors[color_name].stock
        elif color_name:
            raise ValidationError({'items': f'Colour "{color_name}" is not available for "{product.name}".'})

    if available < line['quantity']:
        raise ValidationError({
            'items': f'Not enough stock for "{product.name}" ({color_name or "no colour"}). Available: {available}.'
        })


def _adjust_stock(product_id, color_name, delta):
    """Apply ``delta`` to product (and colour) stock and refresh ``in_stock``."""
    Product.objects.filter(pk=product_id).update(stock=F('stock') + delta)
    if color_name:
        ProductColor.objects.filter(product_id=product_id, name=color_name).update(stock=F('stock') + delta)

    product = Product.objects.get(pk=product_id)
    color_stocks = list(product.colors.values_list('stock', flat=True))
    if delta < 0:
        sold_out = product.stock <= 0 or (color_stocks and all(s <= 0 for s in color_stocks))
        if sold_out and product.in_stock:
            Product.objects.filter(pk=product_id).update(in_stock=False)
    elif product.stock > 0 and not product.in_stock:
        Product.objects.filter(pk=product_id).update(in_stock=True)


def restore_stock(order):
    """Put the quantities of a cancelled order back on the shelf."""
    for item in order.items.all():
        _adjust_stock(item.product_id, item.selected_color, item.quantity)


def _place(user, code, shipping, method, shipping_fee, coupon_code):
    """Write one order under ``code`` in its own transaction.

    Stock is checked and decremented under row locks, the cart is emptied and
    the coupon usage is counted only once the transaction commits.
    """
    with transaction.atomic():
        cart = ShoppingCart.objects.select_for_update().filter(user=user).first()
        cart_items = list(cart.items.select_related('product').order_by('id')) if cart else []
        if not cart_items:
            raise ValidationError({'items': 'Your cart is empty.'})

        product_ids = sorted({ci.product_id for ci in cart_items})
        products = {p.id: p for p in Product.objects.select_for_update().filter(id__in=product_ids)}
        colors_by_product = {}
        for color in ProductColor.objects.filter(product_id__in=product_ids):
            colors_by_product.setdefault(color.product_id, {})[color.name] = color

        lines = [_snapshot_line(ci, products[ci.product_id]) for ci in cart_items]
        for line in lines:
            _check_stock(line, colors_by_product)

        coupon = find_coupon(coupon_code) if coupon_code else None
        if coupon is not None and not coupon.is_valid():
            coupon = None
        totals = compute(lines, coupon=coupon, shipping_fee=shipping_fee)
        if coupon is not None and totals.discount <= 0:
            coupon = None

        order = Order.objects.create(
            code=code,
            user=user,
            payment_method=method,
            coupon=coupon,
            **shipping,
            **{name: quantize(value) for name, value in totals.as_dict().items()},
        )
        OrderItem.objects.bulk_create([
            OrderItem(order=order, **line) for line in lines
        ])
        OrderStatusHistory.objects.create(
            order=order,
            status=OrderStatus.PENDING,
            note=STATUS_LABELS[OrderStatus.PENDING.value],
            updated_by=str(user.pk),
        )

        for line in lines:
            _adjust_stock(line['product'].id, line['selected_color'], -line['quantity'])

        cart.items.all().delete()

        if coupon is not None:
            coupon_id = coupon.pk
            transaction.on_commit(lambda: increment_used_count(coupon_id))
    return order


def create_order(user, shipping_info, payment_method=PaymentMethod.COD, shipping_fee=0, coupon_code=None):
    """Turn the user's cart into an order.

    The sequence value is drawn before the checkout transaction opens, so the
    counter row is never locked for the length of a checkout. A code that is
    already taken rolls the attempt back and the next value is tried.
    """
    shipping = build_shipping(shipping_info)
    method = normalize_payment_method(payment_method)
    attempts = settings.ORDER_CODE_MAX_ATTEMPTS

    order = None
    for attempt in range(1, attempts + 1):
        code = format_code(next_value(ORDER_COUNTER))
        try:
            order = _place(user, code, shipping, method, shipping_fee, coupon_code)
            break
        except IntegrityError:
            if not Order.objects.filter(code=code).exists():
                raise
            logger.info('Order code %s already taken (attempt %s/%s)', code, attempt, attempts)
            time.sleep(settings.ORDER_CODE_RETRY_DELAY)

    if order is None:
        code = fallback_code()
        logger.warning('Sequential order codes exhausted after %s attempts, using %s', attempts, code)
        try:
            order = _place(user, code, shipping, method, shipping_fee, coupon_code)
        except IntegrityError:
            if not Order.objects.filter(code=code).exists():
                raise
            raise Conflict('Could not assign a unique order code. Please try again.')

    logger.info('Order %s created for user %s (grand total %s)', order.code, user.pk, order.grand_total)
    return order


def transition(order_id, new_status, actor, role, note=None):
    """Move an order to ``new_status`` if ``role`` may do so from its current status."""
    if new_status not in OrderStatus.values:
        raise ValidationError({'status': f'Unknown status "{new_status}".'})

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise NotFound('Order not found.')

        previous = order.status
        if not is_allowed(previous, new_status, role):
            raise InvalidTransition(
                f'Cannot move order {order.code} from {previous} to {new_status}.'
            )

        order.status = new_status
        order.save(update_fields=['status', 'updated_at'])
        OrderStatusHistory.objects.create(
            order=order,
            status=new_status,
            note=_clean(note) or STATUS_LABELS[new_status],
            updated_by=str(getattr(actor, 'pk', actor) or role),
            updated_at=timezone.now(),
        )

        if new_status == OrderStatus.CANCELLED:
            restore_stock(order)

        order_status_changed.send(
            sender=Order, order=order, previous_status=previous, actor=actor, role=role,
        )

    logger.info('Order %s: %s -> %s by %s', order.code, previous, new_status, role)
    return order
