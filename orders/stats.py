"""Back-office dashboard figures.

Revenue counts every order that was not cancelled, paid or not, valued at
its grand total. Day boundaries follow the project time zone.
"""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from .models import Order, OrderStatus

ZERO = Decimal('0')


def _in_range(queryset, field, start, end):
    if start is None or end is None:
        return queryset
    return queryset.filter(**{f'{field}__date__gte': start, f'{field}__date__lte': end})


def dashboard(start=None, end=None, today=None, days=7):
    """Users, orders and revenue, optionally restricted to ``start``..``end`` (inclusive dates)."""
    today = today or timezone.localdate()
    shoppers = get_user_model().objects.filter(role='user')
    orders = Order.objects.all()
    ranged_orders = _in_range(orders, 'created_at', start, end)

    by_status = dict.fromkeys(OrderStatus.values, 0)
    for row in ranged_orders.values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    revenue = ranged_orders.exclude(status=OrderStatus.CANCELLED).aggregate(
        total=Sum('grand_total'), orders=Count('id'), average=Avg('grand_total'),
    )

    first_day = today - timedelta(days=days - 1)
    daily = {
        row['day']: row
        for row in orders.exclude(status=OrderStatus.CANCELLED)
        .filter(created_at__date__gte=first_day, created_at__date__lte=today)
        .annotate(day=TruncDate('created_at'))
        .values('day')
        .annotate(orders=Count('id'), revenue=Sum('grand_total'))
    }
    last_days = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        row = daily.get(day, {})
        last_days.append({
            'date': day.isoformat(),
            'orders': row.get('orders', 0),
            'revenue': row.get('revenue') or ZERO,
        })

    return {
        'users': {
            'total': shoppers.count(),
            'in_range': _in_range(shoppers, 'date_joined', start, end).count(),
            'today': shoppers.filter(date_joined__date=today).count(),
        },
        'orders': {
            'total': orders.count(),
            'in_range': ranged_orders.count(),
            'today': orders.filter(created_at__date=today).count(),
            'by_status': by_status,
        },
        'revenue': {
            'total': revenue['total'] or ZERO,
            'orders': revenue['orders'],
            'average': Decimal(str(revenue['average'] or 0)).quantize(Decimal('0.01')),
        },
        'last_days': last_days,
    }
