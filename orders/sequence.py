"""Named counters backed by the database.

The increment is executed by the database (``seq = seq + 1``) inside a
transaction, so two processes can never be handed the same value.
"""

from django.db import transaction
from django.db.models import F

from .models import Counter


def next_value(name: str) -> int:
    """Increment counter ``name`` and return its new value (1 for a fresh counter).

    Database errors propagate; no stale value is ever returned.
    """
    with transaction.atomic():
        Counter.objects.get_or_create(name=name)
        Counter.objects.filter(name=name).update(seq=F('seq') + 1)
        # The UPDATE holds the row lock until commit, so this read sees our own increment.
        return Counter.objects.values_list('seq', flat=True).get(name=name)

