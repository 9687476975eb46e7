"""Order lifecycle signals.

``order_status_changed`` is sent once per accepted transition, inside the
transaction that wrote it, with ``order``, ``previous_status``, ``actor``
and ``role``. Receivers that write to the database share that transaction.
"""

from django.dispatch import Signal

order_status_changed = Signal()
