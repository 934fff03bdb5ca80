"""
Order status lifecycle.

    Placed ──> Dispatched ──> Completed
      │            │
      │            └────────> Cancelled
      ├──────────────────────> Completed
      └──────────────────────> Cancelled

Completed and Cancelled are terminal. Re-submitting the current status is a
no-op.
"""

from __future__ import annotations

from datetime import datetime

from common.errors import IllegalTransition, InvalidStatus
from common.models import Order, OrderStatus
from common.timeutils import as_utc, utc_now

_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {
        OrderStatus.DISPATCHED,
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.DISPATCHED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Statuses a client may request; Placed is only ever set at creation.
_REQUESTABLE = {OrderStatus.DISPATCHED, OrderStatus.COMPLETED, OrderStatus.CANCELLED}


def parse_status(value: str) -> OrderStatus:
    """Map a requested status string onto a target status, or raise InvalidStatus."""
    try:
        status = OrderStatus(value)
    except ValueError:
        raise InvalidStatus(value) from None
    if status not in _REQUESTABLE:
        raise InvalidStatus(value)
    return status


def transition(
    order: Order,
    status: str | None = None,
    dispatch_date: datetime | None = None,
    now: datetime | None = None,
) -> Order:
    """
    Return a copy of ``order`` moved to ``status``.

    Entering Dispatched stamps ``dispatch_date`` (or ``now`` when none is
    given). An explicit ``dispatch_date`` on an already-dispatched order
    overwrites the stamp; on any other status it is ignored.
    """
    updated = order.model_copy(deep=True)
    current = order.status

    if status is not None:
        target = parse_status(status)
        if target != current:
            if target not in _VALID_TRANSITIONS[current]:
                raise IllegalTransition(current.value, target.value)
            updated.status = target
            if target is OrderStatus.DISPATCHED:
                updated.dispatch_date = as_utc(dispatch_date) if dispatch_date else (now or utc_now())
                return updated

    if updated.status is OrderStatus.DISPATCHED and dispatch_date is not None:
        updated.dispatch_date = as_utc(dispatch_date)
    return updated
