"""
orders/workflow.py -- Order status state machine.

    pending ──confirm──> confirmed ──complete──> completed
       │                     │
       └──────cancel─────────┴──────> cancelled

completed and cancelled are terminal. Every accepted transition refreshes
updated_at. An illegal transition raises InvalidTransitionError and leaves
the order untouched.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from core.errors import InvalidQuantityError, InvalidTransitionError
from orders.models import Order, OrderStatus

logger = logging.getLogger("threatintel.orders")

_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.confirmed, OrderStatus.cancelled}),
    OrderStatus.confirmed: frozenset({OrderStatus.completed, OrderStatus.cancelled}),
    OrderStatus.completed: frozenset(),
    OrderStatus.cancelled: frozenset(),
}


def can_transition(from_status: OrderStatus, to_status: OrderStatus) -> bool:
    """Return True if the transition table allows from_status -> to_status."""
    return to_status in _TRANSITIONS[OrderStatus(from_status)]


def is_terminal(status: OrderStatus) -> bool:
    return not _TRANSITIONS[OrderStatus(status)]


class OrderWorkflow:
    """Wraps one Order and moves it through the status graph.

    Usage:
        workflow = OrderWorkflow.create(user.id, "intel-basic", 1)
        workflow.confirm()
        store.save(workflow.order)
    """

    def __init__(self, order: Order) -> None:
        self.order = order

    @classmethod
    def create(cls, user_id: uuid.UUID, item_id: str, quantity: int) -> "OrderWorkflow":
        """Start a new order at pending with a fresh id and timestamps."""
        if quantity < 1:
            raise InvalidQuantityError()
        now = datetime.now(timezone.utc)
        return cls(
            Order(
                user_id=user_id,
                item_id=item_id,
                quantity=quantity,
                status=OrderStatus.pending,
                created_at=now,
                updated_at=now,
            )
        )

    @property
    def status(self) -> OrderStatus:
        return self.order.status

    def confirm(self) -> Order:
        return self._move(OrderStatus.confirmed)

    def complete(self) -> Order:
        return self._move(OrderStatus.completed)

    def cancel(self) -> Order:
        return self._move(OrderStatus.cancelled)

    def _move(self, target: OrderStatus) -> Order:
        current = self.order.status
        if not can_transition(current, target):
            raise InvalidTransitionError(f"Cannot move order from {current.value} to {target.value}.")
        self.order.status = target
        self.order.updated_at = datetime.now(timezone.utc)
        logger.debug("Order %s: %s -> %s", self.order.id, current.value, target.value)
        return self.order
