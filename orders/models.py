"""
orders/models.py -- Domain dataclasses for catalog orders.

Pure data containers. Status changes go through orders/workflow.py, which
owns the transition table; nothing else should assign Order.status.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from auth.models import User

# Purchasable item identifiers. Anything else is rejected at order creation.
CATALOG: frozenset[str] = frozenset({"intel-basic", "intel-premium", "intel-enterprise"})


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """An order for one catalog item, owned by exactly one user.

    user is the denormalized owner. Stores leave it None; OrderService fills
    it in for single-order reads.
    """

    user_id: uuid.UUID
    item_id: str
    quantity: int
    status: OrderStatus = OrderStatus.pending
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    user: Optional[User] = None


@dataclass(frozen=True, slots=True)
class OrderReceipt:
    """What a caller gets back from a successful create_order."""

    order_id: uuid.UUID
    status: OrderStatus
