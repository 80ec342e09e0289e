"""
orders/store.py -- SQLAlchemy Core persistence layer for orders.

Pattern: Repository + Data Mapper (same as auth/store.py).
OrderRepository is the capability contract; OrderStore is the SQL backend.

The orders table lives in the same database as users (one DATABASE_URL) but
the store never joins across tables: the denormalized owner on Order.user is
filled in by OrderService, which already holds a UserRepository.

Ordering: find_by_user_id returns orders in the order they were first saved.
A monotonically increasing seq column records that order; re-saving an
existing order (a status change) keeps its original seq.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, func, select
from sqlalchemy.engine import Engine

from core.database import make_engine
from orders.models import Order, OrderStatus


class OrderRepository(Protocol):
    """What services need from an order backend. NotFound is signalled by None."""

    def save(self, order: Order) -> None: ...

    def find_by_id(self, order_id: uuid.UUID) -> Order | None: ...

    def find_by_user_id(self, user_id: uuid.UUID) -> list[Order]: ...

    def count_by_status(self) -> dict[str, int]: ...


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_orders = Table(
    "orders",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("seq", Integer, nullable=False, index=True),  # insertion order
    Column("user_id", String(36), nullable=False, index=True),
    Column("item_id", String(64), nullable=False),
    Column("quantity", Integer, nullable=False, server_default="1"),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderStore:
    """SQL-backed OrderRepository.

    Usage:
        store = OrderStore("sqlite:///threat_intel.db")
        store.save(order)
        orders = store.find_by_user_id(user.id)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def save(self, order: Order) -> None:
        """Insert the order, or update its mutable columns if the id exists."""
        values = {
            "user_id": str(order.user_id),
            "item_id": order.item_id,
            "quantity": order.quantity,
            "status": OrderStatus(order.status).value,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }
        with self.engine.begin() as conn:
            existing = conn.execute(select(_orders.c.seq).where(_orders.c.id == str(order.id))).fetchone()
            if existing is None:
                next_seq = conn.execute(select(func.coalesce(func.max(_orders.c.seq), 0) + 1)).scalar()
                conn.execute(_orders.insert().values(id=str(order.id), seq=next_seq, **values))
            else:
                conn.execute(_orders.update().where(_orders.c.id == str(order.id)).values(**values))

    def find_by_id(self, order_id: uuid.UUID) -> Order | None:
        """Look up an order by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_orders.select().where(_orders.c.id == str(order_id))).fetchone()
        return _row_to_order(row) if row is not None else None

    def find_by_user_id(self, user_id: uuid.UUID) -> list[Order]:
        """Return every order owned by user_id, oldest insert first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _orders.select().where(_orders.c.user_id == str(user_id)).order_by(_orders.c.seq)
            ).fetchall()
        return [_row_to_order(r) for r in rows]

    def count_by_status(self) -> dict[str, int]:
        """Return {status: count} across all orders, zero-filled for every status."""
        counts = {s.value: 0 for s in OrderStatus}
        with self.engine.connect() as conn:
            rows = conn.execute(select(_orders.c.status, func.count()).group_by(_orders.c.status)).fetchall()
        for status, count in rows:
            counts[status] = count
        return counts

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_order(row) -> Order:
    return Order(
        id=uuid.UUID(row.id),
        user_id=uuid.UUID(row.user_id),
        item_id=row.item_id,
        quantity=row.quantity,
        status=OrderStatus(row.status),
        created_at=datetime.fromisoformat(row.created_at),
        updated_at=datetime.fromisoformat(row.updated_at),
    )
