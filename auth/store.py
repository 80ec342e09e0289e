"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as orders/store.py).
UserRepository is the capability contract services depend on; UserStore is
the SQL backend that satisfies it structurally. _row_to_user is the mapper.
Service and route code never touches SQL directly.

Each public method runs in its own connection and commits before returning,
so every call is atomic from the caller's point of view.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or orders/.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Protocol

from sqlalchemy import Boolean, Column, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import User
from auth.roles import Role
from core.database import make_engine


class UserRepository(Protocol):
    """What services need from a user backend. NotFound is signalled by None."""

    def save(self, user: User) -> None: ...

    def find_by_id(self, user_id: uuid.UUID) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def list_users(self) -> list[User]: ...


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),  # UUID4 text form
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default="viewer"),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("created_at", String(32), nullable=False),  # ISO 8601 UTC
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """SQL-backed UserRepository.

    Usage:
        store = UserStore("sqlite:///threat_intel.db")
        store.save(create_user("a@example.com", "secret1", Role.viewer))
        user = store.find_by_email("a@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def save(self, user: User) -> None:
        """Insert the user, or update every mutable column if the id exists.

        Raises sqlalchemy.exc.IntegrityError if another user already holds
        the email. The error is left for the caller to surface.
        """
        values = {
            "email": user.email,
            "password_hash": user.password_hash,
            "role": Role(user.role).value,
            "is_active": bool(user.is_active),
            "created_at": user.created_at.isoformat(),
            "updated_at": user.updated_at.isoformat(),
        }
        with self.engine.begin() as conn:
            existing = conn.execute(_users.select().where(_users.c.id == str(user.id))).fetchone()
            if existing is None:
                conn.execute(_users.insert().values(id=str(user.id), **values))
            else:
                conn.execute(_users.update().where(_users.c.id == str(user.id)).values(**values))

    def find_by_id(self, user_id: uuid.UUID) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == str(user_id))).fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users ordered by email. Admin-only operation."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.email)).fetchall()
        return [_row_to_user(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=uuid.UUID(row.id),
        email=row.email,
        password_hash=row.password_hash,
        role=Role(row.role),
        is_active=bool(row.is_active),
        created_at=datetime.fromisoformat(row.created_at),
        updated_at=datetime.fromisoformat(row.updated_at),
    )
