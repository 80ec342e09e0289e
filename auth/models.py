"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Hashing and
permission checks live in auth/credentials.py; token encoding lives in
auth/tokens.py; stores and routes do the rest.

Layer rule: no imports from api/ or orders/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from auth.roles import Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """An account that can log in and own orders.

    password_hash is always a bcrypt hash, never the plaintext. email is
    unique across the store. Users are never deleted; deactivation flips
    is_active instead.
    """

    email: str
    password_hash: str
    role: Role
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    is_active: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Token claims
#
# Two distinct variants rather than one class with an optional role: an
# access token always carries a role, a refresh token never does.
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """Verified contents of an access token. role is a snapshot at issuance."""

    user_id: uuid.UUID
    role: Role
    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """Verified contents of a refresh token. Carries no role."""

    user_id: uuid.UUID
    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Identity attached to request.state by the bearer-token dependency."""

    user_id: uuid.UUID
    role: Role


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Outcome of a successful login, registration, or refresh."""

    access_token: str
    refresh_token: str
    user: User
