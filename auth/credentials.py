"""
auth/credentials.py -- Password hashing, account creation, permission checks.

Security design decisions:
  Passwords: bcrypt used directly (no passlib wrapper). bcrypt is slow,
       salted, and adaptive; the cost factor comes from
       Settings.bcrypt_rounds. gensalt() draws a fresh salt on every call, so
       two users with the same password never share a hash.

  bcrypt rejects inputs over 72 bytes (bcrypt >= 5 raises ValueError). The API
       layer caps passwords at 72 characters; any remaining failure from the
       library surfaces as HashingError.

  Timing equalization [C1]: dummy_verify() runs a bcrypt check against a
       throwaway hash so a login for an unknown email costs the same as one
       with a wrong password.

Layer rule: no imports from api/ or orders/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache

import bcrypt

from auth.models import User
from auth.roles import Role, parse_role, satisfies
from core.config import get_settings
from core.errors import HashingError

logger = logging.getLogger("threatintel.auth")


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Return a bcrypt hash of the plaintext password.

    Raises HashingError if bcrypt refuses the input or the cost factor.
    """
    cost = rounds if rounds is not None else get_settings().bcrypt_rounds
    try:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=cost)).decode("utf-8")
    except ValueError as exc:
        logger.error("bcrypt hashing failed: %s", exc)
        raise HashingError() from exc


def check_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext matches the bcrypt hash. Never raises."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Built lazily so importing this module does not pay a bcrypt round.
    return hash_password("threatintel_timing_dummy")


def dummy_verify(plain: str) -> None:
    """Burn one bcrypt comparison. Call when no user matched [C1]."""
    check_password(plain, _dummy_hash())


# ---------------------------------------------------------------------------
# Credential model operations
# ---------------------------------------------------------------------------


def create_user(email: str, password: str, role: Role | str) -> User:
    """Build a new active User with a fresh id and a salted password hash.

    The user is not persisted; callers save it through a UserRepository.
    Raises InvalidRole for an unknown role.
    """
    now = datetime.now(timezone.utc)
    return User(
        email=email,
        password_hash=hash_password(password),
        role=parse_role(role),
        created_at=now,
        updated_at=now,
    )


def verify_password(user: User, password: str) -> bool:
    """Constant-time check of a plaintext password against the user's hash."""
    return check_password(password, user.password_hash)


def has_permission(user: User, required_role: Role | str) -> bool:
    """True iff the user's role ranks at or above required_role."""
    return satisfies(user.role, required_role)
