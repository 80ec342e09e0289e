"""
auth/roles.py -- The three-tier role hierarchy.

rank() is the single source of truth for role ordering. Both the credential
model (auth/credentials.has_permission) and the request boundary
(auth/dependencies.require_role) call it; neither keeps its own table.

Layer rule: no imports from api/ or orders/. Import from core/ is allowed.
"""

from __future__ import annotations

from enum import Enum

from core.errors import InvalidRole


class Role(str, Enum):
    viewer = "viewer"
    analyst = "analyst"
    admin = "admin"


def parse_role(value: Role | str) -> Role:
    """Return value as a Role. Raises InvalidRole for anything else."""
    try:
        return Role(value)
    except ValueError as exc:
        raise InvalidRole(f"Unknown role: {value!r}.") from exc


def rank(role: Role | str) -> int:
    """Return the hierarchy rank of a role: viewer=1, analyst=2, admin=3.

    Unknown role strings rank 0 so they satisfy nothing.
    """
    try:
        role = Role(role)
    except ValueError:
        return 0
    if role is Role.admin:
        return 3
    if role is Role.analyst:
        return 2
    return 1


def satisfies(role: Role | str, required: Role | str) -> bool:
    """True iff role is at least as privileged as required."""
    return rank(role) >= rank(required)
