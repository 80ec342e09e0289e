"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Request flow:
  Unauthenticated
    -> Authorization header present and of the form "Bearer <token>"
    -> access token verified by the app's TokenService
    -> CurrentUser(user_id, role) attached to request.state.current_user

A missing header or a header without the "Bearer " prefix is rejected with
401 before any token verification is attempted. A token that fails
verification is also 401.

get_current_user() is the dependency for any authenticated route.
require_role(min_role) builds a dependency that additionally rejects with 403
unless rank(role) >= rank(min_role). The role checked is the snapshot in the
access token; it is not re-read from the store.

Layer rule: no imports from api/ or orders/.
  auth/dependencies.py may import from fastapi because it is part of the
  FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request

from auth.models import CurrentUser
from auth.roles import Role, satisfies
from auth.tokens import TokenService
from core.errors import InvalidTokenError

_BEARER = "Bearer "


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(request: Request) -> CurrentUser:
    """Require a valid bearer access token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(current: CurrentUser = Depends(get_current_user)): ...
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        raise _unauthorized("Authorization header required.")
    if not auth_header.startswith(_BEARER):
        raise _unauthorized("Bearer token required.")

    tokens: TokenService = request.app.state.tokens
    try:
        claims = tokens.verify_access_token(auth_header[len(_BEARER) :])
    except InvalidTokenError as exc:
        raise _unauthorized("Invalid token.") from exc

    current = CurrentUser(user_id=claims.user_id, role=claims.role)
    request.state.current_user = current
    return current


def require_role(min_role: Role) -> Callable[..., CurrentUser]:
    """Build a dependency that requires at least min_role.

    Raises HTTP 401 if unauthenticated, HTTP 403 if the role ranks too low.

    Use as a FastAPI dependency:
        router = APIRouter(dependencies=[Depends(require_role(Role.admin))])
    """

    def _require(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not satisfies(current.role, min_role):
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": "Insufficient permissions."},
            )
        return current

    return _require
