"""
API request and response models for the threat intel REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
orders/models.py, which own the internal domain representation. Route
handlers map between the two via the from_* factory methods.

Separation of concerns: domain dataclasses = domain truth; api/ models = API
contract. password_hash never appears in any response model.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.models import AuthResult, User
from auth.roles import Role
from orders.models import Order, OrderReceipt, OrderStatus

# bcrypt only looks at the first 72 bytes and newer releases reject longer
# input outright, so the API refuses it up front. The character cap alone is
# not enough: multibyte characters push a 72-character password past 72 bytes.
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 72
PASSWORD_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes when UTF-8 encoded")
    return value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register. role must be viewer, analyst, or admin."""

    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: Role

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class CreateOrderRequest(BaseModel):
    """Request body for POST /api/v1/orders.

    item_id is checked against the catalog by OrderService, not here, so an
    unknown item yields the invalid_item error code rather than a generic
    validation error. The match is exact: surrounding whitespace is not
    stripped.
    """

    item_id: str = Field(min_length=1, max_length=64)
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    email: str
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(BaseModel):
    """Token pair plus the authenticated user. Returned by login, register, refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"  # noqa: S105 # nosec B105 -- OAuth token type, not a password
    expires_in: int  # access token lifetime in seconds
    user: UserResponse

    @classmethod
    def from_result(cls, result: AuthResult, expires_in: int) -> "AuthResponse":
        return cls(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            expires_in=expires_in,
            user=UserResponse.from_user(result.user),
        )


class OrderCreatedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: uuid.UUID
    status: OrderStatus

    @classmethod
    def from_receipt(cls, receipt: OrderReceipt) -> "OrderCreatedResponse":
        return cls(order_id=receipt.order_id, status=receipt.status)


class OrderResponse(BaseModel):
    """Full order view. user (the owner) is present on single-order reads only."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    user_id: uuid.UUID
    item_id: str
    quantity: int
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    user: Optional[UserResponse] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            item_id=order.item_id,
            quantity=order.quantity,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
            user=UserResponse.from_user(order.user) if order.user is not None else None,
        )


class StatusReportResponse(BaseModel):
    """Order counts per status across all users."""

    counts: dict[str, int]
    total: int


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Uniform error envelope: every non-2xx response body has this shape."""

    error: ErrorDetail
