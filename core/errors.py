"""
core/errors.py -- Typed failure taxonomy shared by every layer.

Services raise these; they never raise HTTPException. The API layer maps
each category to an HTTP status (see api/main.py and the route modules).

Categories and their default HTTP status:
  ValidationError      400  malformed input, caller may retry corrected
  AuthenticationError  401  bad credentials, bad or expired token
  AuthorizationError   403  role or ownership insufficient
  NotFoundError        404  referenced entity absent
  ConflictError        409  duplicate unique value
  InfrastructureError  500  hashing/signing failures, never retried here

Authentication failures never distinguish "wrong password" from "no such
user" (InvalidCredentials covers both).

Layer rule: no imports from api/, auth/, or orders/.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every expected failure. Carries a stable machine code."""

    code: str = "service_error"
    status_code: int = 500
    default_message: str = "Service error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class ValidationError(ServiceError):
    code = "validation_error"
    status_code = 400
    default_message = "Invalid input."


class AuthenticationError(ServiceError):
    code = "unauthorized"
    status_code = 401
    default_message = "Authentication required."


class AuthorizationError(ServiceError):
    code = "forbidden"
    status_code = 403
    default_message = "Access denied."


class NotFoundError(ServiceError):
    code = "not_found"
    status_code = 404
    default_message = "Not found."


class ConflictError(ServiceError):
    code = "conflict"
    status_code = 409
    default_message = "Conflict."


class InfrastructureError(ServiceError):
    code = "internal_error"
    status_code = 500
    default_message = "An unexpected error occurred."


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class InvalidItem(ValidationError):
    code = "invalid_item"
    default_message = "Invalid item_id."


class InvalidQuantityError(ValidationError):
    code = "invalid_quantity"
    default_message = "Quantity must be at least 1."


class InvalidTransitionError(ValidationError):
    code = "invalid_transition"
    default_message = "Illegal order status transition."


class InvalidRole(ValidationError):
    code = "invalid_role"
    default_message = "Role must be viewer, analyst, or admin."


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class InvalidCredentials(AuthenticationError):
    code = "bad_credentials"
    default_message = "Invalid credentials."


class AccountInactive(AuthenticationError):
    code = "account_inactive"
    default_message = "Account is inactive."


class InvalidRefreshToken(AuthenticationError):
    code = "invalid_refresh_token"
    default_message = "Invalid refresh token."


class InvalidTokenError(AuthenticationError):
    code = "invalid_token"
    default_message = "Invalid token."


class MalformedSubjectError(InvalidTokenError):
    code = "malformed_subject"
    default_message = "Token subject is not a valid user id."


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class InsufficientPermissions(AuthorizationError):
    code = "insufficient_permissions"
    default_message = "Insufficient permissions."


class AccessDenied(AuthorizationError):
    code = "access_denied"
    default_message = "Access denied."


# ---------------------------------------------------------------------------
# Not found / conflict
# ---------------------------------------------------------------------------


class UserNotFound(NotFoundError):
    code = "user_not_found"
    default_message = "User not found."


class OrderNotFound(NotFoundError):
    code = "order_not_found"
    default_message = "Order not found."


class EmailExists(ConflictError):
    code = "email_exists"
    default_message = "Email already exists."


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


class HashingError(InfrastructureError):
    code = "hashing_error"
    default_message = "Password hashing failed."


class TokenSigningError(InfrastructureError):
    code = "token_signing_error"
    default_message = "Token signing failed."
