"""
auth/service.py -- Login, registration, and token refresh use cases.

AuthService composes the credential model (auth/credentials.py), the token
service (auth/tokens.py), and any UserRepository. It raises the typed errors
from core/errors.py; the route layer decides the HTTP status.

Security:
  [C1] Unknown email and wrong password both raise InvalidCredentials, and an
       unknown email still pays for one bcrypt comparison.
  Refresh re-reads the user's stored role. A token minted before a role
       change never carries the old role past the next refresh.
  Refresh rotates: a new refresh token is returned each time. The presented
       token is not revoked (no revocation list exists).
"""

from __future__ import annotations

import logging

from auth.credentials import create_user, dummy_verify, verify_password
from auth.models import AuthResult, User
from auth.roles import Role
from auth.store import UserRepository
from auth.tokens import TokenService
from core.errors import (
    AccountInactive,
    EmailExists,
    InvalidCredentials,
    InvalidRefreshToken,
    InvalidTokenError,
    UserNotFound,
)

logger = logging.getLogger("threatintel.auth")


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService) -> None:
        self._users = users
        self._tokens = tokens

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate by email and password and issue a token pair.

        Check order matters: an inactive account is reported as
        AccountInactive before the password is checked.
        """
        user = self._users.find_by_email(email)
        if user is None:
            dummy_verify(password)
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()
        if not user.is_active:
            logger.info("Login refused for inactive user %s", user.id)
            raise AccountInactive()
        if not verify_password(user, password):
            logger.info("Login failed for user %s: bad password", user.id)
            raise InvalidCredentials()

        logger.info("User %s logged in", user.id)
        return self._issue(user)

    def register(self, email: str, password: str, role: Role | str) -> AuthResult:
        """Create and persist a new account, then issue a token pair.

        Storage errors from users.save() propagate unchanged.
        """
        if self._users.find_by_email(email) is not None:
            raise EmailExists()

        user = create_user(email, password, role)
        self._users.save(user)
        logger.info("User %s registered with role %s", user.id, user.role.value)
        return self._issue(user)

    def refresh(self, refresh_token: str) -> AuthResult:
        """Exchange a refresh token for a new access token and refresh token."""
        try:
            user_id = self._tokens.verify_refresh_token(refresh_token)
        except InvalidTokenError as exc:
            raise InvalidRefreshToken() from exc

        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()

        logger.info("Tokens refreshed for user %s", user.id)
        return self._issue(user)

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(
            access_token=self._tokens.issue_access_token(user.id, user.role),
            refresh_token=self._tokens.issue_refresh_token(user.id),
            user=user,
        )
