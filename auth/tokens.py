"""
auth/tokens.py -- JWT issuing and verification for access and refresh tokens.

Security design decisions:
  JWT: python-jose with HS256. One process-wide secret (Settings.secret_key)
       signs both token kinds and is never changed after startup. A service
       built with a different secret rejects every token it did not sign.

  Token kinds: the "typ" claim tags each token as "access" or "refresh".
       Access tokens carry user_id + role and live 15 minutes by default.
       Refresh tokens carry only the subject and live 7 days; the role is
       re-read from the store on refresh so a role change cannot be outlived
       by an old token. A refresh token presented as an access token (or the
       reverse) is rejected.

  jti: every token gets a random id so two tokens minted in the same second
       for the same user are still distinct strings.

  Failures: verification raises InvalidTokenError (or MalformedSubjectError
       for a refresh token whose subject is not a UUID) rather than returning
       None, so callers can map the failure to their own error.

Layer rule: no imports from api/ or orders/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from jose import JOSEError, jwt

from auth.models import AccessClaims, RefreshClaims
from auth.roles import Role, parse_role
from core.config import get_settings
from core.errors import InvalidTokenError, MalformedSubjectError, TokenSigningError

logger = logging.getLogger("threatintel.auth")

_ALGORITHM = "HS256"

ACCESS = "access"
REFRESH = "refresh"


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class TokenService:
    """Signs and verifies the two token kinds with one symmetric secret.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key)
        access = tokens.issue_access_token(user.id, user.role)
        claims = tokens.verify_access_token(access)
    """

    def __init__(
        self,
        secret_key: str,
        access_ttl_seconds: int = 15 * 60,
        refresh_ttl_seconds: int = 7 * 24 * 3600,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key.")
        self._secret_key = secret_key
        self.access_ttl = timedelta(seconds=access_ttl_seconds)
        self.refresh_ttl = timedelta(seconds=refresh_ttl_seconds)

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue_access_token(self, user_id: uuid.UUID, role: Role | str) -> str:
        """Encode a signed access token for user_id with a role snapshot.

        Raises InvalidRole if role is not one of the three known roles.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "user_id": str(user_id),
            "role": parse_role(role).value,
            "typ": ACCESS,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.access_ttl,
        }
        return self._encode(payload)

    def issue_refresh_token(self, user_id: uuid.UUID) -> str:
        """Encode a signed refresh token for user_id. No role is embedded."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "typ": REFRESH,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.refresh_ttl,
        }
        return self._encode(payload)

    def _encode(self, payload: dict) -> str:
        try:
            return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)
        except JOSEError as exc:
            logger.error("Token signing failed: %s", exc)
            raise TokenSigningError() from exc

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    def verify_access_token(self, token: str) -> AccessClaims:
        """Return the claims of a valid access token.

        Raises InvalidTokenError on bad signature, malformed token, expiry,
        wrong token kind, or missing/invalid user_id and role claims.
        """
        payload = self._decode(token, expected_type=ACCESS)
        try:
            user_id = uuid.UUID(str(payload["user_id"]))
            role = Role(payload["role"])
        except (KeyError, ValueError) as exc:
            raise InvalidTokenError("Access token claims are incomplete.") from exc
        return AccessClaims(
            user_id=user_id,
            role=role,
            subject=str(payload.get("sub", "")),
            issued_at=_from_timestamp(payload.get("iat", 0)),
            expires_at=_from_timestamp(payload["exp"]),
        )

    def verify_refresh_token(self, token: str) -> uuid.UUID:
        """Return the user id carried by a valid refresh token."""
        return self.decode_refresh_token(token).user_id

    def decode_refresh_token(self, token: str) -> RefreshClaims:
        """Return the full claims of a valid refresh token.

        Raises InvalidTokenError under the same conditions as
        verify_access_token, and MalformedSubjectError if the subject is not
        a valid UUID.
        """
        payload = self._decode(token, expected_type=REFRESH)
        subject = str(payload.get("sub", ""))
        try:
            user_id = uuid.UUID(subject)
        except ValueError as exc:
            raise MalformedSubjectError() from exc
        return RefreshClaims(
            user_id=user_id,
            subject=subject,
            issued_at=_from_timestamp(payload.get("iat", 0)),
            expires_at=_from_timestamp(payload["exp"]),
        )

    def _decode(self, token: str, expected_type: str) -> dict:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"require_exp": True, "require_sub": True},
            )
        except JOSEError as exc:
            raise InvalidTokenError(f"Token rejected: {exc}") from exc
        if payload.get("typ") != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token.")
        return payload


@lru_cache
def get_token_service() -> TokenService:
    """Return the process-wide TokenService built from Settings."""
    settings = get_settings()
    return TokenService(
        secret_key=settings.secret_key,
        access_ttl_seconds=settings.access_token_ttl_seconds,
        refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
    )
