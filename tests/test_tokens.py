"""Unit tests for auth/tokens.py -- access and refresh token issue/verify.

Covers:
- Access token round trip carries user_id and the role snapshot
- Refresh token round trip carries only the subject
- Token kinds are not interchangeable
- Tokens signed with another secret, expired tokens and garbage are rejected
- A refresh token whose subject is not a UUID raises MalformedSubjectError
- Two tokens for the same user minted back to back differ
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.roles import Role
from auth.tokens import TokenService
from core.errors import InvalidRole, InvalidTokenError, MalformedSubjectError

OTHER_SECRET = "another-secret-key-fedcba9876543210"


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenService(secret_key="")


class TestAccessTokens:
    def test_round_trip(self, tokens: TokenService):
        uid = uuid.uuid4()
        claims = tokens.verify_access_token(tokens.issue_access_token(uid, Role.analyst))
        assert claims.user_id == uid
        assert claims.role is Role.analyst
        assert claims.subject == str(uid)

    def test_expiry_matches_ttl(self, tokens: TokenService):
        claims = tokens.verify_access_token(tokens.issue_access_token(uuid.uuid4(), Role.viewer))
        assert claims.expires_at - claims.issued_at == timedelta(minutes=15)

    def test_tokens_are_distinct(self, tokens: TokenService):
        uid = uuid.uuid4()
        assert tokens.issue_access_token(uid, Role.viewer) != tokens.issue_access_token(uid, Role.viewer)

    def test_other_secret_rejected(self, tokens: TokenService):
        other = TokenService(secret_key=OTHER_SECRET)
        token = other.issue_access_token(uuid.uuid4(), Role.admin)
        with pytest.raises(InvalidTokenError):
            tokens.verify_access_token(token)

    def test_expired_rejected(self, tokens: TokenService):
        expired = TokenService(secret_key="unit-test-secret-key-0123456789abcdef", access_ttl_seconds=-60)
        token = expired.issue_access_token(uuid.uuid4(), Role.viewer)
        with pytest.raises(InvalidTokenError):
            tokens.verify_access_token(token)

    def test_garbage_rejected(self, tokens: TokenService):
        with pytest.raises(InvalidTokenError):
            tokens.verify_access_token("not.a.jwt")

    def test_refresh_token_not_accepted_as_access(self, tokens: TokenService):
        with pytest.raises(InvalidTokenError):
            tokens.verify_access_token(tokens.issue_refresh_token(uuid.uuid4()))

    def test_issue_with_unknown_role(self, tokens: TokenService):
        with pytest.raises(InvalidRole):
            tokens.issue_access_token(uuid.uuid4(), "superuser")

    def test_issue_with_role_string(self, tokens: TokenService):
        token = tokens.issue_access_token(uuid.uuid4(), "admin")
        assert tokens.verify_access_token(token).role is Role.admin

    def test_unknown_role_claim_rejected(self, tokens: TokenService):
        uid = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": uid, "user_id": uid, "role": "root", "typ": "access", "exp": now + timedelta(minutes=5)},
            "unit-test-secret-key-0123456789abcdef",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            tokens.verify_access_token(token)


class TestRefreshTokens:
    def test_round_trip(self, tokens: TokenService):
        uid = uuid.uuid4()
        assert tokens.verify_refresh_token(tokens.issue_refresh_token(uid)) == uid

    def test_carries_no_role(self, tokens: TokenService):
        token = tokens.issue_refresh_token(uuid.uuid4())
        assert "role" not in jwt.get_unverified_claims(token)

    def test_decode_returns_claims(self, tokens: TokenService):
        uid = uuid.uuid4()
        claims = tokens.decode_refresh_token(tokens.issue_refresh_token(uid))
        assert claims.user_id == uid
        assert claims.expires_at - claims.issued_at == timedelta(days=7)

    def test_access_token_not_accepted_as_refresh(self, tokens: TokenService):
        with pytest.raises(InvalidTokenError):
            tokens.verify_refresh_token(tokens.issue_access_token(uuid.uuid4(), Role.viewer))

    def test_other_secret_rejected(self, tokens: TokenService):
        other = TokenService(secret_key=OTHER_SECRET)
        with pytest.raises(InvalidTokenError):
            tokens.verify_refresh_token(other.issue_refresh_token(uuid.uuid4()))

    def test_expired_rejected(self, tokens: TokenService):
        expired = TokenService(secret_key="unit-test-secret-key-0123456789abcdef", refresh_ttl_seconds=-60)
        with pytest.raises(InvalidTokenError):
            tokens.verify_refresh_token(expired.issue_refresh_token(uuid.uuid4()))

    def test_malformed_subject(self, tokens: TokenService):
        token = jwt.encode(
            {"sub": "not-a-uuid", "typ": "refresh", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            "unit-test-secret-key-0123456789abcdef",
            algorithm="HS256",
        )
        with pytest.raises(MalformedSubjectError):
            tokens.verify_refresh_token(token)
