# =============================================================================
# tests/test_tokens.py - Token Service Tests
# =============================================================================
# Tests for issuing and verifying access tokens:
# - Round trip within the lifetime
# - Expiry against an explicit clock
# - Signature checked before expiry
# - Malformed tokens
# =============================================================================

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from core.services.token_service import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
    TokenService,
)

SECRET = "unit-test-secret-0123456789"
USER_ID = "0b9f3c2e-4d1a-4c55-9a57-3f2b8c1d0e6a"
T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service() -> TokenService:
    return TokenService(secret=SECRET, clock=lambda: T0)


class TestIssue:
    """Tests for TokenService.issue."""

    def test_claims(self, service):
        """Token carries sub, iat and exp = iat + 7 days."""
        token = service.issue(USER_ID, now=T0)

        claims = jwt.get_unverified_claims(token)

        assert claims["sub"] == USER_ID
        assert claims["iat"] == int(T0.timestamp())
        assert claims["exp"] == int((T0 + timedelta(days=7)).timestamp())

    def test_uses_clock_by_default(self, service):
        """Without `now`, the injected clock decides iat."""
        claims = jwt.get_unverified_claims(service.issue(USER_ID))
        assert claims["iat"] == int(T0.timestamp())

    def test_custom_lifetime(self):
        service = TokenService(secret=SECRET, lifetime=timedelta(hours=1))
        claims = jwt.get_unverified_claims(service.issue(USER_ID, now=T0))
        assert claims["exp"] - claims["iat"] == 3600

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService(secret="")


class TestVerify:
    """Tests for TokenService.verify."""

    def test_valid_within_lifetime(self, service):
        """Issued at T, still valid at T+6d."""
        token = service.issue(USER_ID, now=T0)
        assert service.verify(token, now=T0 + timedelta(days=6)) == USER_ID

    def test_expired_after_lifetime(self, service):
        """Issued at T, expired at T+8d."""
        token = service.issue(USER_ID, now=T0)

        with pytest.raises(TokenExpiredError) as exc_info:
            service.verify(token, now=T0 + timedelta(days=8))

        assert exc_info.value.reason == "expired"

    def test_expired_exactly_at_exp(self, service):
        token = service.issue(USER_ID, now=T0)
        with pytest.raises(TokenExpiredError):
            service.verify(token, now=T0 + timedelta(days=7))

    def test_wrong_secret(self, service):
        """A token signed with another secret fails on signature."""
        other = TokenService(secret="another-secret-0123456789")
        token = other.issue(USER_ID, now=T0)

        with pytest.raises(InvalidSignatureError) as exc_info:
            service.verify(token, now=T0)

        assert exc_info.value.reason == "invalid_signature"

    def test_signature_checked_before_expiry(self, service):
        """A forged token that has also expired reports the signature."""
        other = TokenService(secret="another-secret-0123456789")
        token = other.issue(USER_ID, now=T0)

        with pytest.raises(InvalidSignatureError):
            service.verify(token, now=T0 + timedelta(days=30))

    def test_tampered_payload(self, service):
        """Swapping the payload invalidates the signature."""
        token = service.issue(USER_ID, now=T0)
        forged = jwt.encode(
            {"sub": "someone-else", "iat": int(T0.timestamp()), "exp": int(T0.timestamp()) + 60},
            "x" * 32,
        )
        header, _, signature = token.split(".")
        tampered = ".".join([header, forged.split(".")[1], signature])

        with pytest.raises(InvalidSignatureError):
            service.verify(tampered, now=T0)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c"])
    def test_malformed(self, service, token):
        with pytest.raises(MalformedTokenError) as exc_info:
            service.verify(token, now=T0)
        assert exc_info.value.reason == "malformed"

    def test_missing_subject(self, service):
        token = jwt.encode({"exp": int(T0.timestamp()) + 60}, SECRET, algorithm="HS256")
        with pytest.raises(MalformedTokenError):
            service.verify(token, now=T0)

    def test_missing_expiry(self, service):
        token = jwt.encode({"sub": USER_ID}, SECRET, algorithm="HS256")
        with pytest.raises(MalformedTokenError):
            service.verify(token, now=T0)

    def test_all_failures_are_token_errors(self):
        """Callers can catch every verification failure with TokenError."""
        for cls in (MalformedTokenError, InvalidSignatureError, TokenExpiredError):
            assert issubclass(cls, TokenError)
