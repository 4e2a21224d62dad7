# =============================================================================
# core/services/token_service.py - Access Token Issuing & Verification
# =============================================================================
# Issues and verifies signed, time-limited JWTs (python-jose, HMAC).
#
# Tokens are stateless: verification needs only the signing secret and the
# current time. There is no revocation list; a token is valid until `exp`.
#
# The service is configured explicitly at construction. It never reads the
# environment, so a request can't observe a secret changing underneath it.
#
# Usage:
#   tokens = TokenService(secret=settings.SECRET_KEY)
#   token = tokens.issue(user_id)
#   user_id = tokens.verify(token)   # raises TokenError subclasses
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from jose import JWTError, jwt

from lib.utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(days=7)


# =============================================================================
# Failures
# =============================================================================

class TokenError(Exception):
    """Base class for token verification failures."""

    reason = "invalid_token"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedTokenError(TokenError):
    """The token can't be parsed or lacks required claims."""

    reason = "malformed"


class InvalidSignatureError(TokenError):
    """The signature doesn't match the signing secret."""

    reason = "invalid_signature"


class TokenExpiredError(TokenError):
    """The token's expiry is in the past."""

    reason = "expired"


# =============================================================================
# Service
# =============================================================================

class TokenService:
    """
    Issue and verify access tokens.

    Args:
        secret: HMAC signing secret
        algorithm: JWT algorithm (HS256/HS384/HS512)
        lifetime: How long an issued token stays valid
        clock: Returns the current UTC time; injectable for tests
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    def issue(self, user_id: str, now: datetime | None = None) -> str:
        """
        Create a signed token for a user.

        Claims: sub (user id), iat (issued at), exp (iat + lifetime),
        as integer Unix timestamps.
        """
        issued_at = now or self._clock()
        claims = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> str:
        """
        Verify a token and return its subject (the user id).

        The signature is checked before the expiry, so a forged token
        reports InvalidSignatureError even when it has also expired.

        Raises:
            MalformedTokenError: Token can't be parsed or lacks sub/exp
            InvalidSignatureError: Signature doesn't match
            TokenExpiredError: Current time is past exp
        """
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token is empty")

        try:
            jwt.get_unverified_header(token)
            unverified = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError(f"Token could not be parsed: {e}") from e

        if not isinstance(unverified, dict):
            raise MalformedTokenError("Token payload is not an object")

        subject = unverified.get("sub")
        expires_at = unverified.get("exp")
        if not subject or not isinstance(subject, str):
            raise MalformedTokenError("Token is missing the subject claim")
        if not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool):
            raise MalformedTokenError("Token is missing the expiry claim")

        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                # Expiry is checked below against the injectable clock
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError as e:
            raise InvalidSignatureError(f"Token signature is invalid: {e}") from e

        current = now or self._clock()
        if current.timestamp() >= expires_at:
            raise TokenExpiredError("Token has expired")

        return subject
