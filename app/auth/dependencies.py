# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# The gate:
# 1. Extracts the Bearer token from the Authorization header
# 2. Verifies it with the TokenService (signature, then expiry)
# 3. Resolves the user it names (who may have been removed since)
# 4. Returns an AuthUser without the password hash
#
# Any failure is a 401. Each outcome leaves a breadcrumb and failures are
# counted; neither can change the response.
#
# Usage:
#   from app.auth import CurrentUser
#
#   @router.get("/protected")
#   def protected(user: CurrentUser):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.models import AuthUser
from app.dependencies import MetricsDep, SinkDep, StoreDep, TokenServiceDep
from app.exceptions import UnauthenticatedError
from core.metrics import Metric
from core.repositories import UserRepository
from core.services.token_service import TokenError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; a missing header is reported by the gate itself
security = HTTPBearer(auto_error=False)

TOKEN_FAILED_MESSAGE = "Not authorized, token failed"


def get_current_user(
    store: StoreDep,
    tokens: TokenServiceDep,
    metrics: MetricsDep,
    sink: SinkDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Authenticate the request from its bearer token.

    Returns:
        AuthUser: The authenticated user's id and email

    Raises:
        UnauthenticatedError: 401 if the token is missing, invalid or
            expired, or its user no longer exists
    """

    def reject(message: str, reason: str) -> UnauthenticatedError:
        metrics.increment(Metric.AUTH_FAILURES)
        sink.add_breadcrumb("auth", "Authentication failed", level="warning", data={"reason": reason})
        logger.warning(f"Authentication failed: {reason}")
        return UnauthenticatedError(message, reason=reason)

    if credentials is None or not credentials.credentials:
        raise reject("Not authorized, no token", "no_token")

    try:
        user_id = tokens.verify(credentials.credentials)
    except TokenError as e:
        raise reject(TOKEN_FAILED_MESSAGE, e.reason) from None

    row = UserRepository(store).find_by_id(user_id)
    if row is None:
        raise reject(TOKEN_FAILED_MESSAGE, "user_not_found")

    sink.add_breadcrumb("auth", "User authenticated", data={"user_id": row["id"]})
    logger.debug(f"Authenticated user: {row['id']}")
    return AuthUser(id=row["id"], email=row["email"])


# Type alias for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
