# =============================================================================
# app/rate_limit.py - Rate Limiting Dependencies
# =============================================================================
# Three limits, each keyed by client IP:
# - general:     every API request
# - auth:        /api/auth (register, login, me, verify)
# - todo_create: POST /api/todos
#
# The limiter and its rules live on app.state (see init_resources). When
# RATE_LIMIT_ENABLED is false app.state.rate_limiter is None and every check
# passes.
#
# Usage:
#   app.include_router(auth_routes.router, dependencies=[Depends(rate_limit("auth"))])
# =============================================================================

import logging

from fastapi import Request

from app.exceptions import RateLimitedError
from core.metrics import Metric
from lib.rate_limit import RateLimitRule

logger = logging.getLogger(__name__)

GENERAL = "general"
AUTH = "auth"
TODO_CREATE = "todo_create"


def build_rules(settings) -> dict[str, RateLimitRule]:
    """The configured limits by name."""
    return {
        GENERAL: RateLimitRule(
            name=GENERAL,
            max_requests=settings.RATE_LIMIT_GENERAL_MAX,
            window_seconds=settings.RATE_LIMIT_GENERAL_WINDOW_SECONDS,
            message="Too many requests from this IP, please try again later.",
        ),
        AUTH: RateLimitRule(
            name=AUTH,
            max_requests=settings.RATE_LIMIT_AUTH_MAX,
            window_seconds=settings.RATE_LIMIT_AUTH_WINDOW_SECONDS,
            message="Too many authentication attempts, please try again later.",
        ),
        TODO_CREATE: RateLimitRule(
            name=TODO_CREATE,
            max_requests=settings.RATE_LIMIT_TODO_CREATE_MAX,
            window_seconds=settings.RATE_LIMIT_TODO_CREATE_WINDOW_SECONDS,
            message="Too many todo creation attempts, please slow down.",
        ),
    }


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit(name: str):
    """
    Create a dependency enforcing the named limit.

    Raises:
        RateLimitedError: 429 with Retry-After once the client is over the limit
    """

    async def check_rate_limit(request: Request) -> None:
        state = request.app.state
        limiter = state.rate_limiter
        if limiter is None:
            return

        rule = state.rate_limits[name]
        client = client_key(request)
        retry_after = limiter.hit(f"{name}:{client}", rule)
        if retry_after is None:
            return

        state.metrics.increment(Metric.RATE_LIMITED)
        state.sink.add_breadcrumb(
            "rate_limit",
            "Request rate limited",
            level="warning",
            data={"limit": name, "path": request.url.path},
        )
        logger.warning(f"Rate limited {client} on {name} ({request.method} {request.url.path})")
        raise RateLimitedError(rule.message, retry_after)

    return check_rate_limit
