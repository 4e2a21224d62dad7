# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Process-wide resources (store, token service, hasher, metrics, sink,
# alert notifier, rate limiter) are built once by init_resources() and kept on app.state,
# so tests can swap any of them by assigning a new object.
# =============================================================================

import logging
from datetime import timedelta
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request

from app.config import Settings
from app.rate_limit import build_rules
from core.alerts import AlertNotifier, AlertThresholds
from core.metrics import MetricsRecorder
from core.services.auth_service import AuthService
from core.services.token_service import TokenService
from lib.memory_store import InMemoryStore
from lib.observability import LoggingSink, ObservabilitySink, SafeSink
from lib.rate_limit import SlidingWindowLimiter
from lib.security import PasswordHasher
from lib.store import DocumentStore
from lib.webhooks import build_targets

logger = logging.getLogger(__name__)


# =============================================================================
# Resource Construction
# =============================================================================

def create_store(settings: Settings) -> DocumentStore:
    """Build the configured store backend."""
    if settings.STORE_BACKEND == "supabase":
        from lib.supabase_client import SupabaseStore

        return SupabaseStore.from_settings(settings)
    logger.warning("Using the in-memory store; data is lost on restart")
    return InMemoryStore()


def create_token_service(settings: Settings) -> TokenService:
    return TokenService(
        secret=settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        lifetime=timedelta(days=settings.TOKEN_LIFETIME_DAYS),
    )


def enqueue_alert(notification: dict[str, Any]) -> None:
    """Hand a notification to the Celery worker for webhook delivery."""
    from workers.tasks import deliver_alert

    deliver_alert.delay(notification)


def create_notifier(
    settings: Settings,
    metrics: MetricsRecorder,
    sink: ObservabilitySink,
) -> AlertNotifier:
    dispatch = None
    if settings.ALERTS_ENABLED and build_targets(settings):
        dispatch = enqueue_alert
    return AlertNotifier(
        metrics,
        AlertThresholds.from_settings(settings),
        dispatch=dispatch,
        sink=sink,
        environment=settings.ENVIRONMENT,
    )


def init_resources(app: FastAPI, settings: Settings) -> None:
    """Attach every shared resource to app.state."""
    sink = SafeSink(LoggingSink())
    metrics = MetricsRecorder()
    app.state.settings = settings
    app.state.store = create_store(settings)
    app.state.tokens = create_token_service(settings)
    app.state.hasher = PasswordHasher(settings.password_hash_schemes_list)
    app.state.metrics = metrics
    app.state.sink = sink
    app.state.notifier = create_notifier(settings, metrics, sink)
    app.state.rate_limiter = SlidingWindowLimiter() if settings.RATE_LIMIT_ENABLED else None
    app.state.rate_limits = build_rules(settings)


# =============================================================================
# Dependencies
# =============================================================================

def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_metrics(request: Request) -> MetricsRecorder:
    return request.app.state.metrics


def get_sink(request: Request) -> ObservabilitySink:
    return request.app.state.sink


# Type aliases for dependency injection
StoreDep = Annotated[DocumentStore, Depends(get_store)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
HasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]
MetricsDep = Annotated[MetricsRecorder, Depends(get_metrics)]
SinkDep = Annotated[ObservabilitySink, Depends(get_sink)]


def get_auth_service(
    store: StoreDep,
    tokens: TokenServiceDep,
    hasher: HasherDep,
    metrics: MetricsDep,
    sink: SinkDep,
) -> AuthService:
    return AuthService(store, tokens, hasher, metrics, sink)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
