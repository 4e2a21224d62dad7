# =============================================================================
# app/middleware.py - Request Logging & Request Metrics
# =============================================================================
# Logs method, path, status and duration for every request (never bodies or
# headers) and feeds the request counters used by the alert thresholds:
# total requests, slow requests and server errors.
#
# The alert check runs in the threadpool: a fired alert publishes to the
# Celery broker, which blocks.
#
# Registered in main.py with:
#   app.middleware("http")(request_logging_middleware)
# =============================================================================

import logging
import time

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from app.config import settings
from core.metrics import Metric

logger = logging.getLogger("app.requests")


async def request_logging_middleware(request: Request, call_next):
    """Time the request, log it and update the request metrics."""
    state = request.app.state
    metrics = state.metrics
    start = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        # Rendered as a 500 by the outermost error handler
        duration_ms = (time.perf_counter() - start) * 1000
        metrics.increment(Metric.TOTAL_REQUESTS)
        metrics.increment(Metric.SERVER_ERRORS)
        logger.error(f"{request.method} {request.url.path} 500 {duration_ms:.0f}ms")
        await run_in_threadpool(state.notifier.check)
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    metrics.increment(Metric.TOTAL_REQUESTS)
    if response.status_code >= 500:
        metrics.increment(Metric.SERVER_ERRORS)

    message = f"{request.method} {request.url.path} {response.status_code} {duration_ms:.0f}ms"
    if duration_ms > settings.SLOW_REQUEST_MS:
        metrics.increment(Metric.SLOW_REQUESTS)
        logger.warning(f"Slow request: {message}")
    elif response.status_code >= 500:
        logger.error(message)
    else:
        logger.info(message)

    await run_in_threadpool(state.notifier.check)
    response.headers["X-Response-Time"] = f"{duration_ms:.0f}ms"
    return response
