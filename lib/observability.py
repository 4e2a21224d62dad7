# =============================================================================
# lib/observability.py - Observability Sink
# =============================================================================
# Structured events (breadcrumbs, captured exceptions, captured messages)
# flow into an ObservabilitySink. The default sink writes them to the
# standard logging module under the "observability" logger.
#
# The sink is best-effort: callers wrap it in SafeSink, which catches and
# logs any failure so a broken sink can never change a request's outcome.
#
# Usage:
#   sink = SafeSink(LoggingSink())
#   sink.add_breadcrumb("auth", "User authenticated", data={"user_id": uid})
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


class ObservabilitySink:
    """
    Interface for structured observability events.

    The base implementation discards everything.
    """

    def add_breadcrumb(
        self,
        category: str,
        message: str,
        level: str = "info",
        data: dict[str, Any] | None = None,
    ) -> None:
        """Record a trail event for later context."""

    def capture_exception(
        self,
        exc: BaseException,
        tags: dict[str, Any] | None = None,
    ) -> None:
        """Report an exception."""

    def capture_message(
        self,
        message: str,
        level: str = "info",
        tags: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Report a standalone message (e.g. an alert)."""


class LoggingSink(ObservabilitySink):
    """Writes every event as a structured log record."""

    def __init__(self, name: str = "observability"):
        self._log = logging.getLogger(name)

    def add_breadcrumb(self, category, message, level="info", data=None):
        self._log.log(
            LEVELS.get(level, logging.INFO),
            f"[{category}] {message}",
            extra={"category": category, "data": data or {}},
        )

    def capture_exception(self, exc, tags=None):
        self._log.error(
            f"Captured exception: {exc!r}",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"tags": tags or {}},
        )

    def capture_message(self, message, level="info", tags=None, extra=None):
        self._log.log(
            LEVELS.get(level, logging.INFO),
            message,
            extra={"tags": tags or {}, "extra_data": extra or {}},
        )


class SafeSink(ObservabilitySink):
    """
    Best-effort wrapper around another sink.

    Any exception raised by the wrapped sink is logged and dropped.
    """

    def __init__(self, inner: ObservabilitySink):
        self.inner = inner

    def add_breadcrumb(self, category, message, level="info", data=None):
        try:
            self.inner.add_breadcrumb(category, message, level=level, data=data)
        except Exception as e:
            logger.warning(f"Observability breadcrumb dropped: {e}")

    def capture_exception(self, exc, tags=None):
        try:
            self.inner.capture_exception(exc, tags=tags)
        except Exception as e:
            logger.warning(f"Observability exception capture dropped: {e}")

    def capture_message(self, message, level="info", tags=None, extra=None):
        try:
            self.inner.capture_message(message, level=level, tags=tags, extra=extra)
        except Exception as e:
            logger.warning(f"Observability message dropped: {e}")
