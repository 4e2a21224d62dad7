# =============================================================================
# core/metrics.py - Advisory Business Metrics
# =============================================================================
# Process-wide counters for registrations, logins, todo activity and request
# health. The recorder is created once by the app and injected where it's
# needed; nothing reads it for correctness, only for alerting and dashboards.
#
# Counters are cleared with reset(), which the app calls every
# METRICS_RESET_INTERVAL_SECONDS so alert thresholds apply per window.
#
# Usage:
#   metrics = MetricsRecorder()
#   metrics.increment(Metric.LOGIN_FAILURES)
#   metrics.snapshot()   # {"login_failures": 1, ...}
# =============================================================================

import logging
import threading
from datetime import datetime
from enum import Enum

from lib.utils import utc_now

logger = logging.getLogger(__name__)


class Metric(str, Enum):
    """Names of the counters the application records."""
    USER_REGISTRATIONS = "user_registrations"
    DUPLICATE_EMAILS = "duplicate_emails"
    LOGIN_ATTEMPTS = "login_attempts"
    LOGIN_SUCCESSES = "login_successes"
    LOGIN_FAILURES = "login_failures"
    AUTH_FAILURES = "auth_failures"
    TODOS_CREATED = "todos_created"
    TODOS_UPDATED = "todos_updated"
    TODOS_COMPLETED = "todos_completed"
    TODOS_DELETED = "todos_deleted"
    TOTAL_REQUESTS = "total_requests"
    SLOW_REQUESTS = "slow_requests"
    SERVER_ERRORS = "server_errors"
    RATE_LIMITED = "rate_limited"


class MetricsRecorder:
    """
    Thread-safe counters with an explicit reset.

    Every known metric starts at zero, so snapshots always have the same keys.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}
        self._window_started: datetime = utc_now()
        self._window_id = 0
        self.reset()

    def increment(self, metric: Metric | str, amount: int = 1) -> int:
        """Add to a counter and return its new value."""
        name = metric.value if isinstance(metric, Metric) else str(metric)
        with self._lock:
            self._counts[name] = self._counts.get(name, 0) + amount
            return self._counts[name]

    def get(self, metric: Metric | str) -> int:
        name = metric.value if isinstance(metric, Metric) else str(metric)
        with self._lock:
            return self._counts.get(name, 0)

    def snapshot(self) -> dict[str, int]:
        """A copy of all counters."""
        with self._lock:
            return dict(self._counts)

    @property
    def window_started(self) -> datetime:
        return self._window_started

    @property
    def window_id(self) -> int:
        """Increases by one on every reset."""
        return self._window_id

    def error_rate(self) -> float:
        """Server errors as a fraction of all requests in the current window."""
        with self._lock:
            total = self._counts.get(Metric.TOTAL_REQUESTS.value, 0)
            errors = self._counts.get(Metric.SERVER_ERRORS.value, 0)
        if total == 0:
            return 0.0
        return errors / total

    def reset(self) -> dict[str, int]:
        """
        Zero every counter and start a new window.

        Returns:
            The counters as they were just before the reset
        """
        with self._lock:
            previous = dict(self._counts)
            self._counts = {metric.value: 0 for metric in Metric}
            self._window_started = utc_now()
            self._window_id += 1
        if any(previous.values()):
            logger.info(f"Metrics window closed: {previous}")
        return previous
