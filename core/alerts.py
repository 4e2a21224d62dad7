# =============================================================================
# core/alerts.py - Threshold Alerts
# =============================================================================
# Compares the current metrics window against configured thresholds and
# hands a Notification to a dispatch callable when one is crossed. In the
# running app the callable enqueues workers.tasks.deliver_alert, which posts
# the notification to every configured webhook.
#
# Each alert fires at most once per metrics window: after it fires it stays
# quiet until MetricsRecorder.reset() starts a new window.
#
# Usage:
#   notifier = AlertNotifier(metrics, AlertThresholds.from_settings(settings),
#                            dispatch=enqueue_alert, sink=sink)
#   notifier.check()   # after each request
# =============================================================================

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from core.metrics import Metric, MetricsRecorder
from lib.observability import ObservabilitySink
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)


class AlertType:
    ERROR_RATE = "error_rate"
    AUTH_FAILURES = "auth_failures"
    SLOW_REQUESTS = "slow_requests"
    DUPLICATE_EMAILS = "duplicate_emails"


@dataclass
class Notification:
    """An alert ready to be formatted for a webhook."""
    alert_type: str
    title: str
    message: str
    severity: str
    action: str
    environment: str = "development"
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "alert_type": self.alert_type,
            "title": self.title,
            "message": self.message,
            "severity": self.severity,
            "action": self.action,
            "environment": self.environment,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class AlertThresholds:
    auth_failures: int = 10
    duplicate_emails: int = 20
    error_rate: float = 0.05
    min_requests: int = 100
    slow_request_ms: int = 2000

    @classmethod
    def from_settings(cls, settings: Any) -> "AlertThresholds":
        return cls(
            auth_failures=settings.ALERT_AUTH_FAILURES,
            duplicate_emails=settings.ALERT_DUPLICATE_EMAILS,
            error_rate=settings.ALERT_ERROR_RATE,
            min_requests=settings.ALERT_MIN_REQUESTS,
            slow_request_ms=settings.SLOW_REQUEST_MS,
        )


def build_notification(alert_type: str, data: dict[str, Any], environment: str) -> Notification:
    """Title, message, severity and suggested action for an alert."""
    if alert_type == AlertType.ERROR_RATE:
        return Notification(
            alert_type=alert_type,
            title="High Error Rate Detected",
            message=(
                f"Error rate has exceeded {data['threshold'] * 100:.0f}% "
                f"({data['error_rate'] * 100:.2f}%)"
            ),
            severity="critical",
            action="Investigate immediately",
            environment=environment,
        )
    if alert_type == AlertType.AUTH_FAILURES:
        return Notification(
            alert_type=alert_type,
            title="High Authentication Failures",
            message=f"{data['count']} authentication failures in the current window",
            severity="warning",
            action="Check for potential security issues",
            environment=environment,
        )
    if alert_type == AlertType.SLOW_REQUESTS:
        return Notification(
            alert_type=alert_type,
            title="Slow Request Performance",
            message=f"Requests taking longer than {data['threshold']}ms detected",
            severity="warning",
            action="Investigate performance bottlenecks",
            environment=environment,
        )
    if alert_type == AlertType.DUPLICATE_EMAILS:
        return Notification(
            alert_type=alert_type,
            title="High Duplicate Email Attempts",
            message=f"{data['count']} duplicate email registration attempts",
            severity="info",
            action="Consider UX improvements or email verification",
            environment=environment,
        )
    return Notification(
        alert_type=alert_type,
        title="Alert",
        message="Unknown alert type",
        severity="info",
        action="Review alert configuration",
        environment=environment,
    )


class AlertNotifier:
    """
    Fires threshold alerts from a MetricsRecorder.

    Args:
        metrics: The recorder whose window is checked
        thresholds: Alert limits
        dispatch: Called with Notification.to_dict() for each alert; failures
            are logged and dropped
        sink: Observability sink that also records each alert
        environment: Included in every notification
    """

    def __init__(
        self,
        metrics: MetricsRecorder,
        thresholds: AlertThresholds,
        dispatch: Callable[[dict[str, Any]], None] | None = None,
        sink: ObservabilitySink | None = None,
        environment: str = "development",
    ):
        self.metrics = metrics
        self.thresholds = thresholds
        self.dispatch = dispatch
        self.sink = sink or ObservabilitySink()
        self.environment = environment
        self._lock = threading.Lock()
        self._fired: set[str] = set()
        self._window = metrics.window_id

    def _crossed(self) -> list[tuple[str, dict[str, Any]]]:
        counts = self.metrics.snapshot()
        t = self.thresholds
        crossed = []

        total = counts.get(Metric.TOTAL_REQUESTS.value, 0)
        error_rate = self.metrics.error_rate()
        if total >= t.min_requests and error_rate > t.error_rate:
            crossed.append((AlertType.ERROR_RATE, {"error_rate": error_rate, "threshold": t.error_rate}))

        auth_failures = counts.get(Metric.AUTH_FAILURES.value, 0) + counts.get(
            Metric.LOGIN_FAILURES.value, 0
        )
        if auth_failures >= t.auth_failures:
            crossed.append((AlertType.AUTH_FAILURES, {"count": auth_failures}))

        if counts.get(Metric.SLOW_REQUESTS.value, 0) > 0:
            crossed.append((AlertType.SLOW_REQUESTS, {"threshold": t.slow_request_ms}))

        duplicates = counts.get(Metric.DUPLICATE_EMAILS.value, 0)
        if duplicates >= t.duplicate_emails:
            crossed.append((AlertType.DUPLICATE_EMAILS, {"count": duplicates}))

        return crossed

    def check(self) -> list[Notification]:
        """
        Fire every alert whose threshold is crossed and hasn't fired yet this window.

        Returns:
            The notifications fired by this call
        """
        with self._lock:
            if self.metrics.window_id != self._window:
                self._window = self.metrics.window_id
                self._fired.clear()

            fresh = [(kind, data) for kind, data in self._crossed() if kind not in self._fired]
            self._fired.update(kind for kind, _ in fresh)

        fired = []
        for kind, data in fresh:
            notification = build_notification(kind, data, self.environment)
            fired.append(notification)
            logger.warning(f"Alert fired: {notification.title} - {notification.message}")
            self.sink.capture_message(
                f"Alert: {notification.title}",
                level="warning",
                tags={"alert_type": kind},
                extra=notification.to_dict(),
            )
            if self.dispatch is None:
                continue
            try:
                self.dispatch(notification.to_dict())
            except Exception as e:
                logger.warning(f"Failed to dispatch alert {kind}: {e}")
        return fired
