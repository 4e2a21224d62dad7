# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for alert delivery.
#
# Tasks:
# - deliver_alert: Post a notification to every configured webhook
# =============================================================================

import logging
from typing import Any

import httpx
from celery import shared_task

from app.config import settings
from lib.webhooks import WebhookDispatcher, build_targets

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 60


def get_dispatcher() -> WebhookDispatcher:
    """Dispatcher for the webhooks configured in settings."""
    return WebhookDispatcher(build_targets(settings), timeout=settings.WEBHOOK_TIMEOUT_SECONDS)


@shared_task(
    bind=True,
    name="workers.tasks.deliver_alert",
    max_retries=MAX_RETRIES,
    default_retry_delay=RETRY_DELAY_SECONDS,
)
def deliver_alert(
    self,
    notification: dict[str, Any],
    only: list[str] | None = None,
) -> dict[str, Any]:
    """
    Deliver an alert notification to the configured webhooks.

    Targets that fail are retried (and only those), up to MAX_RETRIES times.

    Args:
        notification: core.alerts.Notification.to_dict()
        only: Target names to deliver to; None means all

    Returns:
        Dict with sent and failed target names
    """
    logger.info(f"Delivering alert: {notification.get('title')}")

    result = get_dispatcher().send(notification, only=only)

    if result.failed and self.request.retries < self.max_retries:
        failed = sorted(result.failed)
        logger.warning(f"Retrying alert delivery to {failed}")
        raise self.retry(
            args=(notification,),
            kwargs={"only": failed},
            exc=httpx.TransportError(f"Webhook delivery failed for {failed}"),
        )

    if result.failed:
        logger.error(f"Giving up on alert delivery to {sorted(result.failed)}")

    return {"sent": result.sent, "failed": sorted(result.failed)}
