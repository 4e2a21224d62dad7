# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The Celery app that carries alert notifications from the API to the
# webhook delivery task. The broker is the Redis instance named by
# settings.REDIS_URL. Alert results are never read back, so no result
# backend is configured.
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q alerts --loglevel=info
#
#   # Inspect the alerts queue
#   celery -A workers.celery_app inspect active_queues
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_retry

from app.config import settings

logger = logging.getLogger(__name__)


def _redacted(url: str) -> str:
    """Broker URL without credentials, for logs."""
    return url.rsplit("@", 1)[-1]


def create_celery_app() -> Celery:
    """
    Build the Celery app for alert delivery.

    Returns:
        Celery app bound to the configured Redis broker
    """
    app = Celery(
        "todo_worker",
        broker=settings.REDIS_URL,
        include=["workers.tasks"],
    )
    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Alert worker broker: {_redacted(settings.REDIS_URL)}")
    return app


celery_app = create_celery_app()


# =============================================================================
# Delivery Signals
# =============================================================================

@task_retry.connect
def log_alert_retry(sender=None, request=None, reason=None, **extra):
    """An alert delivery is going around again for its failed webhooks."""
    logger.warning(f"Retrying {sender.name} [{request.id}]: {reason}")


@task_failure.connect
def log_alert_failure(sender=None, task_id=None, exception=None, **extra):
    """An alert delivery raised instead of returning a result."""
    logger.error(f"Alert task {sender.name} [{task_id}] failed: {exception}")
