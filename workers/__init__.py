# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background delivery of alert notifications.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (webhook alert delivery)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q alerts --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import deliver_alert
#   deliver_alert.delay(notification.to_dict())
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
