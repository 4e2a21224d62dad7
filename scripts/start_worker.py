#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker that delivers alert notifications to webhooks.
#
# Usage:
#   # Start worker (development)
#   poetry run python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   poetry run celery -A workers.celery_app worker -Q alerts --loglevel=info
#
# Prerequisites:
#   - Redis must be running (REDIS_URL)
#   - At least one webhook URL configured (.env file)
# =============================================================================

from workers.celery_app import celery_app


def main():
    """Start the Celery worker on the alerts queue."""
    print("=" * 60)
    print("To-do API Alert Worker")
    print("=" * 60)
    print()
    print("Starting worker...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--queues=alerts",
        "--concurrency=1",
    ])


if __name__ == "__main__":
    main()
