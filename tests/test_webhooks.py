# =============================================================================
# tests/test_webhooks.py - Webhook Delivery Tests
# =============================================================================
# Tests for lib/webhooks.py and the deliver_alert task:
# - Targets built from settings
# - Platform-specific payloads
# - Per-target failures reported, not raised
# Uses httpx.MockTransport; nothing leaves the process.
# =============================================================================

import json
from unittest.mock import patch

import httpx
import pytest

from app.config import Settings
from core.alerts import AlertType, build_notification
from lib.webhooks import (
    WebhookDispatcher,
    WebhookTarget,
    build_targets,
    format_payload,
)

NOTIFICATION = build_notification(AlertType.AUTH_FAILURES, {"count": 12}, "staging").to_dict()


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestBuildTargets:
    """Tests for build_targets."""

    def test_none_configured(self):
        settings = Settings(
            SLACK_WEBHOOK_URL=None, TEAMS_WEBHOOK_URL=None,
            DISCORD_WEBHOOK_URL=None, CUSTOM_WEBHOOKS="",
        )
        assert build_targets(settings) == []

    def test_all_kinds(self):
        settings = Settings(
            SLACK_WEBHOOK_URL="https://hooks.slack.example/1",
            TEAMS_WEBHOOK_URL="https://teams.example/1",
            DISCORD_WEBHOOK_URL="https://discord.example/1",
            CUSTOM_WEBHOOKS="ops=https://ops.example/hook, broken-entry",
        )

        targets = build_targets(settings)

        assert [(t.name, t.kind) for t in targets] == [
            ("slack", "slack"),
            ("teams", "teams"),
            ("discord", "discord"),
            ("ops", "custom"),
        ]


class TestFormatPayload:
    """Tests for format_payload."""

    def test_slack(self):
        target = WebhookTarget("slack", "slack", "https://x", {"channel": "#alerts"})

        payload = format_payload(target, NOTIFICATION)

        assert payload["text"] == "High Authentication Failures"
        assert payload["channel"] == "#alerts"
        assert payload["attachments"][0]["color"] == "#ffa500"

    def test_teams(self):
        payload = format_payload(WebhookTarget("teams", "teams", "https://x"), NOTIFICATION)

        assert payload["@type"] == "MessageCard"
        assert payload["sections"][0]["activitySubtitle"] == NOTIFICATION["message"]

    def test_discord_color_is_int(self):
        payload = format_payload(WebhookTarget("discord", "discord", "https://x"), NOTIFICATION)
        assert payload["embeds"][0]["color"] == 0xFFA500

    def test_custom_is_raw_notification(self):
        payload = format_payload(WebhookTarget("ops", "custom", "https://x"), NOTIFICATION)
        assert payload == NOTIFICATION


class TestWebhookDispatcher:
    """Tests for WebhookDispatcher.send."""

    def test_posts_to_every_target(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((str(request.url), json.loads(request.content)))
            return httpx.Response(200)

        targets = [
            WebhookTarget("slack", "slack", "https://slack.example/hook"),
            WebhookTarget("ops", "custom", "https://ops.example/hook"),
        ]

        result = WebhookDispatcher(targets, client=mock_client(handler)).send(NOTIFICATION)

        assert result.ok
        assert result.sent == ["slack", "ops"]
        assert [url for url, _ in seen] == ["https://slack.example/hook", "https://ops.example/hook"]

    def test_failure_does_not_stop_others(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if "bad" in request.url.host:
                return httpx.Response(500)
            return httpx.Response(204)

        targets = [
            WebhookTarget("bad", "custom", "https://bad.example/hook"),
            WebhookTarget("good", "custom", "https://good.example/hook"),
        ]

        result = WebhookDispatcher(targets, client=mock_client(handler)).send(NOTIFICATION)

        assert not result.ok
        assert result.sent == ["good"]
        assert list(result.failed) == ["bad"]

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        targets = [WebhookTarget("ops", "custom", "https://ops.example/hook")]

        result = WebhookDispatcher(targets, client=mock_client(handler)).send(NOTIFICATION)

        assert list(result.failed) == ["ops"]

    def test_only_restricts_targets(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.host)
            return httpx.Response(200)

        targets = [
            WebhookTarget("a", "custom", "https://a.example/hook"),
            WebhookTarget("b", "custom", "https://b.example/hook"),
        ]

        WebhookDispatcher(targets, client=mock_client(handler)).send(NOTIFICATION, only=["b"])

        assert calls == ["b.example"]


class TestDeliverAlertTask:
    """Tests for workers.tasks.deliver_alert (run in-process)."""

    def test_delivers(self):
        from workers.tasks import deliver_alert

        client = mock_client(lambda request: httpx.Response(200))
        dispatcher = WebhookDispatcher(
            [WebhookTarget("ops", "custom", "https://ops.example/hook")], client=client
        )

        with patch("workers.tasks.get_dispatcher", return_value=dispatcher):
            result = deliver_alert.run(NOTIFICATION)

        assert result == {"sent": ["ops"], "failed": []}

    def test_failed_targets_raise_for_retry(self):
        """Called directly, the retry surfaces as the transport error."""
        from workers.tasks import deliver_alert

        client = mock_client(lambda request: httpx.Response(503))
        dispatcher = WebhookDispatcher(
            [WebhookTarget("ops", "custom", "https://ops.example/hook")], client=client
        )

        with patch("workers.tasks.get_dispatcher", return_value=dispatcher):
            with pytest.raises(httpx.TransportError):
                deliver_alert.run(NOTIFICATION)


class TestCeleryApp:
    """Tests for the alert worker's Celery app."""

    def test_broker_from_settings(self):
        from app.config import settings
        from workers.celery_app import celery_app

        assert celery_app.main == "todo_worker"
        assert celery_app.conf.broker_url == settings.REDIS_URL
        assert not celery_app.conf.result_backend
        assert celery_app.conf.task_ignore_result is True

    def test_alerts_routed_to_alerts_queue(self):
        from workers.celery_app import celery_app

        route = celery_app.conf.task_routes["workers.tasks.deliver_alert"]
        assert route == {"queue": "alerts"}

    def test_only_alert_delivery_registered(self):
        from workers.celery_app import celery_app
        import workers.tasks  # noqa: F401

        ours = {name for name in celery_app.tasks if name.startswith("workers.")}
        assert ours == {"workers.tasks.deliver_alert"}
