# =============================================================================
# lib/webhooks.py - Webhook Notification Delivery
# =============================================================================
# Formats alert notifications for each chat/webhook platform and posts them
# with httpx:
# - slack:   incoming webhook with a colored attachment
# - teams:   legacy MessageCard
# - discord: embed
# - custom:  the notification as plain JSON
#
# Delivery to one target never stops delivery to the others; the result
# reports which targets failed so the caller can retry just those.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)

WebhookKind = Literal["slack", "teams", "discord", "custom"]

SEVERITY_COLORS = {
    "critical": "#ff0000",
    "warning": "#ffa500",
    "info": "#0000ff",
}
DEFAULT_COLOR = "#808080"


@dataclass(frozen=True)
class WebhookTarget:
    """One configured webhook endpoint."""
    name: str
    kind: WebhookKind
    url: str
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class DeliveryResult:
    """Outcome of sending one notification to every target."""
    sent: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def severity_color(severity: str) -> str:
    return SEVERITY_COLORS.get(severity, DEFAULT_COLOR)


def build_targets(settings: Any) -> list[WebhookTarget]:
    """Collect every enabled webhook from application settings."""
    targets: list[WebhookTarget] = []

    if settings.SLACK_WEBHOOK_URL:
        targets.append(WebhookTarget(
            name="slack",
            kind="slack",
            url=settings.SLACK_WEBHOOK_URL,
            options={"channel": settings.SLACK_CHANNEL, "username": settings.SLACK_USERNAME},
        ))

    if settings.TEAMS_WEBHOOK_URL:
        targets.append(WebhookTarget(
            name="teams",
            kind="teams",
            url=settings.TEAMS_WEBHOOK_URL,
            options={"title": settings.TEAMS_TITLE},
        ))

    if settings.DISCORD_WEBHOOK_URL:
        targets.append(WebhookTarget(
            name="discord",
            kind="discord",
            url=settings.DISCORD_WEBHOOK_URL,
            options={"username": settings.DISCORD_USERNAME},
        ))

    for name, url in settings.custom_webhooks_list:
        targets.append(WebhookTarget(name=name, kind="custom", url=url))

    return targets


# =============================================================================
# Payload Formatting
# =============================================================================

def format_payload(target: WebhookTarget, notification: dict[str, Any]) -> dict[str, Any]:
    """
    Build the request body for a target.

    `notification` carries title, message, severity, action, environment
    and timestamp (see core.alerts.Notification.to_dict).
    """
    title = notification.get("title", "Alert")
    message = notification.get("message", "")
    action = notification.get("action", "")
    environment = notification.get("environment", "development")
    timestamp = notification.get("timestamp", "")
    color = severity_color(notification.get("severity", "info"))

    if target.kind == "slack":
        return {
            "channel": target.options.get("channel"),
            "username": target.options.get("username"),
            "text": title,
            "attachments": [{
                "color": color,
                "fields": [
                    {"title": "Message", "value": message, "short": False},
                    {"title": "Action Required", "value": action, "short": False},
                    {"title": "Environment", "value": environment, "short": True},
                    {"title": "Timestamp", "value": timestamp, "short": True},
                ],
            }],
        }

    if target.kind == "teams":
        return {
            "@type": "MessageCard",
            "@context": "http://schema.org/extensions",
            "themeColor": color,
            "summary": title,
            "title": target.options.get("title"),
            "sections": [{
                "activityTitle": title,
                "activitySubtitle": message,
                "facts": [
                    {"name": "Action Required", "value": action},
                    {"name": "Environment", "value": environment},
                    {"name": "Timestamp", "value": timestamp},
                ],
            }],
        }

    if target.kind == "discord":
        return {
            "username": target.options.get("username"),
            "embeds": [{
                "title": title,
                "description": message,
                # Discord wants the color as an integer
                "color": int(color.lstrip("#"), 16),
                "fields": [
                    {"name": "Action Required", "value": action or "-"},
                    {"name": "Environment", "value": environment, "inline": True},
                ],
                "timestamp": timestamp or None,
            }],
        }

    return dict(notification)


# =============================================================================
# Delivery
# =============================================================================

class WebhookDispatcher:
    """
    Posts notifications to webhook targets.

    Example:
        dispatcher = WebhookDispatcher(build_targets(settings))
        result = dispatcher.send(notification)
        if not result.ok:
            logger.warning(result.failed)
    """

    def __init__(
        self,
        targets: list[WebhookTarget],
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.targets = targets
        self.timeout = timeout
        self._client = client

    def send(
        self,
        notification: dict[str, Any],
        only: list[str] | None = None,
    ) -> DeliveryResult:
        """
        Deliver a notification.

        Args:
            notification: Notification dict
            only: Restrict delivery to these target names (used on retry)
        """
        result = DeliveryResult()
        targets = [t for t in self.targets if only is None or t.name in only]
        if not targets:
            return result

        client = self._client or httpx.Client(timeout=self.timeout)
        try:
            for target in targets:
                try:
                    response = client.post(target.url, json=format_payload(target, notification))
                    response.raise_for_status()
                    result.sent.append(target.name)
                except httpx.HTTPError as e:
                    logger.warning(f"Webhook {target.name} failed: {e}")
                    result.failed[target.name] = str(e)
        finally:
            if self._client is None:
                client.close()

        logger.info(
            f"Delivered '{notification.get('title')}' to {len(result.sent)}/{len(targets)} webhooks"
        )
        return result
