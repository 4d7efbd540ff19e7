"""
ci_relay.notifier — Render a CI event and post it to a Slack incoming webhook.

Delivery is best effort: one POST, no retry, and every failure is logged and
returned as a DeliveryResult so it never reaches the request path.
"""

from __future__ import annotations

from dataclasses import dataclass

import requests
from aws_lambda_powertools import Logger

from ci_relay.models import CIEvent, RunStatus

logger = Logger(service="ci-notify", child=True)

DEFAULT_TIMEOUT_SECONDS = 5.0
SHORT_SHA_LENGTH = 7

_STATUS_EMOJI = {
    RunStatus.SUCCESS: "✅",
    RunStatus.CANCELED: "⚠️",
    RunStatus.FAILURE: "❌",
}


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    status_code: int | None = None
    error: str | None = None


def status_emoji(status: str) -> str:
    return _STATUS_EMOJI[RunStatus.classify(status)]


def render_message(event: CIEvent) -> str:
    """Render the Slack text for one pipeline run.

    Raises:
        ValueError: the commit hash is shorter than SHORT_SHA_LENGTH.
    """
    if len(event.sha) < SHORT_SHA_LENGTH:
        raise ValueError(
            f"commit sha must be at least {SHORT_SHA_LENGTH} characters, got {len(event.sha)}"
        )
    return (
        f"{status_emoji(event.outcome)} *{event.workflow}* #{event.run_number} "
        f"on `{event.ref}` by {event.actor}\n"
        f"{event.html_url}\n"
        f"commit: `{event.sha[:SHORT_SHA_LENGTH]}`"
    )


class SlackNotifier:
    """Posts rendered CI events to a fixed incoming-webhook URL."""

    def __init__(self, webhook_url: str, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout

    def deliver(self, event: CIEvent) -> DeliveryResult:
        """Send one notification. Never raises."""
        if not self._webhook_url:
            logger.warning("Slack webhook URL not configured, notification dropped")
            return DeliveryResult(delivered=False, error="webhook url not configured")

        status_code: int | None = None
        try:
            text = render_message(event)
            response = requests.post(
                self._webhook_url,
                json={"text": text},
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
            status_code = response.status_code
            response.raise_for_status()
        except Exception as exc:
            logger.exception(
                "Failed to send notification to Slack",
                extra={"status_code": status_code, "error_type": type(exc).__name__},
            )
            return DeliveryResult(delivered=False, status_code=status_code, error=str(exc))

        logger.info("Notification sent to Slack", extra={"status_code": status_code})
        return DeliveryResult(delivered=True, status_code=status_code)
