"""
notify_ci.handler — CI completion webhook relay Lambda.

Verifies the x-signature-256 HMAC over the raw request body, decodes the CI
event and forwards a one-line summary to Slack. Slack delivery is best
effort: once the signature is valid the caller gets 200 whether or not the
notification went out.

Responses:
    200 {"ok": true}
    400 {"ok": false, "reason": "malformed payload"}
    401 {"ok": false, "reason": "invalid signature"}
    405 {"ok": false, "reason": "method not allowed"}
    500 {"ok": false, "reason": "internal error"}
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.logging import correlation_paths
from ci_relay import (
    SIGNATURE_HEADER,
    Authenticator,
    MalformedPayloadError,
    RelayConfig,
    SlackNotifier,
    decode_event,
    load_config,
)

logger = Logger(service="ci-notify")
tracer = Tracer(service="ci-notify")

# Resolved on first request and reused across warm starts
_relay_config: RelayConfig | None = None


def _config() -> RelayConfig:
    global _relay_config
    if _relay_config is None:
        _relay_config = load_config()
    return _relay_config


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _rejection(status_code: int, reason: str) -> dict[str, Any]:
    return _response(status_code, {"ok": False, "reason": reason})


def _http_method(event: dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return str(method or "").upper()


def _header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup (REST API keeps caller casing, HTTP API lowercases)."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted:
            return None if value is None else str(value)
    return None


def _raw_body(event: dict[str, Any]) -> bytes | None:
    """Return the body bytes exactly as received, or None if they cannot be recovered."""
    body = event.get("body")
    if body is None:
        return b""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            return None
    try:
        return str(body).encode("utf-8")
    except UnicodeEncodeError:
        return None


@logger.inject_lambda_context(
    correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True
)
@tracer.capture_lambda_handler
def lambda_handler(event: dict[str, Any], _context: Any) -> dict[str, Any]:
    """Lambda entry point."""
    method = _http_method(event)
    if method != "POST":
        logger.warning("Unsupported method", extra={"method": method})
        return _rejection(405, "method not allowed")

    try:
        config = _config()
        raw_body = _raw_body(event)
        signature = _header(event, SIGNATURE_HEADER)

        authenticator = Authenticator(config.secret)
        if raw_body is None or not authenticator.verify(raw_body, signature):
            logger.warning(
                "Signature verification failed",
                extra={"signature_present": signature is not None},
            )
            return _rejection(401, "invalid signature")

        ci_event = decode_event(raw_body)
        logger.append_keys(workflow=ci_event.workflow, run_number=ci_event.run_number)
        logger.info(
            "CI notification received",
            extra={"status": ci_event.status, "ref": ci_event.ref, "actor": ci_event.actor},
        )

        notifier = SlackNotifier(config.slack_webhook_url, timeout=config.delivery_timeout)
        result = notifier.deliver(ci_event)
        if not result.delivered:
            logger.warning(
                "Notification not delivered",
                extra={"status_code": result.status_code, "error": result.error},
            )

        return _response(200, {"ok": True})
    except MalformedPayloadError as exc:
        logger.warning("Malformed CI event payload", extra={"errors": exc.errors})
        return _rejection(400, "malformed payload")
    except Exception:
        logger.exception("Unhandled notify-ci handler error")
        return _rejection(500, "internal error")
