"""
ci_relay — Signature verification and Slack delivery for CI completion webhooks.

Used by the notify_ci Lambda. Both halves are stateless; the secret and the
destination URL are injected through RelayConfig.
"""

from ci_relay.config import RelayConfig, load_config
from ci_relay.exceptions import CIRelayError, ConfigurationError, MalformedPayloadError
from ci_relay.models import CIEvent, RunStatus, decode_event
from ci_relay.notifier import DeliveryResult, SlackNotifier, render_message
from ci_relay.signature import SIGNATURE_HEADER, Authenticator

__all__ = [
    "SIGNATURE_HEADER",
    "Authenticator",
    "CIEvent",
    "CIRelayError",
    "ConfigurationError",
    "DeliveryResult",
    "MalformedPayloadError",
    "RelayConfig",
    "RunStatus",
    "SlackNotifier",
    "decode_event",
    "load_config",
    "render_message",
]
