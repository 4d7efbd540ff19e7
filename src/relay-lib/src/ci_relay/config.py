"""
ci_relay.config — Process configuration for the relay.

Values are resolved once per container from the environment and passed
explicitly to the Authenticator and SlackNotifier. The shared secret may be
given directly (CI_NOTIFY_SECRET) or as the name of an SSM SecureString
parameter (CI_NOTIFY_SECRET_PARAM), which takes precedence.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from ci_relay.exceptions import ConfigurationError
from ci_relay.notifier import DEFAULT_TIMEOUT_SECONDS

logger = Logger(service="ci-notify", child=True)

SECRET_ENV = "CI_NOTIFY_SECRET"  # pragma: allowlist secret
SECRET_PARAM_ENV = "CI_NOTIFY_SECRET_PARAM"  # pragma: allowlist secret
WEBHOOK_URL_ENV = "SLACK_WEBHOOK_URL"
TIMEOUT_ENV = "SLACK_TIMEOUT_SECONDS"
DEFAULT_REGION = "eu-west-2"


@dataclass(frozen=True)
class RelayConfig:
    secret: bytes = field(repr=False)
    slack_webhook_url: str = field(repr=False)
    delivery_timeout: float = DEFAULT_TIMEOUT_SECONDS


def _parse_timeout(value: str | None) -> float:
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{TIMEOUT_ENV} must be a number, got {value!r}") from exc
    if timeout <= 0:
        raise ConfigurationError(f"{TIMEOUT_ENV} must be greater than zero, got {value!r}")
    return timeout


def get_secret_parameter(name: str, region: str) -> str:
    """Read a SecureString parameter from SSM, decrypted."""
    ssm = boto3.client("ssm", region_name=region)
    try:
        response = ssm.get_parameter(Name=name, WithDecryption=True)
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code", "Unknown")
        raise ConfigurationError(f"Unable to read SSM parameter {name!r}: {code}") from exc
    except BotoCoreError as exc:
        raise ConfigurationError(f"Unable to read SSM parameter {name!r}: {exc}") from exc
    return str(response["Parameter"].get("Value", ""))


def load_config(environ: Mapping[str, str] | None = None) -> RelayConfig:
    """Build a RelayConfig from environment variables.

    An empty secret is accepted as a (weak) HMAC key and only warned about.
    An empty webhook URL is also accepted; deliveries then fail and are
    logged without affecting responses.

    Raises:
        ConfigurationError: the SSM parameter cannot be read or the timeout
            is not a positive number.
    """
    env = os.environ if environ is None else environ

    param_name = env.get(SECRET_PARAM_ENV, "").strip()
    if param_name:
        region = env.get("AWS_REGION", DEFAULT_REGION)
        secret_text = get_secret_parameter(param_name, region)
        logger.info("Shared secret loaded from SSM", extra={"parameter": param_name})
    else:
        secret_text = env.get(SECRET_ENV, "")

    if not secret_text:
        logger.warning("Shared secret is empty; signatures are keyed with an empty secret")

    webhook_url = env.get(WEBHOOK_URL_ENV, "").strip()
    if not webhook_url:
        logger.warning(f"{WEBHOOK_URL_ENV} not set, notifications will not be delivered")

    return RelayConfig(
        secret=secret_text.encode("utf-8"),
        slack_webhook_url=webhook_url,
        delivery_timeout=_parse_timeout(env.get(TIMEOUT_ENV)),
    )
