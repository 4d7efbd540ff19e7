"""
ci_relay.exceptions — Error kinds raised by the relay library.

Authentication and delivery never raise; they report outcomes as values.
Only payload decoding and configuration loading surface exceptions.
"""

from __future__ import annotations


class CIRelayError(Exception):
    """Base class for all relay errors."""


class MalformedPayloadError(CIRelayError):
    """
    Raised when a verified request body cannot be decoded into a CI event.

    The signature only proves the bytes came from the secret holder, not that
    they are well formed. Callers map this to a 400 response.

    Attributes:
        errors: Offending field locations, e.g. ["sha: Field required"].
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Malformed CI event payload: " + "; ".join(errors))


class ConfigurationError(CIRelayError):
    """Raised when process configuration cannot be resolved."""
