"""
ci_relay.models — Typed CI event payload and run status vocabulary.

The payload is decoded straight from the verified raw body. Extra fields
sent by the CI system are ignored; missing or mistyped required fields are
reported as a MalformedPayloadError rather than surfacing later as attribute
errors during rendering.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ci_relay.exceptions import MalformedPayloadError

# ---------------------------------------------------------------------------
# Run outcome vocabulary
# ---------------------------------------------------------------------------


class RunStatus(StrEnum):
    SUCCESS = "success"
    CANCELED = "canceled"
    FAILURE = "failure"

    @classmethod
    def classify(cls, raw: str) -> RunStatus:
        """Map a raw status string onto the three outcomes.

        Total mapping: anything that is not exactly "success" or "canceled"
        (including "failure" and unknown values) is a FAILURE.
        """
        if raw == cls.SUCCESS:
            return cls.SUCCESS
        if raw == cls.CANCELED:
            return cls.CANCELED
        return cls.FAILURE


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------


class CIEvent(BaseModel):
    """One completed pipeline run, as posted by the CI workflow."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: str
    workflow: str
    run_number: int  # JSON number or numeric string
    ref: str
    actor: str
    html_url: str
    sha: str  # full commit hash; length checked at render time

    @field_validator("run_number", mode="before")
    @classmethod
    def _reject_bool_run_number(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("run_number must be a number or numeric string")
        return value

    @property
    def outcome(self) -> RunStatus:
        return RunStatus.classify(self.status)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "body"
    return f"{location}: {error.get('msg', 'invalid')}"


def decode_event(raw_body: bytes) -> CIEvent:
    """Decode and validate a CI event from the raw request body.

    Raises:
        MalformedPayloadError: body is not a JSON object with the required
            fields of the expected types.
    """
    try:
        return CIEvent.model_validate_json(raw_body)
    except ValidationError as exc:
        raise MalformedPayloadError([_describe(err) for err in exc.errors()]) from exc
