"""
send_test_event.py — Send a signed CI completion event to a relay endpoint.

Builds a sample event (or reads one verbatim from a JSON file), signs the
exact body bytes with the shared secret and POSTs it with the
x-signature-256 header. Useful for smoke-testing a deployed relay.

Exit codes:
    0  Relay answered 2xx (or --dry-run)
    1  Relay answered non-2xx, or the request failed

Usage:
    uv run python scripts/send_test_event.py --url <relay_url> \\
        [--secret <secret>] [--event-file event.json] [--status success] [--dry-run]

The secret defaults to $CI_NOTIFY_SECRET.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any

import requests
from ci_relay.signature import SIGNATURE_HEADER, sign

logger = logging.getLogger("send_test_event")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

SAMPLE_EVENT: dict[str, Any] = {
    "status": "success",
    "workflow": "build",
    "run_number": 42,
    "ref": "main",
    "actor": "alice",
    "html_url": "https://github.com/example/repo/actions/runs/42",
    "sha": "abcdef1234567890abcdef1234567890abcdef12",
}


def build_body(event_file: Path | None = None, status: str | None = None) -> bytes:
    """Return the request body bytes.

    A file is sent byte-for-byte so its signature matches what the relay
    sees; --status only applies to the built-in sample.
    """
    if event_file is not None:
        return event_file.read_bytes()
    event = dict(SAMPLE_EVENT)
    if status:
        event["status"] = status
    return json.dumps(event).encode("utf-8")


def build_headers(body: bytes, secret: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: sign(body, secret.encode("utf-8")),
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Send a signed CI event to the relay")
    parser.add_argument("--url", help="Relay endpoint URL")
    parser.add_argument(
        "--secret",
        default=os.environ.get("CI_NOTIFY_SECRET", ""),
        help="Shared secret (default: $CI_NOTIFY_SECRET)",
    )
    parser.add_argument("--event-file", type=Path, help="JSON file sent verbatim as the body")
    parser.add_argument("--status", help="Override status of the built-in sample event")
    parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the signature header and body instead of sending",
    )
    args = parser.parse_args(argv)
    if not args.dry_run and not args.url:
        parser.error("--url is required unless --dry-run is given")
    return args


def run(url: str, body: bytes, headers: dict[str, str], timeout: float) -> int:
    """POST the signed event and report the relay's answer."""
    response = requests.post(url, data=body, headers=headers, timeout=timeout)
    print(f"{response.status_code} {response.text}")
    if response.ok:
        return 0
    logger.error("Relay rejected event with status %s", response.status_code)
    return 1


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    body = build_body(args.event_file, args.status)
    headers = build_headers(body, args.secret)

    if args.dry_run:
        print(f"{SIGNATURE_HEADER}: {headers[SIGNATURE_HEADER]}")
        print(body.decode("utf-8", errors="replace"))
        return 0

    try:
        return run(args.url, body, headers, args.timeout)
    except requests.RequestException as exc:
        logger.error("send_test_event failed: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
