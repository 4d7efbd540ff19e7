"""
ci_relay.signature — HMAC-SHA256 verification of inbound CI webhooks.

The sender signs the exact request body bytes with the shared secret and
sends the result as ``x-signature-256: sha256=<hex digest>``. Verification
must run over the untouched raw body; a re-serialised form of the parsed
JSON will not match.
"""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_HEADER = "x-signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(raw_body: bytes, secret: bytes) -> str:
    """Return the lower-case hex HMAC-SHA256 of raw_body keyed by secret."""
    return hmac.new(secret, raw_body, hashlib.sha256).hexdigest()


def sign(raw_body: bytes, secret: bytes) -> str:
    """Return a header value of the form ``sha256=<hex digest>``."""
    return SIGNATURE_PREFIX + compute_signature(raw_body, secret)


def verify_signature(raw_body: bytes, signature_header: str | None, secret: bytes) -> bool:
    """Check a signature header against the raw body.

    A missing header or one without the ``sha256=`` prefix fails before any
    hashing is done. Candidate and expected digests are length-checked first
    and only equal-length values reach the constant-time comparison, so a
    malformed suffix returns False instead of raising.
    """
    if not signature_header or not signature_header.startswith(SIGNATURE_PREFIX):
        return False

    # surrogatepass: a header decoded from JSON may carry lone surrogates
    suffix = signature_header[len(SIGNATURE_PREFIX) :]
    candidate = suffix.encode("utf-8", errors="surrogatepass")
    expected = compute_signature(raw_body, secret).encode("ascii")
    if len(candidate) != len(expected):
        return False
    return hmac.compare_digest(candidate, expected)


class Authenticator:
    """Verifies request bodies against a secret fixed at construction."""

    def __init__(self, secret: bytes) -> None:
        self._secret = secret

    def __repr__(self) -> str:
        return "Authenticator(secret=<redacted>)"

    def verify(self, raw_body: bytes, signature_header: str | None) -> bool:
        return verify_signature(raw_body, signature_header, self._secret)

    def sign(self, raw_body: bytes) -> str:
        return sign(raw_body, self._secret)
