"""
tests/test_signature.py — HMAC-SHA256 webhook signature verification.

Coverage:
  - sign/verify round trip for arbitrary bodies, including the empty body
    and the empty secret.
  - Tampering with a single byte of the body fails verification.
  - Missing header or missing sha256= prefix fails without hashing.
  - Only equal-length digests reach the constant-time comparison.
  - Malformed suffixes return False instead of raising.
"""

from __future__ import annotations

import hmac
from unittest.mock import patch

import pytest
from ci_relay import signature
from ci_relay.signature import (
    SIGNATURE_PREFIX,
    Authenticator,
    compute_signature,
    sign,
    verify_signature,
)

SECRET = b"topsecret"  # pragma: allowlist secret

BODIES = [
    b"",
    b"{}",
    b'{"status": "success", "workflow": "build"}',
    '{"actor": "jörg", "ref": "feature/☃"}'.encode(),
    bytes(range(256)),
]

# ---------------------------------------------------------------------------
# compute_signature / sign
# ---------------------------------------------------------------------------


def test_compute_signature_matches_rfc4231_vector() -> None:
    digest = compute_signature(b"what do ya want for nothing?", b"Jefe")
    assert digest == "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"


def test_sign_prefixes_hex_digest() -> None:
    header = sign(b"payload", SECRET)
    assert header.startswith("sha256=")
    assert header == SIGNATURE_PREFIX + compute_signature(b"payload", SECRET)
    assert len(header) == len("sha256=") + 64


# ---------------------------------------------------------------------------
# Round trip and tampering
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("body", BODIES)
@pytest.mark.parametrize("secret", [SECRET, b""])
def test_valid_signature_verifies(body: bytes, secret: bytes) -> None:
    assert verify_signature(body, sign(body, secret), secret) is True


@pytest.mark.parametrize("body", [b for b in BODIES if b])
def test_single_byte_change_fails(body: bytes) -> None:
    header = sign(body, SECRET)
    tampered = bytes([body[0] ^ 0x01]) + body[1:]
    assert verify_signature(tampered, header, SECRET) is False


def test_wrong_secret_fails() -> None:
    body = b'{"status": "success"}'
    assert verify_signature(body, sign(body, b"other-secret"), SECRET) is False


def test_reserialised_body_does_not_verify() -> None:
    raw = b'{"status":"success",  "workflow":"build"}'
    reserialised = b'{"status": "success", "workflow": "build"}'
    assert verify_signature(reserialised, sign(raw, SECRET), SECRET) is False


# ---------------------------------------------------------------------------
# Header format
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "header",
    [None, "", "deadbeef", "sha1=deadbeef", "SHA256=deadbeef", " sha256=deadbeef"],
)
def test_missing_or_unprefixed_header_fails_without_hashing(header: str | None) -> None:
    with patch.object(signature, "compute_signature", wraps=compute_signature) as spy:
        assert verify_signature(b"{}", header, SECRET) is False
    spy.assert_not_called()


def test_unset_secret_with_bad_header_is_well_defined() -> None:
    assert verify_signature(b"", None, b"") is False
    assert verify_signature(b"", "nope", b"") is False


@pytest.mark.parametrize(
    "suffix",
    [
        "deadbeef",
        "",
        "z" * 64,
        "é" * 32,  # 64 bytes once UTF-8 encoded
        "☃" * 10,
        "0" * 65,
        "\ud800",
        "\ud800" * 21 + "0",  # 64 bytes with surrogatepass
        "\udc80" * 64,
    ],
)
def test_malformed_suffix_returns_false(suffix: str) -> None:
    assert verify_signature(b"{}", SIGNATURE_PREFIX + suffix, SECRET) is False


# ---------------------------------------------------------------------------
# Constant-time comparison
# ---------------------------------------------------------------------------


def test_length_mismatch_skips_digest_comparison() -> None:
    with patch.object(signature.hmac, "compare_digest", wraps=hmac.compare_digest) as spy:
        assert verify_signature(b"{}", "sha256=deadbeef", SECRET) is False
    spy.assert_not_called()


def test_equal_length_values_use_compare_digest() -> None:
    body = b'{"status": "failure"}'
    wrong = "0" * 64
    with patch.object(signature.hmac, "compare_digest", wraps=hmac.compare_digest) as spy:
        assert verify_signature(body, SIGNATURE_PREFIX + wrong, SECRET) is False
        assert verify_signature(body, sign(body, SECRET), SECRET) is True

    assert spy.call_count == 2
    for call in spy.call_args_list:
        candidate, expected = call.args
        assert isinstance(candidate, bytes)
        assert len(candidate) == len(expected)


# ---------------------------------------------------------------------------
# Authenticator
# ---------------------------------------------------------------------------


def test_authenticator_uses_injected_secret() -> None:
    auth = Authenticator(SECRET)
    body = b'{"sha": "abcdef1234567"}'
    assert auth.verify(body, auth.sign(body)) is True
    assert auth.verify(body, sign(body, b"different")) is False
    assert auth.verify(body, None) is False


def test_authenticator_repr_hides_secret() -> None:
    assert "topsecret" not in repr(Authenticator(SECRET))
