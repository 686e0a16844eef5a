"""Inbound webhook signature checks (HMAC-SHA256 over timestamp + token)."""
from __future__ import annotations

import hashlib
import hmac

from split_ledger.domain.errors import ConfigurationError, SignatureVerificationError


def compute_signature(signing_key: str, timestamp: str, token: str) -> str:
    message = f"{timestamp}{token}".encode("utf-8")
    return hmac.new(signing_key.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signature_matches(signing_key: str, timestamp: str, token: str, signature: str) -> bool:
    expected = compute_signature(signing_key, timestamp, token)
    return hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8"))


def verify_signature(signing_key: str, timestamp: str, token: str, signature: str) -> None:
    if not signing_key:
        raise ConfigurationError("Missing inbound signing key")
    if not signature_matches(signing_key, timestamp, token, signature):
        raise SignatureVerificationError("Invalid inbound signature")
