"""Signed caller identity.

The front end vouches for the X-User-Id it sends by signing
``"<unix seconds>:<nonce>:<user id>"`` with the shared HMAC_SECRET and sending
the hex digest in X-Signature, next to X-Request-Timestamp and X-Nonce.
A signature older or newer than five minutes is refused; nonces are not
remembered.
"""
import hashlib
import hmac
import time
from typing import Optional


TIMESTAMP_TOLERANCE_SECONDS = 300


def sign_request(secret: str, user_id: str, timestamp: str, nonce: str) -> str:
    message = f"{timestamp}:{nonce}:{user_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_request_signature(
    secret: str,
    user_id: str,
    timestamp: Optional[str],
    nonce: Optional[str],
    signature: Optional[str],
) -> bool:
    """False on any missing header, stale timestamp or digest mismatch."""
    if not all([timestamp, nonce, signature]):
        return False

    try:
        ts = int(timestamp)  # type: ignore[arg-type]
    except (ValueError, TypeError):
        return False

    if abs(int(time.time()) - ts) > TIMESTAMP_TOLERANCE_SECONDS:
        return False

    expected = sign_request(secret, user_id, timestamp, nonce)  # type: ignore[arg-type]
    return hmac.compare_digest(expected, signature)  # type: ignore[arg-type]
