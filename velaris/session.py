"""
Stateless admin session tokens.

A token is ``<payload>.<signature>`` where both halves are unpadded
base64url: the payload is compact JSON ``{"v":1,"iat":...,"exp":...}`` and
the signature is HMAC-SHA256 over the encoded payload. Nothing is stored
server-side; expiry travels inside the signed payload.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from velaris.config import ADMIN_SESSION_TTL_SECONDS, SESSION_VERSION

logger = logging.getLogger(__name__)

SEPARATOR = "."


@dataclass(frozen=True)
class SessionPayload:
    version: int
    issued_at: int
    expires_at: int

    def to_json_bytes(self) -> bytes:
        data = {"v": self.version, "iat": self.issued_at, "exp": self.expires_at}
        return json.dumps(data, separators=(",", ":")).encode("utf-8")


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _sign(secret: str, encoded_payload: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"), encoded_payload.encode("ascii"), hashlib.sha256
    ).digest()
    return b64url_encode(digest)


def _now() -> int:
    return int(time.time())


def issue_session_token(
    secret: str,
    ttl_seconds: int = ADMIN_SESSION_TTL_SECONDS,
    now: Optional[int] = None,
) -> str:
    """
    Create a signed session token valid for *ttl_seconds*.

    Parameters
    ----------
    secret : str
        HMAC key. Must not be empty.
    ttl_seconds : int
        Lifetime of the token; must be positive.
    now : int | None
        Issue time as a Unix timestamp. Defaults to the current time.

    Raises
    ------
    ValueError
        If the secret is empty or the lifetime is not positive. Both are
        configuration problems, not user errors.
    """
    if not secret:
        raise ValueError("Session secret is not configured")
    if ttl_seconds <= 0:
        raise ValueError("Session lifetime must be positive")

    issued_at = _now() if now is None else int(now)
    payload = SessionPayload(
        version=SESSION_VERSION,
        issued_at=issued_at,
        expires_at=issued_at + int(ttl_seconds),
    )
    encoded = b64url_encode(payload.to_json_bytes())
    return f"{encoded}{SEPARATOR}{_sign(secret, encoded)}"


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def verify_session_token(secret: str, token: str, now: Optional[int] = None) -> bool:
    """Return True only for an untampered, current-version, unexpired token.

    Every failure collapses to False; this function never raises.
    """
    if not secret or not isinstance(token, str) or not token:
        return False

    parts = token.split(SEPARATOR)
    if len(parts) != 2:
        return False
    encoded, signature = parts
    if not encoded or not signature:
        return False

    try:
        expected = _sign(secret, encoded)
        matches = hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
    except UnicodeEncodeError:
        return False
    if not matches:
        return False

    try:
        data = json.loads(b64url_decode(encoded).decode("utf-8"))
    except (binascii.Error, ValueError):
        return False
    if not isinstance(data, dict):
        return False

    version = data.get("v")
    if isinstance(version, bool) or version != SESSION_VERSION:
        return False

    expires_at = data.get("exp")
    if not _is_number(expires_at):
        return False

    current = _now() if now is None else now
    if current > expires_at:
        logger.info("Rejected expired admin session (exp=%s)", expires_at)
        return False
    return True
