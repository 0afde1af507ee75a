"""
JWT creation and verification.

Tokens are standard three-part JWTs (``header.payload.signature``) with
base64url segments, signed with HMAC-SHA256.  The secret and lifetime are
passed in from ``Settings`` (env vars: ``JWT_SECRET``, ``JWT_EXPIRY_SECONDS``).

There is no revocation list: a token stays valid until ``exp`` even after
the session it was issued alongside has been logged out.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from auth.errors import ExpiredTokenError, InvalidSignatureError, MalformedTokenError

_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode())


def _decode_json(segment: str) -> Dict[str, Any]:
    try:
        data = json.loads(_b64decode(segment))
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("segment is not base64url JSON") from exc
    if not isinstance(data, dict):
        raise MalformedTokenError("segment is not a JSON object")
    return data


class TokenService:
    """Issues and verifies signed identity tokens."""

    def __init__(self, secret: str, expiry_seconds: int = 86400) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(self._secret, signing_input.encode(), hashlib.sha256).digest()
        return _b64encode(digest)

    def issue(self, user_id: str, *, now: Optional[float] = None) -> str:
        """Create a signed token whose subject is ``user_id``."""
        issued_at = int(time.time() if now is None else now)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.expiry_seconds,
        }
        signing_input = (
            _b64encode(json.dumps(_HEADER, separators=(",", ":")).encode())
            + "."
            + _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        )
        return signing_input + "." + self._sign(signing_input)

    def verify(self, token: str, *, now: Optional[float] = None) -> str:
        """
        Verify ``token`` and return its subject.

        Raises ``MalformedTokenError``, ``InvalidSignatureError`` or
        ``ExpiredTokenError``.  The signature is checked before any payload
        claim is trusted.
        """
        if not isinstance(token, str):
            raise MalformedTokenError("token must be a string")
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            raise MalformedTokenError("expected three segments")
        header_b64, payload_b64, signature = parts

        header = _decode_json(header_b64)
        if header.get("alg") != _HEADER["alg"]:
            raise MalformedTokenError("unsupported algorithm")

        expected = self._sign(header_b64 + "." + payload_b64)
        if not hmac.compare_digest(signature, expected):
            raise InvalidSignatureError("signature mismatch")

        payload = _decode_json(payload_b64)
        subject = payload.get("sub")
        expires_at = payload.get("exp")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("missing subject")
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            raise MalformedTokenError("missing expiry")

        current = time.time() if now is None else now
        if current > expires_at:
            raise ExpiredTokenError("token expired")
        return subject
