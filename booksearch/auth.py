"""
Explicit auth context for a single request.

The token is issued elsewhere; this module only reads it. When the
token is a JWT its payload is decoded (without verifying the
signature, which is the account API's job) to check ``exp`` and to
read the user profile under ``data``. Tokens that are not JWTs are
treated as opaque and valid while non-empty.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)


def _decode_payload(token: str) -> Optional[Dict[str, Any]]:
    parts = token.split(".")
    if len(parts) != 3:
        return None
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError):
        logger.debug("Token payload is not decodable JSON; treating token as opaque")
        return None
    return payload if isinstance(payload, dict) else None


class AuthSession:
    """Read-only view over the current user's token."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = (token or "").strip() or None

    @classmethod
    def from_header(cls, authorization: Optional[str]) -> "AuthSession":
        """Build from an ``Authorization: Bearer <token>`` header value."""
        if not authorization:
            return cls(None)
        scheme, _, value = authorization.strip().partition(" ")
        if scheme.lower() != "bearer":
            return cls(None)
        return cls(value)

    def is_token_expired(self) -> bool:
        if not self._token:
            return True
        payload = _decode_payload(self._token)
        if not payload or "exp" not in payload:
            return False
        try:
            return float(payload["exp"]) < time.time()
        except (TypeError, ValueError):
            return False

    def logged_in(self) -> bool:
        return bool(self._token) and not self.is_token_expired()

    def get_token(self) -> Optional[str]:
        return self._token

    def profile(self) -> Dict[str, Any]:
        """Return the ``data`` claim of a JWT token, or ``{}``."""
        if not self._token:
            return {}
        payload = _decode_payload(self._token) or {}
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    def user_id(self) -> Optional[str]:
        profile = self.profile()
        uid = profile.get("_id") or profile.get("id")
        return str(uid) if uid else None
