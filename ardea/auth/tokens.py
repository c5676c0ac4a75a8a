"""
Ardea Auth - Token Management

Compact HS256 tokens (header.payload.signature) signed with a shared
secret.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

logger = logging.getLogger("ardea.auth")


class TokenManager:
    """
    Issue and verify HS256 tokens.

    ``verify`` is shaped to be used directly as the verifier of
    ``bearer_auth``: it returns the payload, or ``None`` for anything
    malformed, tampered or expired.

    Example:
        tokens = TokenManager("change-me", ttl=3600)
        token = tokens.sign({"id": "u1", "role": "admin"})
        payload = await tokens.verify(token)
    """

    ALGORITHM = "HS256"

    def __init__(self, secret: str | bytes, ttl: int | None = None):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.secret = secret.encode() if isinstance(secret, str) else secret
        self.ttl = ttl

    def sign(self, payload: dict[str, Any], ttl: int | None = None) -> str:
        """Sign ``payload``, adding ``iat`` and (with a ttl) ``exp``."""
        now = int(time.time())
        claims = {**payload, "iat": payload.get("iat", now)}

        ttl = ttl if ttl is not None else self.ttl
        if ttl is not None:
            claims["exp"] = now + ttl

        header_b64 = self._base64_encode_json({"alg": self.ALGORITHM, "typ": "JWT"})
        payload_b64 = self._base64_encode_json(claims)
        message = f"{header_b64}.{payload_b64}".encode()
        return f"{header_b64}.{payload_b64}.{self._base64_encode(self._digest(message))}"

    async def verify(self, token: str) -> dict[str, Any] | None:
        try:
            return self.decode(token)
        except ValueError as e:
            logger.debug(f"Rejected token: {e}")
            return None

    def decode(self, token: str) -> dict[str, Any]:
        """
        Validate and decode a token.

        Raises:
            ValueError: Malformed token, bad signature or expired
        """
        try:
            header_b64, payload_b64, signature_b64 = token.split(".")
        except (AttributeError, ValueError):
            raise ValueError("Malformed token: expected 3 parts") from None

        try:
            header = self._base64_decode_json(header_b64)
            signature = self._base64_decode(signature_b64)
        except (ValueError, TypeError):
            raise ValueError("Malformed token encoding") from None

        if header.get("alg") != self.ALGORITHM:
            raise ValueError(f"Unsupported algorithm: {header.get('alg')}")

        h = hmac.HMAC(self.secret, hashes.SHA256())
        h.update(f"{header_b64}.{payload_b64}".encode())
        try:
            h.verify(signature)
        except InvalidSignature:
            raise ValueError("Invalid signature") from None

        try:
            payload = self._base64_decode_json(payload_b64)
        except (ValueError, TypeError):
            raise ValueError("Malformed token payload") from None

        exp = payload.get("exp")
        if exp is not None and exp < int(time.time()):
            raise ValueError("Token expired")

        return payload

    def _digest(self, message: bytes) -> bytes:
        h = hmac.HMAC(self.secret, hashes.SHA256())
        h.update(message)
        return h.finalize()

    def _base64_encode(self, data: bytes) -> str:
        """URL-safe base64 encode."""
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode()

    def _base64_decode(self, data: str) -> bytes:
        """URL-safe base64 decode."""
        padding = 4 - (len(data) % 4)
        if padding != 4:
            data += "=" * padding
        return base64.urlsafe_b64decode(data)

    def _base64_encode_json(self, data: dict) -> str:
        json_bytes = json.dumps(data, separators=(",", ":")).encode()
        return self._base64_encode(json_bytes)

    def _base64_decode_json(self, data: str) -> dict:
        decoded = json.loads(self._base64_decode(data))
        if not isinstance(decoded, dict):
            raise ValueError("Token segment is not an object")
        return decoded
