"""HMAC request signing for Data Streams REST and WebSocket requests."""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Callable, Dict, Optional


class HmacSigner:
    """Produce the authorization headers expected by the Data Streams API.

    The signed string is ``"<METHOD> <path?query> <sha256(body)> <api key> <timestamp ms>"``.
    """

    def __init__(self, api_key: str, api_secret: str, clock: Optional[Callable[[], float]] = None) -> None:
        self.api_key = api_key
        self._secret = api_secret.encode("utf-8")
        self._clock = clock or time.time

    def string_to_sign(self, method: str, path: str, body: bytes, timestamp_ms: int) -> str:
        body_hash = hashlib.sha256(body).hexdigest()
        return f"{method.upper()} {path} {body_hash} {self.api_key} {timestamp_ms}"

    def headers(self, method: str, path: str, body: bytes = b"") -> Dict[str, str]:
        timestamp_ms = int(self._clock() * 1000)
        message = self.string_to_sign(method, path, body, timestamp_ms)
        signature = hmac.new(self._secret, message.encode("utf-8"), hashlib.sha256).hexdigest()
        return {
            "Authorization": self.api_key,
            "X-Authorization-Timestamp": str(timestamp_ms),
            "X-Authorization-Signature-SHA256": signature,
        }

    def __repr__(self) -> str:
        return f"HmacSigner(api_key={self.api_key!r})"


__all__ = ["HmacSigner"]
