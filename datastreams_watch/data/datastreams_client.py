"""Data Streams WebSocket/REST client.

The client opens one authenticated WebSocket subscription for a set of feed ids
and exposes incoming frames as :class:`Report` and :class:`StreamError` events.
Reconnects and heartbeats beyond the websocket library's own pings are out of
scope: when the connection ends the iterator reports it once and finishes.
A REST helper fetches the latest report for a single feed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Optional
from urllib.parse import urlencode

import requests
import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake

from .auth import HmacSigner
from .models import Report, StreamError, StreamEvent

WS_PATH = "/api/v1/ws"
LATEST_REPORT_PATH = "/api/v1/reports/latest"


class StreamClientError(RuntimeError):
    """Raised when the client cannot connect or a REST call fails."""


class DataStreamsClient:
    """Streaming client for signed Data Streams reports.

    ``connect()`` suspends until the WebSocket handshake succeeds or raises
    :class:`StreamClientError`; afterwards :meth:`events` yields events in
    arrival order.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        rest_url: str,
        ws_url: str,
        feed_ids: Iterable[str],
        signer: Optional[HmacSigner] = None,
        connector: Optional[Callable[..., Awaitable[Any]]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.rest_url = rest_url.rstrip("/")
        self.ws_url = ws_url.rstrip("/")
        self.feed_ids = list(feed_ids)
        if not self.feed_ids:
            raise ValueError("At least one feed id is required")
        self.signer = signer or HmacSigner(api_key, api_secret)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

        self._connector = connector or websockets.connect
        self._session = session or requests.Session()
        self._ws: Any = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def subscription_path(self) -> str:
        return f"{WS_PATH}?{urlencode({'feedIDs': ','.join(self.feed_ids)}, safe=',')}"

    async def connect(self) -> None:
        """Open the authenticated WebSocket subscription."""

        path = self.subscription_path()
        headers = self.signer.headers("GET", path)
        url = f"{self.ws_url}{path}"
        try:
            self._ws = await self._connector(
                url,
                additional_headers=headers,
                open_timeout=self.timeout,
                ping_interval=20,
                ping_timeout=20,
            )
        except (OSError, InvalidHandshake, asyncio.TimeoutError) as exc:
            raise StreamClientError(f"Failed to connect to {self.ws_url}: {exc}") from exc
        self.logger.info(
            "Subscribed to Data Streams",
            extra={"event": "subscription", "feed_ids": self.feed_ids, "ws_url": self.ws_url},
        )

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield reports and stream errors until the connection ends."""

        if self._ws is None:
            raise StreamClientError("connect() must be awaited before reading events")
        try:
            async for raw in self._ws:
                event = self._parse_message(raw)
                if event is not None:
                    yield event
        except ConnectionClosed as exc:
            self._ws = None
            yield StreamError("Connection closed", exc)
            return
        except OSError as exc:
            self._ws = None
            yield StreamError("Connection failed", exc)
            return
        self._ws = None
        yield StreamError("Connection closed")

    async def close(self) -> None:
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()

    def fetch_latest_report(self, feed_id: Optional[str] = None) -> Report:
        """REST lookup of the most recent report for ``feed_id``."""

        feed_id = feed_id or self.feed_ids[0]
        path = f"{LATEST_REPORT_PATH}?{urlencode({'feedID': feed_id})}"
        url = f"{self.rest_url}{path}"
        try:
            response = self._session.get(url, headers=self.signer.headers("GET", path), timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise StreamClientError(f"Latest report request failed for {feed_id}: {exc}") from exc

        payload = body.get("report") if isinstance(body, dict) else None
        if not isinstance(payload, dict):
            raise StreamClientError(f"Latest report response for {feed_id} has no report")
        try:
            return Report.from_payload(payload)
        except ValueError as exc:
            raise StreamClientError(str(exc)) from exc

    def _parse_message(self, raw: str | bytes) -> Optional[StreamEvent]:
        try:
            text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
            message = json.loads(text)
        except (UnicodeDecodeError, ValueError) as exc:
            return StreamError("Malformed frame", exc)
        if not isinstance(message, dict):
            return StreamError(f"Unexpected frame type {type(message).__name__}")

        if "report" in message:
            payload = message["report"]
            if not isinstance(payload, dict):
                return StreamError("Report frame without report object")
            try:
                return Report.from_payload(payload)
            except ValueError as exc:
                return StreamError("Invalid report frame", exc)
        if "error" in message:
            return StreamError(f"Server error: {message['error']}")

        self.logger.debug("Ignoring frame without report", extra={"event": "frame_ignored", "keys": sorted(message)})
        return None


__all__ = ["DataStreamsClient", "StreamClientError", "LATEST_REPORT_PATH", "WS_PATH"]
