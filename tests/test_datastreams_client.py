import hashlib
import hmac
import json
import unittest
from typing import Any, Dict, List, Optional

import requests
from websockets.exceptions import ConnectionClosedError

from datastreams_watch.data import DataStreamsClient, HmacSigner, Report, StreamClientError, StreamError

FEED_ID = "0x0003" + "ab" * 30

REPORT_PAYLOAD = {
    "feedID": FEED_ID,
    "fullReport": "0x00aa",
    "validFromTimestamp": 1699999999,
    "observationsTimestamp": 1700000000,
}


class FakeConnection:
    def __init__(self, messages: List[Any], error: Optional[BaseException] = None) -> None:
        self.messages = messages
        self.error = error
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self.messages:
            yield message
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.closed = True


class RecordingConnector:
    def __init__(self, connection: Any = None, error: Optional[BaseException] = None) -> None:
        self.connection = connection
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, url: str, **kwargs: Any) -> Any:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.connection


class FakeResponse:
    def __init__(self, body: Any, status_error: Optional[Exception] = None) -> None:
        self.body = body
        self.status_error = status_error

    def raise_for_status(self) -> None:
        if self.status_error is not None:
            raise self.status_error

    def json(self) -> Any:
        return self.body


class FakeSession:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.requests: List[Dict[str, Any]] = []

    def get(self, url: str, headers: Dict[str, str], timeout: float) -> FakeResponse:
        self.requests.append({"url": url, "headers": headers, "timeout": timeout})
        return self.response


def make_client(connector: Any = None, session: Any = None) -> DataStreamsClient:
    return DataStreamsClient(
        api_key="key",
        api_secret="secret",
        rest_url="https://api.example.test/",
        ws_url="wss://ws.example.test",
        feed_ids=[FEED_ID],
        signer=HmacSigner("key", "secret", clock=lambda: 1700000000.5),
        connector=connector,
        session=session,
    )


class HmacSignerTest(unittest.TestCase):
    def test_headers_sign_method_path_body_key_and_timestamp(self) -> None:
        signer = HmacSigner("key", "secret", clock=lambda: 1700000000.5)

        headers = signer.headers("get", "/api/v1/reports/latest?feedID=0x01")

        empty_hash = hashlib.sha256(b"").hexdigest()
        expected_message = f"GET /api/v1/reports/latest?feedID=0x01 {empty_hash} key 1700000000500"
        expected = hmac.new(b"secret", expected_message.encode(), hashlib.sha256).hexdigest()
        self.assertEqual("key", headers["Authorization"])
        self.assertEqual("1700000000500", headers["X-Authorization-Timestamp"])
        self.assertEqual(expected, headers["X-Authorization-Signature-SHA256"])

    def test_repr_hides_secret(self) -> None:
        self.assertNotIn("secret", repr(HmacSigner("key", "secret")))


class DataStreamsClientStreamTest(unittest.IsolatedAsyncioTestCase):
    async def test_connect_sends_signed_subscription(self) -> None:
        connector = RecordingConnector(FakeConnection([]))
        client = make_client(connector=connector)

        await client.connect()

        self.assertTrue(client.connected)
        call = connector.calls[0]
        self.assertEqual(f"wss://ws.example.test/api/v1/ws?feedIDs={FEED_ID}", call["url"])
        self.assertEqual("key", call["additional_headers"]["Authorization"])
        self.assertIn("X-Authorization-Signature-SHA256", call["additional_headers"])

    async def test_connect_failure_raises_client_error(self) -> None:
        client = make_client(connector=RecordingConnector(error=OSError("refused")))

        with self.assertRaisesRegex(StreamClientError, "refused"):
            await client.connect()
        self.assertFalse(client.connected)

    async def test_events_require_connect(self) -> None:
        client = make_client(connector=RecordingConnector(FakeConnection([])))

        with self.assertRaises(StreamClientError):
            async for _ in client.events():
                pass

    async def test_events_in_arrival_order_and_close_notice(self) -> None:
        second = {**REPORT_PAYLOAD, "observationsTimestamp": 1700000001}
        connection = FakeConnection(
            [
                json.dumps({"report": REPORT_PAYLOAD}),
                "not json",
                json.dumps({"heartbeat": True}),
                json.dumps({"error": "rate limited"}).encode(),
                json.dumps({"report": second}),
            ]
        )
        client = make_client(connector=RecordingConnector(connection))
        await client.connect()

        events = [event async for event in client.events()]

        self.assertEqual(5, len(events))
        self.assertEqual(Report.from_payload(REPORT_PAYLOAD), events[0])
        self.assertIsInstance(events[1], StreamError)
        self.assertEqual("Malformed frame", events[1].message)
        self.assertEqual("Server error: rate limited", events[2].message)
        self.assertEqual(1700000001, events[3].observations_timestamp)
        self.assertEqual("Connection closed", events[4].message)
        self.assertFalse(client.connected)

    async def test_abnormal_close_is_reported_once(self) -> None:
        connection = FakeConnection([json.dumps({"report": REPORT_PAYLOAD})], error=ConnectionClosedError(None, None))
        client = make_client(connector=RecordingConnector(connection))
        await client.connect()

        events = [event async for event in client.events()]

        self.assertIsInstance(events[0], Report)
        self.assertIsInstance(events[1], StreamError)
        self.assertIsInstance(events[1].cause, ConnectionClosedError)
        self.assertEqual(2, len(events))

    async def test_invalid_report_frame_becomes_error(self) -> None:
        connection = FakeConnection([json.dumps({"report": {"feedID": FEED_ID}})])
        client = make_client(connector=RecordingConnector(connection))
        await client.connect()

        events = [event async for event in client.events()]

        self.assertEqual("Invalid report frame", events[0].message)

    async def test_close_closes_connection(self) -> None:
        connection = FakeConnection([])
        client = make_client(connector=RecordingConnector(connection))
        await client.connect()

        await client.close()

        self.assertTrue(connection.closed)
        self.assertFalse(client.connected)


class DataStreamsClientRestTest(unittest.TestCase):
    def test_fetch_latest_report(self) -> None:
        session = FakeSession(FakeResponse({"report": REPORT_PAYLOAD}))
        client = make_client(session=session)

        report = client.fetch_latest_report()

        self.assertEqual(FEED_ID, report.feed_id)
        self.assertEqual(1700000000, report.observations_timestamp)
        request = session.requests[0]
        self.assertEqual(f"https://api.example.test/api/v1/reports/latest?feedID={FEED_ID}", request["url"])
        self.assertEqual("key", request["headers"]["Authorization"])

    def test_http_error_raises_client_error(self) -> None:
        session = FakeSession(FakeResponse({}, status_error=requests.HTTPError("401 Unauthorized")))
        client = make_client(session=session)

        with self.assertRaisesRegex(StreamClientError, "401"):
            client.fetch_latest_report(FEED_ID)

    def test_response_without_report_raises_client_error(self) -> None:
        client = make_client(session=FakeSession(FakeResponse({"data": []})))

        with self.assertRaisesRegex(StreamClientError, "has no report"):
            client.fetch_latest_report(FEED_ID)


class ReportModelTest(unittest.TestCase):
    def test_from_payload_requires_feed_and_blob(self) -> None:
        with self.assertRaises(ValueError):
            Report.from_payload({"feedID": FEED_ID})

    def test_from_payload_tolerates_bad_timestamps(self) -> None:
        report = Report.from_payload({**REPORT_PAYLOAD, "validFromTimestamp": "later"})
        self.assertIsNone(report.valid_from_timestamp)


if __name__ == "__main__":
    unittest.main()
