"""Wire the Data Streams feed to the decoder and terminal printer."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Dict, Optional

from datastreams_watch.data.clients import ReportSource
from datastreams_watch.data.datastreams_client import DataStreamsClient
from datastreams_watch.data.models import Report, StreamError, StreamEvent
from datastreams_watch.decoding import AbiReportDecoder, DecodeError, ReportDecoder
from datastreams_watch.infra.config import AppConfig
from datastreams_watch.infra.metrics import StreamCounters
from datastreams_watch.presentation.printer import ReportPrinter


def build_client(config: AppConfig, logger: Optional[logging.Logger] = None) -> DataStreamsClient:
    """Instantiate the Data Streams client from configuration."""

    return DataStreamsClient(
        api_key=config.credentials.api_key,
        api_secret=config.credentials.api_secret,
        rest_url=config.endpoints.rest_url,
        ws_url=config.endpoints.ws_url,
        feed_ids=[config.feed.feed_id],
        logger=(logger or logging.getLogger("datastreams")).getChild("client"),
    )


def build_printer(config: AppConfig) -> ReportPrinter:
    return ReportPrinter(
        feed_name=config.feed.feed_name,
        price_scale=config.display.price_scale,
        price_decimals=config.display.price_decimals,
        show_fields=config.display.show_fields,
    )


class ReportDispatcher:
    """Single consumer for queued stream events.

    Events are handled one at a time in arrival order. A decode failure is
    logged and the loop moves on to the next event.
    """

    def __init__(
        self,
        printer: ReportPrinter,
        decoder: Optional[ReportDecoder] = None,
        counters: Optional[StreamCounters] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.printer = printer
        self.decoder = decoder or AbiReportDecoder()
        self.counters = counters or StreamCounters()
        self.logger = logger or logging.getLogger("datastreams.dispatcher")

    async def run(self, queue: asyncio.Queue[Optional[StreamEvent]]) -> None:
        """Consume events until a ``None`` sentinel is received."""

        while True:
            event = await queue.get()
            try:
                if event is None:
                    return
                self.handle(event)
            finally:
                queue.task_done()

    def handle(self, event: StreamEvent) -> None:
        if isinstance(event, StreamError):
            self.handle_error(event)
        else:
            self.handle_report(event)

    def handle_report(self, report: Report) -> Optional[Dict[str, Any]]:
        """Decode and print one report; returns the summary or ``None`` on decode failure."""

        self.counters.incr("reports_received")
        self.printer.print_header(report)
        try:
            decoded = self.decoder.decode(report.full_report, report.feed_id)
            summary = self.printer.print_decoded(report, decoded)
        except DecodeError as exc:
            self.counters.incr("decode_failures")
            self.logger.error(
                "Failed to decode report: %s", exc,
                extra={"event": "decode_failed", "feed_id": report.feed_id},
            )
            return None
        except Exception as exc:
            # Third-party decoders raise their own types; one bad report must not end the stream.
            self.counters.incr("decode_failures")
            self.logger.exception(
                "Failed to process report: %s", exc,
                extra={"event": "decode_failed", "feed_id": report.feed_id},
            )
            return None

        self.counters.incr("reports_decoded")
        return summary

    def handle_error(self, error: StreamError) -> None:
        self.counters.incr("stream_errors")
        self.logger.error("Stream error: %s", error, extra={"event": "stream_error"})


async def pump_events(source: ReportSource, queue: asyncio.Queue[Optional[StreamEvent]], logger: logging.Logger) -> None:
    """Move events from the stream onto the dispatch queue."""

    async for event in source.events():
        await queue.put(event)
    logger.warning("Stream ended; no further reports will arrive", extra={"event": "stream_closed"})


async def run_watch(
    config: AppConfig,
    source: Optional[ReportSource] = None,
    dispatcher: Optional[ReportDispatcher] = None,
    stop_event: Optional[asyncio.Event] = None,
    install_signal_handlers: bool = True,
) -> StreamCounters:
    """Connect, then dispatch events until SIGINT/SIGTERM or ``stop_event``."""

    logger = logging.getLogger("datastreams.app")
    source = source or build_client(config, logger)
    dispatcher = dispatcher or ReportDispatcher(build_printer(config))
    stop_event = stop_event or asyncio.Event()

    if install_signal_handlers:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                asyncio.get_running_loop().add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                # Windows/limited environments
                pass

    dispatcher.printer.print_status("Connecting to Data Streams...")
    await source.connect()
    dispatcher.printer.print_status("Connected. Listening for reports...")
    logger.info("Connected", extra={"event": "connected", "feed_id": config.feed.feed_id})

    queue: asyncio.Queue[Optional[StreamEvent]] = asyncio.Queue()
    consumer = asyncio.create_task(dispatcher.run(queue))
    producer = asyncio.create_task(pump_events(source, queue, logger))
    stopper = asyncio.create_task(stop_event.wait())

    try:
        await asyncio.wait({consumer, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)
        if not consumer.done():
            await queue.put(None)
        stopper.cancel()
        await asyncio.gather(stopper, return_exceptions=True)
        await source.close()

    await consumer
    dispatcher.counters.log_event("stream_summary")
    return dispatcher.counters


async def run_once(
    config: AppConfig,
    source: Optional[ReportSource] = None,
    dispatcher: Optional[ReportDispatcher] = None,
) -> Optional[Dict[str, Any]]:
    """Fetch the latest report over REST and print it."""

    source = source or build_client(config)
    dispatcher = dispatcher or ReportDispatcher(build_printer(config))
    report = await asyncio.to_thread(source.fetch_latest_report, config.feed.feed_id)
    return dispatcher.handle_report(report)


__all__ = [
    "ReportDispatcher",
    "build_client",
    "build_printer",
    "pump_events",
    "run_once",
    "run_watch",
]
