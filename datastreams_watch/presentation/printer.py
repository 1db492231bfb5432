"""Terminal output for decoded reports."""

from __future__ import annotations

import sys
from pprint import pformat
from typing import Any, Dict, Optional, TextIO

from datastreams_watch.data.models import Report
from datastreams_watch.infra.config import FeedConfig
from datastreams_watch.pricing.normalizer import as_field_mapping

from .formatter import DEFAULT_PRICE_DECIMALS, DEFAULT_PRICE_SCALE, build_summary

BANNER = "=============================="


class ReportPrinter:
    """Writes one human-readable block per report to a text stream."""

    def __init__(
        self,
        feed_name: Optional[str] = None,
        stream: Optional[TextIO] = None,
        price_scale: float = DEFAULT_PRICE_SCALE,
        price_decimals: int = DEFAULT_PRICE_DECIMALS,
        show_fields: bool = True,
    ) -> None:
        self.feed_name = feed_name
        self.stream = stream or sys.stdout
        self.price_scale = price_scale
        self.price_decimals = price_decimals
        self.show_fields = show_fields

    def feed_label(self, feed_id: str) -> str:
        return FeedConfig(feed_id=feed_id, feed_name=self.feed_name).display_name

    def print_status(self, message: str) -> None:
        self._write(message)

    def print_header(self, report: Report) -> None:
        """Banner, feed identity and raw size. Printed before decoding is attempted."""

        self._write("")
        self._write(BANNER)
        self._write("New Data Streams report")
        self._write(f"Feed: {self.feed_label(report.feed_id)}")
        self._write(f"Raw blob length: {len(report.full_report)} chars")

    def print_decoded(self, report: Report, decoded: Any) -> Dict[str, Any]:
        if self.show_fields:
            self._write("Decoded fields:")
            dump = {"version": getattr(decoded, "version", None), **as_field_mapping(decoded)}
            self._write(pformat(dump, sort_dicts=False))

        summary = build_summary(report, decoded, scale=self.price_scale, decimals=self.price_decimals)
        self._write("Human-readable summary:")
        for key, value in summary.items():
            self._write(f"  {key}: {value}")
        return summary

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


__all__ = ["BANNER", "ReportPrinter"]
