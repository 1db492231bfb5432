"""Decode signed full reports into per-version records."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from .abi import WORD_SIZE, DecodeError, decode_word, extract_report_blob, hex_to_bytes, read_word
from .reports import DecodedReport
from .schemas import DEFAULT_REGISTRY, SchemaRegistry


class ReportDecoder(Protocol):
    """Anything that turns a full report blob into a decoded record or mapping."""

    def decode(self, full_report: str, feed_id: str) -> Any:
        ...


def version_from_feed_id(feed_id: str) -> int:
    """Return the schema version encoded in the first two bytes of a feed id."""

    raw = hex_to_bytes(feed_id)
    if len(raw) != WORD_SIZE:
        raise DecodeError(f"Feed id must be 32 bytes, got {len(raw)}: {feed_id}")
    return int.from_bytes(raw[:2], "big")


def decode_report(
    full_report: str | bytes,
    feed_id: str,
    registry: Optional[SchemaRegistry] = None,
) -> DecodedReport:
    """Decode ``full_report`` for ``feed_id`` using the registered layouts.

    Raises :class:`DecodeError` on malformed hex, a truncated envelope, an
    unknown schema version, out-of-range words, or when the blob belongs to a
    different feed.
    """

    schema = (registry or DEFAULT_REGISTRY).get(version_from_feed_id(feed_id))
    blob = extract_report_blob(hex_to_bytes(full_report))
    if len(blob) < schema.word_count * WORD_SIZE:
        raise DecodeError(
            f"Report blob has {len(blob)} bytes, v{schema.version} needs {schema.word_count * WORD_SIZE}"
        )

    values = {}
    for index, (attribute, wire_name, abi_type) in enumerate(schema.layout):
        try:
            values[attribute] = decode_word(read_word(blob, index), abi_type)
        except DecodeError as exc:
            raise DecodeError(f"Field {wire_name}: {exc}") from exc

    report = schema.report_type(**values)
    if report.feed_id.lower() != _normalize_feed_id(feed_id):
        raise DecodeError(f"Report belongs to feed {report.feed_id}, expected {feed_id}")
    return report


class AbiReportDecoder:
    """Default :class:`ReportDecoder` backed by a schema registry."""

    def __init__(self, registry: Optional[SchemaRegistry] = None) -> None:
        self.registry = registry or DEFAULT_REGISTRY

    def decode(self, full_report: str, feed_id: str) -> DecodedReport:
        return decode_report(full_report, feed_id, self.registry)


def _normalize_feed_id(feed_id: str) -> str:
    text = feed_id.lower()
    return text if text.startswith("0x") else f"0x{text}"


__all__ = ["AbiReportDecoder", "ReportDecoder", "decode_report", "version_from_feed_id"]
