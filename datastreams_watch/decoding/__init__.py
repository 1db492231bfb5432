"""Report decoding: ABI word reader, schema registry, and per-version records."""

from .abi import DecodeError
from .decoder import AbiReportDecoder, ReportDecoder, decode_report, version_from_feed_id
from .reports import DecodedReport
from .schemas import DEFAULT_REGISTRY, ReportSchema, SchemaRegistry

__all__ = [
    "AbiReportDecoder",
    "DEFAULT_REGISTRY",
    "DecodeError",
    "DecodedReport",
    "ReportDecoder",
    "ReportSchema",
    "SchemaRegistry",
    "decode_report",
    "version_from_feed_id",
]
