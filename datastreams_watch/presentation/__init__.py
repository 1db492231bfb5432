"""Formatting and terminal output for decoded reports."""

from .formatter import NOT_AVAILABLE, build_summary, format_price, format_timestamp
from .printer import ReportPrinter

__all__ = [
    "NOT_AVAILABLE",
    "ReportPrinter",
    "build_summary",
    "format_price",
    "format_timestamp",
]
