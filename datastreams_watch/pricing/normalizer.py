"""Find the canonical price in a decoded report.

Different schema versions carry their headline value under different names.
The accessors below are evaluated in priority order and the first present
value wins.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Tuple

from datastreams_watch.decoding.reports import DecodedReport

FieldAccessor = Callable[[Mapping[str, Any]], Any]


def _top(name: str) -> FieldAccessor:
    return lambda fields: fields.get(name)


def _nested(parent: str, name: str) -> FieldAccessor:
    def accessor(fields: Mapping[str, Any]) -> Any:
        container = fields.get(parent)
        if isinstance(container, Mapping):
            return container.get(name)
        return None

    return accessor


PRICE_ACCESSORS: Tuple[Tuple[str, FieldAccessor], ...] = (
    ("price", _top("price")),
    ("benchmarkPrice", _top("benchmarkPrice")),
    ("nativeBenchmarkPrice", _top("nativeBenchmarkPrice")),
    ("midPrice", _top("midPrice")),
    ("exchangeRate", _top("exchangeRate")),
    ("navPerShare", _top("navPerShare")),
    ("tokenizedPrice", _top("tokenizedPrice")),
    ("payload.benchmarkPrice", _nested("payload", "benchmarkPrice")),
)


def as_field_mapping(decoded: Any) -> Mapping[str, Any]:
    """View a decoded report (dataclass variant or plain mapping) as wire fields."""

    if isinstance(decoded, DecodedReport):
        return decoded.as_fields()
    if isinstance(decoded, Mapping):
        return decoded
    return {}


def pick_price_field(decoded: Any) -> Optional[Tuple[str, Any]]:
    """Return ``(accessor label, raw value)`` for the first present price."""

    fields = as_field_mapping(decoded)
    for label, accessor in PRICE_ACCESSORS:
        value = accessor(fields)
        if value is not None:
            return label, value
    return None


def pick_price(decoded: Any) -> Any:
    """Return the raw canonical price, or ``None`` when no candidate is present."""

    found = pick_price_field(decoded)
    return found[1] if found else None


def market_status(decoded: Any) -> Any:
    return as_field_mapping(decoded).get("marketStatus")


__all__ = ["PRICE_ACCESSORS", "as_field_mapping", "market_status", "pick_price", "pick_price_field"]
