"""Display helpers for timestamps and fixed-point prices."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Optional

from datastreams_watch.data.models import Report
from datastreams_watch.pricing.normalizer import as_field_mapping, market_status, pick_price_field

NOT_AVAILABLE = "n/a"
DEFAULT_PRICE_SCALE = 1e18
DEFAULT_PRICE_DECIMALS = 2


def format_timestamp(value: Any) -> str:
    """Render unix seconds as ISO-8601 UTC with millisecond precision."""

    seconds = _to_decimal(value)
    if seconds is None:
        return NOT_AVAILABLE
    try:
        moment = datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return NOT_AVAILABLE
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_price(
    raw: Any,
    scale: float = DEFAULT_PRICE_SCALE,
    decimals: int = DEFAULT_PRICE_DECIMALS,
) -> Any:
    """Render a fixed-point price as ``$x.yy``.

    Non-numeric values come back unchanged; ``None`` renders as ``n/a``.
    """

    if raw is None:
        return NOT_AVAILABLE
    amount = _to_decimal(raw)
    if amount is None:
        return raw
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = amount / Decimal(repr(scale))
        rounded = scaled.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"${rounded:f}"


def build_summary(
    report: Report,
    decoded: Any,
    scale: float = DEFAULT_PRICE_SCALE,
    decimals: int = DEFAULT_PRICE_DECIMALS,
) -> Dict[str, Any]:
    """Assemble the human-readable summary block for one report."""

    fields = as_field_mapping(decoded)
    observed = report.observations_timestamp
    if observed is None:
        observed = fields.get("observationsTimestamp")
    valid_from = report.valid_from_timestamp
    if valid_from is None:
        valid_from = fields.get("validFromTimestamp")

    found = pick_price_field(decoded)
    status = market_status(decoded)
    return {
        "observationsTimestamp": format_timestamp(observed),
        "validFromTimestamp": format_timestamp(valid_from),
        "marketStatus": status if status is not None else NOT_AVAILABLE,
        "price": format_price(found[1] if found else None, scale=scale, decimals=decimals),
        "priceField": found[0] if found else NOT_AVAILABLE,
    }


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return result if result.is_finite() else None


__all__ = ["NOT_AVAILABLE", "build_summary", "format_price", "format_timestamp"]
