"""Price lookup over decoded reports."""

from .normalizer import PRICE_ACCESSORS, market_status, pick_price, pick_price_field

__all__ = [
    "PRICE_ACCESSORS",
    "market_status",
    "pick_price",
    "pick_price_field",
]
