"""Per-version decoded report records.

Each schema version is a frozen dataclass. Field order matches the on-wire
word order, and each field carries its wire name and ABI type as metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Tuple


def abi_field(wire_name: str, abi_type: str) -> Any:
    return field(metadata={"wire": wire_name, "abi": abi_type})


@dataclass(frozen=True)
class DecodedReport:
    """Fields shared by every report version."""

    version: ClassVar[int] = 0

    feed_id: str = abi_field("feedId", "bytes32")
    valid_from_timestamp: int = abi_field("validFromTimestamp", "uint32")
    observations_timestamp: int = abi_field("observationsTimestamp", "uint32")
    native_fee: int = abi_field("nativeFee", "uint192")
    link_fee: int = abi_field("linkFee", "uint192")
    expires_at: int = abi_field("expiresAt", "uint32")

    @classmethod
    def layout(cls) -> Tuple[Tuple[str, str, str], ...]:
        """Return ``(attribute, wire name, abi type)`` in word order."""

        return tuple((f.name, f.metadata["wire"], f.metadata["abi"]) for f in fields(cls))

    def as_fields(self) -> Dict[str, Any]:
        """Return the payload keyed by wire field name."""

        return {f.metadata["wire"]: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ReportV2(DecodedReport):
    version: ClassVar[int] = 2

    benchmark_price: int = abi_field("benchmarkPrice", "int192")


@dataclass(frozen=True)
class ReportV3(DecodedReport):
    """Crypto streams: benchmark price with bid/ask."""

    version: ClassVar[int] = 3

    benchmark_price: int = abi_field("benchmarkPrice", "int192")
    bid: int = abi_field("bid", "int192")
    ask: int = abi_field("ask", "int192")


@dataclass(frozen=True)
class ReportV4(DecodedReport):
    """Real-world asset streams with market status."""

    version: ClassVar[int] = 4

    price: int = abi_field("price", "int192")
    market_status: int = abi_field("marketStatus", "uint32")


@dataclass(frozen=True)
class ReportV5(DecodedReport):
    version: ClassVar[int] = 5

    rate: int = abi_field("rate", "int192")
    timestamp: int = abi_field("timestamp", "uint32")
    duration: int = abi_field("duration", "uint32")


@dataclass(frozen=True)
class ReportV6(DecodedReport):
    version: ClassVar[int] = 6

    price: int = abi_field("price", "int192")
    price2: int = abi_field("price2", "int192")
    price3: int = abi_field("price3", "int192")
    price4: int = abi_field("price4", "int192")
    price5: int = abi_field("price5", "int192")


@dataclass(frozen=True)
class ReportV7(DecodedReport):
    version: ClassVar[int] = 7

    exchange_rate: int = abi_field("exchangeRate", "int192")


@dataclass(frozen=True)
class ReportV8(DecodedReport):
    """Non-OTC RWA streams."""

    version: ClassVar[int] = 8

    last_update_timestamp: int = abi_field("lastUpdateTimestamp", "uint64")
    mid_price: int = abi_field("midPrice", "int192")
    market_status: int = abi_field("marketStatus", "uint32")


@dataclass(frozen=True)
class ReportV9(DecodedReport):
    """Fund NAV streams."""

    version: ClassVar[int] = 9

    nav_per_share: int = abi_field("navPerShare", "int192")
    nav_date: int = abi_field("navDate", "uint64")
    aum: int = abi_field("aum", "int192")
    ripcord: int = abi_field("ripcord", "uint32")


@dataclass(frozen=True)
class ReportV10(DecodedReport):
    """Tokenized equity streams."""

    version: ClassVar[int] = 10

    last_update_timestamp: int = abi_field("lastUpdateTimestamp", "uint64")
    price: int = abi_field("price", "int192")
    market_status: int = abi_field("marketStatus", "uint32")
    current_multiplier: int = abi_field("currentMultiplier", "int192")
    new_multiplier: int = abi_field("newMultiplier", "int192")
    activation_date_time: int = abi_field("activationDateTime", "uint32")
    tokenized_price: int = abi_field("tokenizedPrice", "int192")


BUILTIN_REPORT_TYPES = (
    ReportV2,
    ReportV3,
    ReportV4,
    ReportV5,
    ReportV6,
    ReportV7,
    ReportV8,
    ReportV9,
    ReportV10,
)


__all__ = [
    "BUILTIN_REPORT_TYPES",
    "DecodedReport",
    "ReportV2",
    "ReportV3",
    "ReportV4",
    "ReportV5",
    "ReportV6",
    "ReportV7",
    "ReportV8",
    "ReportV9",
    "ReportV10",
    "abi_field",
]
