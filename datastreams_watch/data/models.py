"""Event types delivered by the Data Streams feed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class Report:
    """One signed report as received, before decoding."""

    feed_id: str
    full_report: str
    observations_timestamp: Optional[int] = None
    valid_from_timestamp: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Report":
        """Build a report from the feed's JSON shape.

        Raises ``ValueError`` when ``feedID`` or ``fullReport`` is missing.
        """

        feed_id = payload.get("feedID") or payload.get("feedId")
        full_report = payload.get("fullReport")
        if not feed_id or not full_report:
            raise ValueError("Report payload missing feedID or fullReport")
        return cls(
            feed_id=str(feed_id),
            full_report=str(full_report),
            observations_timestamp=_optional_int(payload.get("observationsTimestamp")),
            valid_from_timestamp=_optional_int(payload.get("validFromTimestamp")),
        )


@dataclass(frozen=True)
class StreamError:
    """A transport-level failure notification. Does not end the stream by itself."""

    message: str
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


StreamEvent = Union[Report, StreamError]


def _optional_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


__all__ = ["Report", "StreamError", "StreamEvent"]
