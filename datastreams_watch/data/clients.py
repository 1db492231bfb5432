"""Client interfaces for report sources."""

from typing import AsyncIterator, Optional, Protocol

from .models import Report, StreamEvent


class ReportSource(Protocol):
    """Protocol describing the stream surface the watcher depends on."""

    async def connect(self) -> None:
        """Suspend until the subscription is established or fails."""

    def events(self) -> AsyncIterator[StreamEvent]:
        """Yield reports and stream errors in arrival order."""

    async def close(self) -> None:
        """Release the underlying connection."""

    def fetch_latest_report(self, feed_id: Optional[str] = None) -> Report:
        """Return the most recent report for a feed."""
