"""In-process counters for stream activity."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass
class StreamCounters:
    """Counts reports and failures seen during a run."""

    counters: Dict[str, int] = field(default_factory=dict)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("datastreams.metrics"))

    def incr(self, name: str, value: int = 1) -> None:
        """Increment a counter."""

        self.counters[name] = self.counters.get(name, 0) + value

    def get(self, name: str) -> int:
        return self.counters.get(name, 0)

    def export(self) -> Dict[str, int]:
        """Return a copy of all current counters."""

        return dict(self.counters)

    def log_event(self, event: str, payload: Mapping[str, Any] | None = None) -> None:
        """Emit the counters as a structured log record."""

        extras = {"event": event, **self.export(), **(payload or {})}
        self.logger.info(event, extra=extras)
