"""Per-relay streaming metrics."""
from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Counters and timings collected while one relay streams.

    ``time_to_first_delta_ms`` and ``total_duration_ms`` are measured from
    :meth:`start` with a monotonic clock.
    """

    deltas: int = 0
    chars: int = 0
    pushbacks: int = 0
    malformed: int = 0
    time_to_first_delta_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    _started: Optional[float] = field(default=None, repr=False)

    def start(self) -> None:
        self._started = time.monotonic()

    def _elapsed_ms(self) -> Optional[float]:
        if self._started is None:
            return None
        return (time.monotonic() - self._started) * 1000.0

    def record_delta(self, text: str) -> None:
        if self.deltas == 0:
            self.time_to_first_delta_ms = self._elapsed_ms()
        self.deltas += 1
        self.chars += len(text)

    def finish(self) -> None:
        self.total_duration_ms = self._elapsed_ms()

    def as_fields(self) -> Dict[str, Any]:
        """Log-friendly view (private fields excluded)."""
        return {
            "chars": self.chars,
            "pushbacks": self.pushbacks,
            "malformed": self.malformed,
            "time_to_first_delta_ms": self.time_to_first_delta_ms,
            "total_duration_ms": self.total_duration_ms,
        }


__all__ = ["StreamMetrics"]
