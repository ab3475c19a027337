"""Decision trace utilities for allocation runtime events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(slots=True)
class DecisionTraceCollector:
    """Collect allocation decisions while allocator phases are executed."""

    start_timestamp: datetime
    _sequence: int = 0
    _items: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_timestamp.tzinfo is None:
            self.start_timestamp = self.start_timestamp.replace(tzinfo=timezone.utc)

    def record(
        self,
        *,
        phase: str,
        subject_id: str,
        minutes_before: int,
        minutes_after: int,
        applied_rules: list[str],
        tradeoff_note: str,
        score: float | None = None,
    ) -> None:
        self._sequence += 1
        timestamp = self.start_timestamp + timedelta(seconds=self._sequence)
        self._items.append(
            {
                "decision_id": f"d-{self._sequence:06d}",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "phase": phase,
                "subject_id": subject_id,
                "score": score,
                "minutes_before": int(minutes_before),
                "minutes_after": int(minutes_after),
                "delta_minutes": int(minutes_after) - int(minutes_before),
                "applied_rules": list(applied_rules),
                "tradeoff_note": tradeoff_note,
            }
        )

    def __len__(self) -> int:
        return len(self._items)

    def as_list(self) -> list[dict[str, Any]]:
        """Return trace sorted in deterministic chronological order."""
        return sorted(self._items, key=lambda item: (str(item["timestamp"]), str(item["decision_id"])))
