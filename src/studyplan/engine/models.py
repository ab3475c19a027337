"""Engine records and their JSON-boundary conversions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .timeutils import minutes_between, to_date

KNOWLEDGE_LEVELS: tuple[str, ...] = ("None", "Basic", "Intermediate", "Advanced")
TASK_TYPES: tuple[str, ...] = ("study", "practice", "review")


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True, slots=True)
class TimeSlot:
    """A contiguous span of free time on one calendar day."""

    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return minutes_between(self.start, self.end)

    def as_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "minutes": self.minutes,
        }


@dataclass(frozen=True, slots=True)
class FixedEvent:
    """Recurring commitment; ``days`` are offsets from the week start (0-6)."""

    id: str
    name: str
    start_time: str
    end_time: str
    days: frozenset[int] = frozenset()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "FixedEvent":
        raw_days = payload.get("days", [])
        if not isinstance(raw_days, (list, tuple, set, frozenset)):
            raw_days = []
        days = frozenset(day for day in raw_days if isinstance(day, int) and not isinstance(day, bool))
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            start_time=str(payload.get("start_time", "")),
            end_time=str(payload.get("end_time", "")),
            days=days,
        )


@dataclass(frozen=True, slots=True)
class FixedEventBlock:
    id: str
    name: str
    start_time: str
    end_time: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True, slots=True)
class AvailabilityCalculation:
    """Free slots and recorded fixed blocks keyed by day index."""

    availability_map: dict[int, tuple[TimeSlot, ...]]
    fixed_blocks_map: dict[int, tuple[FixedEventBlock, ...]]

    def total_minutes(self) -> int:
        return sum(slot.minutes for slots in self.availability_map.values() for slot in slots)

    def as_dict(self) -> dict[str, Any]:
        return {
            "availability_map": {
                str(day): [slot.as_dict() for slot in slots]
                for day, slots in sorted(self.availability_map.items())
            },
            "fixed_blocks_map": {
                str(day): [block.as_dict() for block in blocks]
                for day, blocks in sorted(self.fixed_blocks_map.items())
            },
        }


@dataclass(frozen=True, slots=True)
class Subject:
    id: str
    name: str
    prior_knowledge: str = "None"
    exam_date: date | None = None
    allocated_minutes: int = 0
    suggested_minutes: int = 0

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Subject":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            prior_knowledge=str(payload.get("prior_knowledge", "None")),
            exam_date=to_date(payload.get("exam_date")),
            allocated_minutes=max(0, _as_int(payload.get("allocated_minutes"), 0)),
            suggested_minutes=max(0, _as_int(payload.get("suggested_minutes"), 0)),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "prior_knowledge": self.prior_knowledge,
            "exam_date": self.exam_date.isoformat() if self.exam_date else None,
            "allocated_minutes": self.allocated_minutes,
            "suggested_minutes": self.suggested_minutes,
        }


@dataclass(slots=True)
class SubjectWithPriority:
    """Scored view of a subject, used only while allocating."""

    subject: Subject
    score: int
    days_until_exam: float = math.inf
    position: int = 0


@dataclass(slots=True)
class Task:
    id: str
    subject_id: str
    subject_name: str
    subject_color: str
    title: str
    description: str
    duration: int
    task_type: str
    is_scheduled: bool = False
    scheduled_day: str | None = None
    scheduled_time: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "subject_color": self.subject_color,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "task_type": self.task_type,
            "is_scheduled": self.is_scheduled,
            "scheduled_day": self.scheduled_day,
            "scheduled_time": self.scheduled_time,
        }


@dataclass(slots=True)
class DaySchedule:
    """Per-day hand-off record for the placement layer."""

    date: date
    day_index: int
    weekday: str
    fixed_events: list[FixedEventBlock] = field(default_factory=list)
    available_slots: list[TimeSlot] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def available_minutes(self) -> int:
        return sum(slot.minutes for slot in self.available_slots)

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day_index": self.day_index,
            "weekday": self.weekday,
            "available_minutes": self.available_minutes,
            "fixed_events": [block.as_dict() for block in self.fixed_events],
            "available_slots": [slot.as_dict() for slot in self.available_slots],
            "tasks": [task.as_dict() for task in self.tasks],
        }
