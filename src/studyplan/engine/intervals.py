"""Immutable list of free time slots with block subtraction.

Every carve-out (sleep, buffered fixed events) goes through
``IntervalList.subtract`` so the overlap/split rule lives in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator

from .models import TimeSlot

_ONE_MINUTE = timedelta(minutes=1)


def _within(moment: datetime, start: datetime, end: datetime) -> bool:
    return start <= moment <= end


def overlaps(slot: TimeSlot, block_start: datetime, block_end: datetime) -> bool:
    """Closed-interval overlap test between a slot and a block.

    A block touching the slot edge counts as overlapping; the split below
    then hands the slot back unchanged.
    """
    return (
        _within(block_start, slot.start, slot.end)
        or _within(block_end - _ONE_MINUTE, slot.start, slot.end)
        or _within(slot.start, block_start, block_end)
    )


def split_slot(slot: TimeSlot, block_start: datetime, block_end: datetime) -> list[TimeSlot]:
    if not overlaps(slot, block_start, block_end):
        return [slot]
    pieces: list[TimeSlot] = []
    if block_start > slot.start:
        pieces.append(TimeSlot(start=slot.start, end=block_start))
    if slot.end > block_end:
        pieces.append(TimeSlot(start=block_end, end=slot.end))
    return pieces


@dataclass(frozen=True, slots=True)
class IntervalList:
    slots: tuple[TimeSlot, ...] = ()

    @classmethod
    def single(cls, start: datetime, end: datetime) -> "IntervalList":
        return cls(slots=(TimeSlot(start=start, end=end),))

    def subtract(self, start: datetime, end: datetime) -> "IntervalList":
        """Return a new list with ``[start, end]`` carved out of every slot."""
        result: list[TimeSlot] = []
        for slot in self.slots:
            result.extend(split_slot(slot, start, end))
        return IntervalList(slots=tuple(result))

    def without_shorter_than(self, minutes: int) -> "IntervalList":
        return IntervalList(slots=tuple(slot for slot in self.slots if slot.minutes >= minutes))

    def total_minutes(self) -> int:
        return sum(slot.minutes for slot in self.slots)

    def __iter__(self) -> Iterator[TimeSlot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)
