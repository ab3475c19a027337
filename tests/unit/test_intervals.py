from __future__ import annotations

from datetime import datetime

from studyplan.engine.intervals import IntervalList, overlaps, split_slot
from studyplan.engine.models import TimeSlot


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 8, hour, minute)


def _spans(intervals: IntervalList) -> list[tuple[str, str]]:
    return [(slot.start.strftime("%H:%M"), slot.end.strftime("%H:%M")) for slot in intervals]


def test_subtract_inner_block_splits_slot_in_two() -> None:
    result = IntervalList.single(_at(8), _at(12)).subtract(_at(9), _at(10))
    assert _spans(result) == [("08:00", "09:00"), ("10:00", "12:00")]
    assert result.total_minutes() == 180


def test_subtract_covering_block_removes_slot() -> None:
    result = IntervalList.single(_at(8), _at(12)).subtract(_at(7), _at(13))
    assert len(result) == 0


def test_subtract_disjoint_block_keeps_slot() -> None:
    result = IntervalList.single(_at(8), _at(12)).subtract(_at(14), _at(15))
    assert _spans(result) == [("08:00", "12:00")]


def test_block_touching_slot_edges_leaves_slot_unchanged() -> None:
    slot = TimeSlot(start=_at(8), end=_at(12))
    assert overlaps(slot, _at(12), _at(13))
    assert split_slot(slot, _at(12), _at(13)) == [slot]
    assert overlaps(slot, _at(7), _at(8))
    assert split_slot(slot, _at(7), _at(8)) == [slot]


def test_partial_overlap_trims_one_side() -> None:
    head = IntervalList.single(_at(8), _at(12)).subtract(_at(6), _at(9, 30))
    tail = IntervalList.single(_at(8), _at(12)).subtract(_at(11), _at(14))
    assert _spans(head) == [("09:30", "12:00")]
    assert _spans(tail) == [("08:00", "11:00")]


def test_subtract_returns_new_list_without_mutating_source() -> None:
    source = IntervalList.single(_at(8), _at(12))
    source.subtract(_at(9), _at(10))
    assert _spans(source) == [("08:00", "12:00")]


def test_without_shorter_than_drops_short_slots() -> None:
    intervals = IntervalList.single(_at(8), _at(12)).subtract(_at(8, 20), _at(11))
    assert _spans(intervals) == [("08:00", "08:20"), ("11:00", "12:00")]
    assert _spans(intervals.without_shorter_than(30)) == [("11:00", "12:00")]
