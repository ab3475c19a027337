from __future__ import annotations

import logging
from datetime import date

import pytest

from studyplan.engine import FixedEvent, build_week_schedule, compute_availability
from studyplan.normalization import EngineConfig
from studyplan.validation import ValidationReport

WEEK_START = "2024-01-08"  # Monday


def _spans(calc, day: int) -> list[tuple[str, str]]:
    return [
        (slot.start.strftime("%H:%M"), slot.end.strftime("%H:%M"))
        for slot in calc.availability_map[day]
    ]


def _event(event_id: str, start: str, end: str, days: list[int]) -> dict:
    return {"id": event_id, "name": event_id.title(), "start_time": start, "end_time": end, "days": days}


def test_class_on_monday_leaves_morning_and_afternoon_slots() -> None:
    calc = compute_availability([_event("class", "09:00", "10:30", [0])], WEEK_START)

    assert _spans(calc, 0) == [("07:00", "08:45"), ("10:45", "23:00")]
    assert [(b.start_time, b.end_time) for b in calc.fixed_blocks_map[0]] == [("09:00", "10:30")]
    for day in range(1, 7):
        assert _spans(calc, day) == [("07:00", "23:00")]
        assert calc.fixed_blocks_map[day] == ()
    assert calc.total_minutes() == 105 + 735 + 6 * 960


def test_no_events_gives_full_waking_day() -> None:
    calc = compute_availability([], date(2024, 1, 8))
    assert sorted(calc.availability_map) == list(range(7))
    assert all(_spans(calc, day) == [("07:00", "23:00")] for day in range(7))


def test_accepts_fixed_event_objects() -> None:
    event = FixedEvent(id="gym", name="Gym", start_time="18:00", end_time="19:00", days=frozenset({2}))
    calc = compute_availability([event], WEEK_START)
    assert _spans(calc, 2) == [("07:00", "17:45"), ("19:15", "23:00")]


def test_fixed_blocks_are_sorted_by_start_time() -> None:
    events = [_event("late", "14:00", "15:00", [3]), _event("early", "08:00", "09:00", [3])]
    calc = compute_availability(events, WEEK_START)
    assert [block.id for block in calc.fixed_blocks_map[3]] == ["early", "late"]


def test_slots_shorter_than_min_block_are_discarded() -> None:
    calc = compute_availability([_event("call", "07:30", "08:00", [1])], WEEK_START)
    # 07:00-07:15 is only 15 minutes.
    assert _spans(calc, 1) == [("08:15", "23:00")]


def test_event_spanning_waking_hours_leaves_no_slot() -> None:
    calc = compute_availability([_event("shift", "07:00", "23:00", [4])], WEEK_START)
    assert calc.availability_map[4] == ()


def test_overnight_event_wraps_midnight() -> None:
    report = ValidationReport()
    calc = compute_availability([_event("night", "22:00", "06:00", [0])], WEEK_START, validation_report=report)
    assert _spans(calc, 0) == [("07:00", "21:45")]
    assert report.infos == []


def test_malformed_event_is_skipped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    report = ValidationReport()
    events = [_event("bad", "9am", "10:30", [0]), _event("ok", "12:00", "13:00", [0])]

    with caplog.at_level(logging.WARNING, logger="studyplan.engine.slot_builder"):
        calc = compute_availability(events, WEEK_START, validation_report=report)

    assert [block.id for block in calc.fixed_blocks_map[0]] == ["ok"]
    assert _spans(calc, 0) == [("07:00", "11:45"), ("13:15", "23:00")]
    assert [issue.code for issue in report.infos] == ["INFO_FIXED_EVENT_SKIPPED"]
    assert "invalid time format" in caplog.text


def test_day_indices_outside_week_are_ignored() -> None:
    report = ValidationReport()
    calc = compute_availability([_event("x", "12:00", "13:00", [9, 1])], WEEK_START, validation_report=report)
    assert [block.id for block in calc.fixed_blocks_map[1]] == ["x"]
    assert report.infos[0].code == "INFO_FIXED_EVENT_DAY_IGNORED"
    assert calc.total_minutes() == 6 * 960 + 960 - 90


def test_non_wrapping_sleep_window() -> None:
    config = EngineConfig(sleep_start_time="01:00", sleep_end_time="06:00")
    calc = compute_availability([], WEEK_START, config=config)
    assert _spans(calc, 0) == [("00:00", "01:00"), ("06:00", "00:00")]


def test_custom_buffer_and_min_block() -> None:
    config = EngineConfig(event_buffer=0, min_study_block=60)
    calc = compute_availability([_event("lab", "08:00", "09:00", [0])], WEEK_START, config=config)
    assert _spans(calc, 0) == [("07:00", "08:00"), ("09:00", "23:00")]


def test_invalid_week_start_raises() -> None:
    with pytest.raises(ValueError):
        compute_availability([], "next monday")


def test_inputs_are_not_mutated() -> None:
    events = [_event("class", "09:00", "10:30", [0])]
    snapshot = [dict(item) for item in events]
    compute_availability(events, WEEK_START)
    assert events == snapshot


def test_week_schedule_lays_out_seven_days() -> None:
    calc = compute_availability([_event("class", "09:00", "10:30", [0])], WEEK_START)
    schedule = build_week_schedule(calc, WEEK_START)

    assert [day.day_index for day in schedule] == list(range(7))
    assert schedule[0].date == date(2024, 1, 8)
    assert schedule[6].date == date(2024, 1, 14)
    assert schedule[0].weekday == "Mon"
    assert schedule[0].available_minutes == 105 + 735
    assert [block.id for block in schedule[0].fixed_events] == ["class"]
    assert all(day.tasks == [] for day in schedule)

    payload = schedule[0].as_dict()
    assert payload["date"] == "2024-01-08"
    assert payload["available_slots"][0] == {
        "start": "2024-01-08T07:00:00",
        "end": "2024-01-08T08:45:00",
        "minutes": 105,
    }


def test_day_runs_until_next_midnight() -> None:
    config = EngineConfig(sleep_start_time="01:00", sleep_end_time="06:00")
    calc = compute_availability([_event("late", "21:00", "23:15", [0])], WEEK_START, config=config)

    assert _spans(calc, 0) == [("00:00", "01:00"), ("06:00", "20:45"), ("23:30", "00:00")]
    last = calc.availability_map[0][-1]
    assert last.end.date() == date(2024, 1, 9)
    assert last.minutes == 30
