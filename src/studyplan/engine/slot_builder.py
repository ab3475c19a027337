"""Build deterministic weekly free-time slots.

For each day index (offset from the week start) this module carves out of
the full day:
- the nightly sleep window, which may wrap past midnight,
- every fixed event on that day, padded by the event buffer on both sides.

Slots shorter than the minimum study block are dropped after each carve-out.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable

from studyplan.normalization.config_resolver import EngineConfig
from studyplan.validation import ValidationReport

from .intervals import IntervalList
from .models import AvailabilityCalculation, DaySchedule, FixedEvent, FixedEventBlock
from .timeutils import at_clock_time, parse_clock_time, start_of_day, to_date

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
_DEFAULT_SLEEP_START = time(23, 0)
_DEFAULT_SLEEP_END = time(7, 0)


def _coerce_events(fixed_events: Iterable[FixedEvent | dict[str, Any]]) -> list[FixedEvent]:
    events: list[FixedEvent] = []
    for event in fixed_events:
        if isinstance(event, FixedEvent):
            events.append(event)
        elif isinstance(event, dict):
            events.append(FixedEvent.from_dict(event))
    return events


def _sleep_blocks(day: date, config: EngineConfig) -> list[tuple[datetime, datetime]]:
    sleep_start = parse_clock_time(config.sleep_start_time) or _DEFAULT_SLEEP_START
    sleep_end = parse_clock_time(config.sleep_end_time) or _DEFAULT_SLEEP_END

    day_start = start_of_day(day)
    day_end = day_start + timedelta(days=1)
    if sleep_start > sleep_end:
        return [(at_clock_time(day, sleep_start), day_end), (day_start, at_clock_time(day, sleep_end))]
    return [(at_clock_time(day, sleep_start), at_clock_time(day, sleep_end))]


def _event_blocks(day: date, start: time, end: time, buffer_minutes: int) -> list[tuple[datetime, datetime]]:
    """Buffered windows to subtract for one event on one day."""
    buffer = timedelta(minutes=buffer_minutes)
    event_start = at_clock_time(day, start)
    event_end = at_clock_time(day, end)
    if end < start:
        # Overnight commitment: the evening tail and the early-morning head.
        day_start = start_of_day(day)
        return [(event_start - buffer, day_start + timedelta(days=1)), (day_start, event_end + buffer)]
    return [(event_start - buffer, event_end + buffer)]


def _parse_events(
    events: list[FixedEvent],
    report: ValidationReport | None,
) -> list[tuple[FixedEvent, time, time]]:
    parsed: list[tuple[FixedEvent, time, time]] = []
    for idx, event in enumerate(events):
        start = parse_clock_time(event.start_time)
        end = parse_clock_time(event.end_time)
        if start is None or end is None:
            logger.warning("Skipping fixed event %r due to invalid time format", event.name)
            if report is not None:
                report.add_info(
                    code="INFO_FIXED_EVENT_SKIPPED",
                    message=f"Fixed event {event.name!r} skipped: times must be HH:mm",
                    field_path=f"$.fixed_events.fixed_events[{idx}]",
                    extra={"event_id": event.id},
                )
            continue

        ignored_days = sorted(day for day in event.days if not 0 <= day < DAYS_PER_WEEK)
        if ignored_days and report is not None:
            report.add_info(
                code="INFO_FIXED_EVENT_DAY_IGNORED",
                message=f"Day indices {ignored_days} of fixed event {event.name!r} are outside 0-6",
                field_path=f"$.fixed_events.fixed_events[{idx}].days",
                extra={"event_id": event.id},
            )
        parsed.append((event, start, end))
    return parsed


def compute_availability(
    fixed_events: Iterable[FixedEvent | dict[str, Any]],
    week_start: str | date,
    *,
    config: EngineConfig | None = None,
    validation_report: ValidationReport | None = None,
) -> AvailabilityCalculation:
    """Compute free slots and fixed blocks for the 7 days from ``week_start``.

    Deterministic behaviour:
    - days are iterated by ascending day index,
    - events are applied in input order (subtraction is cumulative),
    - fixed blocks are sorted by ``start_time``.
    """

    cfg = config or EngineConfig()
    start = to_date(week_start)
    if start is None:
        raise ValueError(f"Invalid week start date: {week_start!r}")

    parsed_events = _parse_events(_coerce_events(fixed_events), validation_report)

    availability_map: dict[int, tuple] = {}
    fixed_blocks_map: dict[int, tuple[FixedEventBlock, ...]] = {}
    for day_index in range(DAYS_PER_WEEK):
        day = start + timedelta(days=day_index)
        day_start = start_of_day(day)
        slots = IntervalList.single(day_start, day_start + timedelta(days=1))

        for block_start, block_end in _sleep_blocks(day, cfg):
            slots = slots.subtract(block_start, block_end)
        slots = slots.without_shorter_than(cfg.min_study_block)

        blocks: list[FixedEventBlock] = []
        for event, event_start, event_end in parsed_events:
            if day_index not in event.days:
                continue
            blocks.append(
                FixedEventBlock(
                    id=event.id,
                    name=event.name,
                    start_time=event_start.strftime("%H:%M"),
                    end_time=event_end.strftime("%H:%M"),
                )
            )
            for block_start, block_end in _event_blocks(day, event_start, event_end, cfg.event_buffer):
                slots = slots.subtract(block_start, block_end)
            slots = slots.without_shorter_than(cfg.min_study_block)

        availability_map[day_index] = slots.slots
        fixed_blocks_map[day_index] = tuple(sorted(blocks, key=lambda block: block.start_time))

    return AvailabilityCalculation(availability_map=availability_map, fixed_blocks_map=fixed_blocks_map)


def build_week_schedule(calculation: AvailabilityCalculation, week_start: str | date) -> list[DaySchedule]:
    """Lay the availability out as one ``DaySchedule`` per day, tasks unplaced."""
    start = to_date(week_start)
    if start is None:
        raise ValueError(f"Invalid week start date: {week_start!r}")

    schedule: list[DaySchedule] = []
    for day_index in range(DAYS_PER_WEEK):
        day = start + timedelta(days=day_index)
        schedule.append(
            DaySchedule(
                date=day,
                day_index=day_index,
                weekday=day.strftime("%a"),
                fixed_events=list(calculation.fixed_blocks_map.get(day_index, ())),
                available_slots=list(calculation.availability_map.get(day_index, ())),
            )
        )
    return schedule
