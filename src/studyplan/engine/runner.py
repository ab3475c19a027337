"""Weekly planning runner."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Callable

from studyplan.normalization.config_resolver import EngineConfig, resolve_engine_config
from studyplan.reporting.decision_trace import DecisionTraceCollector
from studyplan.reporting.warnings import build_warnings_and_suggestions
from studyplan.validation import ValidationReport

from .allocator import allocate_subjects, compute_target_minutes
from .models import FixedEvent, Subject
from .slot_builder import build_week_schedule, compute_availability
from .task_pool import generate_task_pool
from .timeutils import to_date

logger = logging.getLogger(__name__)


def _extract_subjects(payload: dict[str, Any]) -> list[Subject]:
    root = payload.get("subjects", {})
    if isinstance(root, dict):
        items = root.get("subjects", [])
        if isinstance(items, list):
            return [Subject.from_dict(item) for item in items if isinstance(item, dict)]
    return []


def _extract_fixed_events(payload: dict[str, Any]) -> list[FixedEvent]:
    root = payload.get("fixed_events", {})
    if isinstance(root, dict):
        items = root.get("fixed_events", [])
        if isinstance(items, list):
            return [FixedEvent.from_dict(item) for item in items if isinstance(item, dict)]
    return []


def _resolve_config(payload: dict[str, Any], report: ValidationReport) -> EngineConfig:
    effective = payload.get("effective_config")
    if isinstance(effective, EngineConfig):
        return effective
    source = payload.get("engine_config")
    return resolve_engine_config(source if isinstance(source, dict) else None, report)


def _as_minutes(raw: Any) -> int:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return max(0, int(raw))
    return 0


def run_planner(
    payload: dict[str, Any],
    *,
    clock: Callable[[], date] = date.today,
    validation_report: ValidationReport | None = None,
) -> dict[str, Any]:
    """Run availability, allocation and task packing for one week.

    ``plan_request.reference_date`` pins "today" for exam scoring; otherwise
    ``clock`` is asked once.
    """
    report = validation_report if validation_report is not None else ValidationReport()
    request = payload.get("plan_request", {}) if isinstance(payload.get("plan_request"), dict) else {}

    week_start = to_date(request.get("week_start"))
    if week_start is None:
        raise ValueError(f"Invalid week_start: {request.get('week_start')!r}")
    reference_day = to_date(request.get("reference_date")) or clock()
    weekly_goal_minutes = _as_minutes(request.get("weekly_goal_minutes"))

    config = _resolve_config(payload, report)
    subjects = _extract_subjects(payload)
    fixed_events = _extract_fixed_events(payload)

    availability = compute_availability(
        fixed_events,
        week_start,
        config=config,
        validation_report=report,
    )
    total_available_minutes = availability.total_minutes()
    target_minutes = compute_target_minutes(total_available_minutes, weekly_goal_minutes)
    logger.info(
        "Week %s: %d min available, %d min target across %d subjects",
        week_start.isoformat(),
        total_available_minutes,
        target_minutes,
        len(subjects),
    )

    decision_trace = DecisionTraceCollector(
        start_timestamp=datetime.combine(reference_day, time.min, tzinfo=timezone.utc)
    )
    allocated = allocate_subjects(
        subjects,
        total_available_minutes=total_available_minutes,
        weekly_goal_minutes=weekly_goal_minutes,
        reference_day=reference_day,
        config=config,
        decision_trace=decision_trace,
    )
    task_pool = generate_task_pool(allocated, config=config)
    week_schedule = build_week_schedule(availability, week_start)

    subjects_out = [subject.as_dict() for subject in allocated]
    tasks_out = [task.as_dict() for task in task_pool]
    schedule_out = [day.as_dict() for day in week_schedule]

    warnings, suggestions = build_warnings_and_suggestions(
        subjects=subjects_out,
        tasks=tasks_out,
        week_schedule=schedule_out,
        total_available_minutes=total_available_minutes,
        weekly_goal_minutes=weekly_goal_minutes,
        reference_day=reference_day,
    )

    total_allocated_minutes = sum(subject.allocated_minutes for subject in allocated)
    total_task_minutes = sum(task.duration for task in task_pool)

    return {
        "status": "ok",
        "week_start": week_start.isoformat(),
        "reference_date": reference_day.isoformat(),
        "availability": availability.as_dict(),
        "week_schedule": schedule_out,
        "subjects": subjects_out,
        "task_pool": tasks_out,
        "plan_summary": {
            "subjects_count": len(allocated),
            "fixed_events_count": len(fixed_events),
            "total_available_minutes": total_available_minutes,
            "weekly_goal_minutes": weekly_goal_minutes,
            "target_minutes": target_minutes,
            "total_allocated_minutes": total_allocated_minutes,
            "total_task_minutes": total_task_minutes,
            "tasks_count": len(task_pool),
        },
        "warnings": warnings,
        "suggestions": suggestions,
        "effective_config": config.as_dict(),
        "decision_trace": decision_trace.as_list(),
    }
