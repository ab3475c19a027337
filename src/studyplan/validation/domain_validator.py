"""Domain-level cross-file validation rules."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from .errors import ValidationReport

_KNOWLEDGE_LEVELS = {"None", "Basic", "Intermediate", "Advanced"}


def validate_domain_inputs(loaded_payload: dict[str, Any]) -> ValidationReport:
    """Validate cross-file coherence and non-schema rules."""
    report = ValidationReport()

    request = loaded_payload.get("plan_request", {})
    subjects_payload = loaded_payload.get("subjects", {})
    events_payload = loaded_payload.get("fixed_events", {})

    if isinstance(request, dict):
        _validate_week_start(request, report)

    subjects = subjects_payload.get("subjects", []) if isinstance(subjects_payload, dict) else []
    subject_ids: set[str] = set()
    for idx, subject in enumerate(subjects):
        if not isinstance(subject, dict):
            continue
        path = f"$.subjects.subjects[{idx}]"
        subject_id = subject.get("id")
        if isinstance(subject_id, str):
            if subject_id in subject_ids:
                report.add_error(
                    code="DUPLICATE_SUBJECT_ID",
                    message=f"Duplicate subject id: {subject_id}",
                    field_path=f"{path}.id",
                )
            subject_ids.add(subject_id)

        prior_knowledge = subject.get("prior_knowledge")
        if prior_knowledge is not None and prior_knowledge not in _KNOWLEDGE_LEVELS:
            report.add_info(
                code="INFO_PRIOR_KNOWLEDGE_UNKNOWN",
                message=f"Unknown prior_knowledge {prior_knowledge!r}: no knowledge-gap bonus applied",
                field_path=f"{path}.prior_knowledge",
                extra={"allowed": sorted(_KNOWLEDGE_LEVELS)},
            )

        exam_date = subject.get("exam_date")
        if exam_date not in (None, "") and _parse_date(exam_date) is None:
            report.add_info(
                code="INFO_EXAM_DATE_IGNORED",
                message="exam_date is not a valid ISO date and is treated as absent",
                field_path=f"{path}.exam_date",
            )

    events = events_payload.get("fixed_events", []) if isinstance(events_payload, dict) else []
    event_ids: set[str] = set()
    for idx, event in enumerate(events):
        if not isinstance(event, dict):
            continue
        event_id = event.get("id")
        if isinstance(event_id, str):
            if event_id in event_ids:
                report.add_error(
                    code="DUPLICATE_FIXED_EVENT_ID",
                    message=f"Duplicate fixed event id: {event_id}",
                    field_path=f"$.fixed_events.fixed_events[{idx}].id",
                )
            event_ids.add(event_id)

        start = _parse_clock(event.get("start_time"))
        end = _parse_clock(event.get("end_time"))
        if start is not None and end is not None and end < start:
            report.add_info(
                code="INFO_FIXED_EVENT_OVERNIGHT",
                message="end_time is before start_time: the event is treated as crossing midnight",
                field_path=f"$.fixed_events.fixed_events[{idx}]",
            )

    return report


def _validate_week_start(request: dict[str, Any], report: ValidationReport) -> None:
    week_start = _parse_date(request.get("week_start"))
    if week_start is None:
        return
    if week_start.weekday() != 0:
        report.add_info(
            code="INFO_WEEK_START_NOT_MONDAY",
            message=f"week_start {week_start.isoformat()} is a {week_start.strftime('%A')}; day 0 is that day",
            field_path="$.plan_request.week_start",
        )


def _parse_date(raw: Any) -> date | None:
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        return None


def _parse_clock(raw: Any) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        return datetime.strptime(raw, "%H:%M")
    except ValueError:
        return None
