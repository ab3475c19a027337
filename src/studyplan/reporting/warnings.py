"""Warning and suggestion generation for a weekly plan."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any


def _to_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value[:10], "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def _hours(minutes: int) -> str:
    return f"{minutes / 60:.1f}"


def build_warnings_and_suggestions(
    *,
    subjects: list[dict[str, Any]],
    tasks: list[dict[str, Any]],
    week_schedule: list[dict[str, Any]],
    total_available_minutes: int,
    weekly_goal_minutes: int,
    reference_day: date,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Generate plan warnings and the matching suggestions."""
    warnings: list[dict[str, Any]] = []
    suggestions: list[dict[str, Any]] = []

    total_allocated = sum(int(s.get("allocated_minutes", 0) or 0) for s in subjects)

    # (1) No free time at all.
    if subjects and total_available_minutes <= 0:
        warnings.append(
            {
                "code": "WARN_NO_AVAILABLE_TIME",
                "severity": "warning",
                "message": "No free study time is left this week after sleep and fixed commitments.",
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_REVIEW_FIXED_EVENTS",
                "message": "Shorten or move fixed commitments, or reduce the event buffer.",
            }
        )

    # (2) Goal above what the week can hold.
    if weekly_goal_minutes > total_available_minutes > 0:
        warnings.append(
            {
                "code": "WARN_GOAL_EXCEEDS_AVAILABILITY",
                "severity": "warning",
                "weekly_goal_minutes": weekly_goal_minutes,
                "total_available_minutes": total_available_minutes,
                "message": (
                    f"Weekly goal of {_hours(weekly_goal_minutes)} h exceeds the "
                    f"{_hours(total_available_minutes)} h available; allocation was capped."
                ),
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_LOWER_WEEKLY_GOAL",
                "message": "Lower the weekly goal or free up time from fixed commitments.",
            }
        )

    # (3) Allocation above availability (manual overrides can cause this).
    if total_allocated > total_available_minutes:
        warnings.append(
            {
                "code": "WARN_OVER_ALLOCATED",
                "severity": "warning",
                "excess_minutes": total_allocated - total_available_minutes,
                "message": (
                    f"Allocated time exceeds estimated available time by "
                    f"~{_hours(total_allocated - total_available_minutes)} h."
                ),
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_REDUCE_ALLOCATION",
                "message": "Reduce allocations on lower-priority subjects.",
            }
        )

    # (4) Subjects squeezed out by rounding.
    if total_allocated > 0:
        for subject in subjects:
            if int(subject.get("allocated_minutes", 0) or 0) > 0:
                continue
            sid = str(subject.get("id", ""))
            warnings.append(
                {
                    "code": "WARN_SUBJECT_WITHOUT_TIME",
                    "severity": "warning",
                    "subject_id": sid,
                    "message": f"{subject.get('name', sid)} received no study time this week.",
                }
            )
            suggestions.append(
                {
                    "code": "SUGGEST_RAISE_WEEKLY_GOAL",
                    "subject_id": sid,
                    "message": "Raise the weekly goal or allocate minutes to this subject manually.",
                }
            )

    # (5) Exams already behind the current week.
    week_monday = reference_day - timedelta(days=reference_day.weekday())
    for subject in subjects:
        exam_day = _to_date(subject.get("exam_date"))
        if exam_day is None or exam_day >= week_monday:
            continue
        sid = str(subject.get("id", ""))
        warnings.append(
            {
                "code": "WARN_EXAM_DATE_PASSED",
                "severity": "info",
                "subject_id": sid,
                "exam_date": exam_day.isoformat(),
                "message": "Exam date is in the past; the subject was deprioritised.",
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_UPDATE_EXAM_DATE",
                "subject_id": sid,
                "message": "Update or clear the exam date.",
            }
        )

    # (6) Tasks no free slot can hold.
    largest_slot = 0
    for day in week_schedule:
        for slot in day.get("available_slots", []):
            largest_slot = max(largest_slot, int(slot.get("minutes", 0) or 0))
    oversized = [task for task in tasks if int(task.get("duration", 0) or 0) > largest_slot]
    if tasks and oversized:
        warnings.append(
            {
                "code": "WARN_TASK_EXCEEDS_SLOTS",
                "severity": "warning",
                "task_count": len(oversized),
                "largest_slot_minutes": largest_slot,
                "message": f"{len(oversized)} task(s) are longer than any free slot this week.",
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_LOWER_MAX_BLOCK",
                "message": "Lower the maximum study block or free up a longer window.",
            }
        )

    unique_suggestions: list[dict[str, Any]] = []
    seen: set[tuple[str, str]] = set()
    for item in suggestions:
        key = (str(item.get("code", "")), str(item.get("subject_id", "*")))
        if key in seen:
            continue
        seen.add(key)
        unique_suggestions.append(item)

    return warnings, unique_suggestions
