"""Validation for plan request payload."""

from __future__ import annotations

from datetime import date
from typing import Any

from .errors import ValidationError

_REQUIRED_PATH_FIELDS = (
    "subjects_path",
    "fixed_events_path",
)

_OPTIONAL_PATH_FIELDS = ("engine_config_path",)


def validate_plan_request(payload: dict[str, Any]) -> list[ValidationError]:
    """Validate plan_request with basic shape checks."""
    errors: list[ValidationError] = []

    for field in _REQUIRED_PATH_FIELDS:
        value = payload.get(field)
        if value is None:
            errors.append(
                ValidationError(
                    code="missing_field",
                    message=f"Missing required field: {field}",
                    path=f"$.{field}",
                )
            )
        elif not _is_path(value):
            errors.append(_invalid_path(field))

    for field in _OPTIONAL_PATH_FIELDS:
        value = payload.get(field)
        if value is not None and not _is_path(value):
            errors.append(_invalid_path(field))

    week_start = payload.get("week_start")
    if week_start is None:
        errors.append(
            ValidationError(code="missing_field", message="Missing required field: week_start", path="$.week_start")
        )
    elif not _is_iso_date(week_start):
        errors.append(
            ValidationError(code="invalid_date", message="week_start must be an ISO date (YYYY-MM-DD)", path="$.week_start")
        )

    reference_date = payload.get("reference_date")
    if reference_date is not None and not _is_iso_date(reference_date):
        errors.append(
            ValidationError(
                code="invalid_date",
                message="reference_date must be an ISO date (YYYY-MM-DD)",
                path="$.reference_date",
            )
        )

    goal = payload.get("weekly_goal_minutes")
    if goal is not None and (isinstance(goal, bool) or not isinstance(goal, (int, float)) or goal < 0):
        errors.append(
            ValidationError(
                code="invalid_type",
                message="weekly_goal_minutes must be a non-negative number",
                path="$.weekly_goal_minutes",
            )
        )

    return errors


def _is_path(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _invalid_path(field: str) -> ValidationError:
    return ValidationError(
        code="invalid_type",
        message=f"Field must be a non-empty string path: {field}",
        path=f"$.{field}",
    )


def _is_iso_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
