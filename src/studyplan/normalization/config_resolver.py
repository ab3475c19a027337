"""Resolve the effective engine configuration from defaults and overrides."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from studyplan.validation import ValidationReport

DEFAULT_SUBJECT_COLORS: tuple[str, ...] = (
    "red",
    "blue",
    "green",
    "yellow",
    "purple",
    "pink",
    "indigo",
    "teal",
)

DEFAULT_ENGINE_CONFIG: dict[str, Any] = {
    "min_study_block": 30,
    "max_study_block": 120,
    "sleep_start_time": "23:00",
    "sleep_end_time": "07:00",
    "event_buffer": 15,
    "allocation_step_minutes": 15,
    "preferred_durations": {"study": 90, "practice": 60, "review": 45},
    "subject_colors": list(DEFAULT_SUBJECT_COLORS),
}


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Tunables consumed by availability, allocation and task packing."""

    min_study_block: int = 30
    max_study_block: int = 120
    sleep_start_time: str = "23:00"
    sleep_end_time: str = "07:00"
    event_buffer: int = 15
    allocation_step_minutes: int = 15
    preferred_durations: tuple[tuple[str, int], ...] = (("study", 90), ("practice", 60), ("review", 45))
    subject_colors: tuple[str, ...] = DEFAULT_SUBJECT_COLORS

    def preferred_duration(self, task_type: str) -> int:
        preferred = int(dict(self.preferred_durations).get(task_type, 60))
        return max(self.min_study_block, min(preferred, self.max_study_block))

    def as_dict(self) -> dict[str, Any]:
        return {
            "min_study_block": self.min_study_block,
            "max_study_block": self.max_study_block,
            "sleep_start_time": self.sleep_start_time,
            "sleep_end_time": self.sleep_end_time,
            "event_buffer": self.event_buffer,
            "allocation_step_minutes": self.allocation_step_minutes,
            "preferred_durations": dict(self.preferred_durations),
            "subject_colors": list(self.subject_colors),
        }


def resolve_engine_config(
    source: dict[str, Any] | None,
    validation_report: ValidationReport | None = None,
) -> EngineConfig:
    """Merge overrides onto defaults, clamping invalid values.

    Every adjustment is recorded as an info issue so callers can surface it.
    """
    report = validation_report if validation_report is not None else ValidationReport()
    merged = dict(DEFAULT_ENGINE_CONFIG)
    if isinstance(source, dict):
        merged.update({key: value for key, value in source.items() if key != "schema_version"})

    min_block = _clamped_int(merged, "min_study_block", minimum=1, report=report)
    max_block = _clamped_int(merged, "max_study_block", minimum=min_block, report=report)
    event_buffer = _clamped_int(merged, "event_buffer", minimum=0, report=report)
    step = _clamped_int(merged, "allocation_step_minutes", minimum=1, report=report)

    sleep_start, sleep_end = _resolve_sleep_window(merged, report)

    return EngineConfig(
        min_study_block=min_block,
        max_study_block=max_block,
        sleep_start_time=sleep_start,
        sleep_end_time=sleep_end,
        event_buffer=event_buffer,
        allocation_step_minutes=step,
        preferred_durations=tuple(_resolve_preferred_durations(merged.get("preferred_durations"), report).items()),
        subject_colors=_resolve_colors(merged.get("subject_colors"), report),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clamped_int(merged: dict[str, Any], key: str, *, minimum: int, report: ValidationReport) -> int:
    raw = merged.get(key)
    default = int(DEFAULT_ENGINE_CONFIG[key])
    if not _is_number(raw):
        report.add_info(
            code="INFO_CONFIG_DEFAULT_APPLIED",
            message=f"{key} is not numeric, default used",
            field_path=f"$.engine_config.{key}",
            extra={"applied_value": max(minimum, default)},
        )
        return max(minimum, default)

    value = int(raw)
    if value < minimum:
        report.add_info(
            code=f"INFO_CLAMP_{key.upper()}_APPLIED",
            message=f"{key} was clamped to >= {minimum}",
            field_path=f"$.engine_config.{key}",
            extra={"applied_value": minimum},
        )
        return minimum
    return value


def _valid_clock(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        return False
    return True


def _resolve_sleep_window(merged: dict[str, Any], report: ValidationReport) -> tuple[str, str]:
    start = merged.get("sleep_start_time")
    end = merged.get("sleep_end_time")
    if _valid_clock(start) and _valid_clock(end):
        return _zero_pad(start), _zero_pad(end)

    report.add_info(
        code="INFO_SLEEP_WINDOW_DEFAULTED",
        message="Invalid sleep window, default 23:00-07:00 used",
        field_path="$.engine_config.sleep_start_time",
        extra={"received": {"sleep_start_time": start, "sleep_end_time": end}},
    )
    return DEFAULT_ENGINE_CONFIG["sleep_start_time"], DEFAULT_ENGINE_CONFIG["sleep_end_time"]


def _zero_pad(value: str) -> str:
    return datetime.strptime(value, "%H:%M").strftime("%H:%M")


def _resolve_preferred_durations(raw: Any, report: ValidationReport) -> dict[str, int]:
    resolved = dict(DEFAULT_ENGINE_CONFIG["preferred_durations"])
    if not isinstance(raw, dict):
        return resolved
    for task_type, minutes in raw.items():
        if task_type not in resolved:
            report.add_info(
                code="INFO_UNKNOWN_TASK_TYPE_IGNORED",
                message=f"Preferred duration for unknown task type {task_type!r} ignored",
                field_path=f"$.engine_config.preferred_durations.{task_type}",
            )
            continue
        if _is_number(minutes) and minutes > 0:
            resolved[task_type] = int(minutes)
    return resolved


def _resolve_colors(raw: Any, report: ValidationReport) -> tuple[str, ...]:
    if isinstance(raw, (list, tuple)):
        colors = tuple(str(color) for color in raw if isinstance(color, str) and color)
        if colors:
            return colors
    report.add_info(
        code="INFO_CONFIG_DEFAULT_APPLIED",
        message="subject_colors must be a non-empty list of strings, default palette used",
        field_path="$.engine_config.subject_colors",
    )
    return DEFAULT_SUBJECT_COLORS
