"""Build CLI reports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from studyplan.validation import ValidationError, ValidationReport

PLAN_OUTPUT_SCHEMA_VERSION = "1.0.0"


def build_error_report(errors: list[ValidationError], code: str = "validation_error") -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    return {
        "status": "error",
        "error": {
            "code": code,
            "count": len(errors),
            "details": [err.as_dict() for err in errors],
        },
    }


def build_error_report_with_validation(
    errors: list[ValidationError],
    validation_report: ValidationReport,
    code: str = "validation_error",
) -> dict[str, Any]:
    payload = build_error_report(errors, code=code)
    payload["validation_report"] = validation_report.as_dict()
    return payload


def build_success_report(
    result: dict[str, Any],
    metrics: dict[str, Any],
    validation_report: ValidationReport,
    *,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Return a JSON-serializable success report.

    ``plan_output`` is the stable consumer-facing document; ``result`` keeps
    the raw runner payload (availability map included) for debugging.
    """
    moment = generated_at or datetime.now(timezone.utc)
    stamp = moment.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    week_start = str(result.get("week_start", ""))
    plan_id = f"plan-{week_start.replace('-', '')}-{stamp.replace(':', '').replace('-', '').replace('T', '-').replace('Z', '')}"
    plan_output = {
        "schema_version": PLAN_OUTPUT_SCHEMA_VERSION,
        "plan_id": plan_id,
        "generated_at": stamp,
        "week_start": week_start,
        "reference_date": result.get("reference_date"),
        "plan_summary": result.get("plan_summary", {}),
        "subjects": result.get("subjects", []),
        "task_pool": result.get("task_pool", []),
        "week_schedule": result.get("week_schedule", []),
        "metrics": metrics,
        "warnings": result.get("warnings", []),
        "suggestions": result.get("suggestions", []),
        "decision_trace": result.get("decision_trace", []),
        "effective_config": result.get("effective_config", {}),
        "validation_report": validation_report.as_dict(),
    }
    return {
        "status": "ok",
        "result": result,
        "metrics": metrics,
        "plan_output": plan_output,
    }
