"""JSON schema validation for planner inputs and outputs.

Supports the subset of JSON Schema the bundled schemas use: ``type``,
``enum``, ``required``, ``properties``, ``additionalProperties: false``,
``items``, ``minItems``, ``minLength``, ``format`` (date, date-time, time),
``minimum``/``maximum``/``exclusiveMinimum`` and ``multipleOf``.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any

from .errors import ValidationReport

_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

_SCHEMA_BY_PAYLOAD = {
    "plan_request": "plan_request.schema.json",
    "subjects": "subjects.schema.json",
    "fixed_events": "fixed_events.schema.json",
    "engine_config": "engine_config.schema.json",
}


@lru_cache(maxsize=None)
def _load_schema(schema_file: str) -> dict[str, Any]:
    return json.loads((_SCHEMA_DIR / schema_file).read_text(encoding="utf-8"))


def validate_inputs_with_schema(payloads: dict[str, Any]) -> ValidationReport:
    report = ValidationReport()

    for payload_name, schema_file in _SCHEMA_BY_PAYLOAD.items():
        if payload_name not in payloads:
            continue
        _validate_node(
            value=payloads[payload_name],
            schema=_load_schema(schema_file),
            path=f"$.{payload_name}",
            report=report,
        )

    return report


def validate_plan_output_with_schema(plan_output: dict[str, Any]) -> ValidationReport:
    report = ValidationReport()
    _validate_node(
        value=plan_output,
        schema=_load_schema("plan_output.schema.json"),
        path="$.plan_output",
        report=report,
    )
    return report


def _validate_node(*, value: Any, schema: dict[str, Any], path: str, report: ValidationReport) -> None:
    expected_type = schema.get("type")
    if expected_type:
        if not _matches_type(value, expected_type):
            report.add_error(
                code="INVALID_TYPE",
                message=f"Expected type {expected_type}, got {type(value).__name__}",
                field_path=path,
            )
            return

    if "enum" in schema and value not in schema["enum"]:
        report.add_error(
            code="INVALID_ENUM_VALUE",
            message=f"Value {value!r} not in enum",
            field_path=path,
        )

    if isinstance(value, dict):
        for key in schema.get("required", []):
            if key not in value:
                report.add_error(
                    code="MISSING_REQUIRED_FIELD",
                    message=f"Missing required field: {key}",
                    field_path=f"{path}.{key}",
                )

        properties = schema.get("properties", {})
        if schema.get("additionalProperties") is False:
            for key in value:
                if key not in properties:
                    report.add_error(
                        code="UNKNOWN_FIELD",
                        message=f"Unknown field: {key}",
                        field_path=f"{path}.{key}",
                        suggested_fix="Remove unsupported key or use one of schema-defined fields.",
                    )

        for key, prop_schema in properties.items():
            if key in value:
                _validate_node(value=value[key], schema=prop_schema, path=f"{path}.{key}", report=report)

    elif isinstance(value, list):
        min_items = schema.get("minItems")
        if min_items is not None and len(value) < min_items:
            report.add_error(
                code="EMPTY_ARRAY_NOT_ALLOWED",
                message=f"Array must have at least {min_items} items",
                field_path=path,
            )
        items_schema = schema.get("items")
        if isinstance(items_schema, dict):
            for idx, item in enumerate(value):
                _validate_node(value=item, schema=items_schema, path=f"{path}[{idx}]", report=report)

    elif isinstance(value, str):
        min_len = schema.get("minLength")
        if min_len is not None and len(value) < min_len:
            report.add_error(
                code="MISSING_REQUIRED_FIELD",
                message="String cannot be empty",
                field_path=path,
            )
        data_format = schema.get("format")
        if data_format == "date" and not _is_date(value):
            report.add_error(code="INVALID_DATE_FORMAT", message="Invalid date format", field_path=path)
        if data_format == "date-time" and not _is_datetime(value):
            report.add_error(code="INVALID_DATE_FORMAT", message="Invalid datetime format", field_path=path)
        if data_format == "time" and not _is_clock_time(value):
            report.add_error(code="INVALID_TIME_FORMAT", message="Time must be HH:mm", field_path=path)

    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        minimum = schema.get("minimum")
        if minimum is not None and value < minimum:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be >= {minimum}", field_path=path)
        exclusive_min = schema.get("exclusiveMinimum")
        if exclusive_min is not None and value <= exclusive_min:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be > {exclusive_min}", field_path=path)
        maximum = schema.get("maximum")
        if maximum is not None and value > maximum:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be <= {maximum}", field_path=path)
        multiple_of = schema.get("multipleOf")
        if multiple_of is not None and value % multiple_of != 0:
            report.add_error(
                code="INVALID_STEP_VALUE",
                message=f"Value must be multiple of {multiple_of}",
                field_path=path,
            )


def _matches_type(value: Any, expected_type: str | list[str]) -> bool:
    if isinstance(expected_type, list):
        return any(_matches_type(value, item) for item in expected_type)
    return {
        "object": isinstance(value, dict),
        "array": isinstance(value, list),
        "string": isinstance(value, str),
        "integer": isinstance(value, int) and not isinstance(value, bool),
        "number": isinstance(value, (int, float)) and not isinstance(value, bool),
        "boolean": isinstance(value, bool),
        "null": value is None,
    }.get(expected_type, True)


def _is_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def _is_clock_time(value: str) -> bool:
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        return False
    return True
