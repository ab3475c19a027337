"""CLI entrypoint for studyplan."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from studyplan.engine import run_planner
from studyplan.io import read_json, write_json
from studyplan.metrics import collect_metrics
from studyplan.normalization import normalize_request, resolve_engine_config
from studyplan.reporting import (
    build_error_report,
    build_error_report_with_validation,
    build_success_report,
)
from studyplan.validation import (
    ValidationError,
    ValidationReport,
    validate_domain_inputs,
    validate_inputs_with_schema,
    validate_plan_request,
)

logger = logging.getLogger(__name__)

_INPUT_FILES = {
    "subjects_path": "subjects",
    "fixed_events_path": "fixed_events",
    "engine_config_path": "engine_config",
}


def _resolve_input_path(request_file: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return (request_file.parent / path).resolve()


def _load_referenced_inputs(request_file: Path, request: dict[str, Any]) -> tuple[dict[str, Any], list[ValidationError]]:
    loaded: dict[str, Any] = {}
    errors: list[ValidationError] = []

    for path_field, target_field in _INPUT_FILES.items():
        if request.get(path_field) is None:
            continue
        resolved = _resolve_input_path(request_file, request[path_field])
        try:
            loaded[target_field] = read_json(resolved)
        except FileNotFoundError:
            errors.append(
                ValidationError(
                    code="file_not_found",
                    message=f"Referenced file not found: {resolved}",
                    path=f"$.{path_field}",
                )
            )
        except ValueError as exc:
            errors.append(
                ValidationError(
                    code="invalid_json",
                    message=str(exc),
                    path=f"$.{path_field}",
                )
            )

    return loaded, errors


def run_plan_command(request_path: str, output_path: str) -> int:
    validation_report = ValidationReport()

    try:
        request_payload = read_json(request_path)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read plan request %s: %s", request_path, exc)
        error = build_error_report(
            [ValidationError(code="invalid_request", message=str(exc), path="$.request")],
            code="request_read_error",
        )
        write_json(output_path, error)
        return 2

    request_payload = normalize_request(request_payload)
    errors = validate_plan_request(request_payload)

    if errors:
        logger.error("Plan request rejected with %d error(s)", len(errors))
        write_json(output_path, build_error_report(errors))
        return 2

    loaded, load_errors = _load_referenced_inputs(Path(request_path), request_payload)
    if load_errors:
        logger.error("Failed to load %d referenced input file(s)", len(load_errors))
        write_json(
            output_path,
            build_error_report_with_validation(
                load_errors,
                validation_report=validation_report,
                code="input_load_error",
            ),
        )
        return 2

    loaded["plan_request"] = request_payload
    validation_report.extend(validate_inputs_with_schema(loaded))
    validation_report.extend(validate_domain_inputs(loaded))

    if validation_report.has_errors:
        logger.error("Input validation failed: %s", ", ".join(issue.code for issue in validation_report.errors))
        write_json(
            output_path,
            build_error_report_with_validation(
                validation_report.to_errors(),
                validation_report=validation_report,
                code="validation_error",
            ),
        )
        return 2

    loaded["effective_config"] = resolve_engine_config(loaded.get("engine_config"), validation_report)

    result = run_planner(loaded, validation_report=validation_report)
    metrics = collect_metrics(result)
    write_json(output_path, build_success_report(result, metrics, validation_report))
    logger.info(
        "Plan written to %s: %d task(s), %d info note(s)",
        output_path,
        len(result.get("task_pool", [])),
        len(validation_report.infos),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studyplan", description="Weekly study planner CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser("plan", help="Generate a weekly plan from plan_request JSON")
    plan_parser.add_argument("--request", required=True, help="Path to plan_request.json")
    plan_parser.add_argument("--output", required=True, help="Path to plan_output.json")
    plan_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity on stderr",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "plan":
        return run_plan_command(args.request, args.output)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
