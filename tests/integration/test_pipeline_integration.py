from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from studyplan.cli import main, run_plan_command
from studyplan.engine import run_planner
from studyplan.metrics import collect_metrics
from studyplan.normalization import resolve_engine_config
from studyplan.validation import ValidationReport, validate_plan_output_with_schema


def _write(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def _base_files(tmp_path: Path, **request_extra: object) -> tuple[Path, Path]:
    request = tmp_path / "plan_request.json"
    subjects = tmp_path / "subjects.json"
    events = tmp_path / "fixed_events.json"
    output = tmp_path / "plan_output.json"

    _write(
        subjects,
        {
            "schema_version": "1.0",
            "subjects": [
                {"id": "alg", "name": "Algebra", "prior_knowledge": "None", "exam_date": None},
                {"id": "bio", "name": "Biology", "prior_knowledge": "Advanced"},
            ],
        },
    )
    _write(
        events,
        {
            "schema_version": "1.0",
            "fixed_events": [
                {"id": "class", "name": "Lecture", "start_time": "09:00", "end_time": "10:30", "days": [0]},
            ],
        },
    )
    payload = {
        "schema_version": "1.0",
        "request_id": "it-1",
        "week_start": "2024-01-08",
        "reference_date": "2024-01-08",
        "weekly_goal_minutes": 300,
        "subjects_path": subjects.name,
        "fixed_events_path": events.name,
    }
    payload.update(request_extra)
    _write(request, payload)
    return request, output


def _read(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_cli_end_to_end_writes_plan(tmp_path: Path) -> None:
    request, output = _base_files(tmp_path)

    assert run_plan_command(str(request), str(output)) == 0

    report = _read(output)
    assert report["status"] == "ok"
    plan = report["plan_output"]
    assert validate_plan_output_with_schema(plan).errors == []

    assert plan["week_start"] == "2024-01-08"
    assert [(s["id"], s["allocated_minutes"]) for s in plan["subjects"]] == [("alg", 270), ("bio", 30)]
    assert plan["plan_summary"]["total_available_minutes"] == 105 + 735 + 6 * 960
    assert plan["plan_summary"]["target_minutes"] == 300
    assert sum(task["duration"] for task in plan["task_pool"]) == 300
    assert plan["week_schedule"][0]["available_slots"][0]["end"] == "2024-01-08T08:45:00"
    assert plan["metrics"]["target_coverage"] == 1.0
    assert plan["effective_config"]["min_study_block"] == 30
    assert plan["warnings"] == []
    assert plan["decision_trace"][0]["timestamp"] == "2024-01-08T00:00:01Z"


def test_cli_applies_engine_config_file(tmp_path: Path) -> None:
    config = tmp_path / "engine_config.json"
    _write(config, {"event_buffer": -10, "max_study_block": 60})
    request, output = _base_files(tmp_path, engine_config_path=config.name)

    assert run_plan_command(str(request), str(output)) == 0

    plan = _read(output)["plan_output"]
    assert plan["effective_config"]["event_buffer"] == 0
    assert plan["week_schedule"][0]["available_slots"][0]["end"] == "2024-01-08T09:00:00"
    assert max(task["duration"] for task in plan["task_pool"]) <= 60
    assert "INFO_CLAMP_EVENT_BUFFER_APPLIED" in {issue["code"] for issue in plan["validation_report"]["infos"]}


def test_cli_rejects_invalid_request(tmp_path: Path) -> None:
    request, output = _base_files(tmp_path, week_start="soon")

    assert run_plan_command(str(request), str(output)) == 2

    report = _read(output)
    assert report["status"] == "error"
    assert report["error"]["code"] == "validation_error"
    assert report["error"]["details"][0]["path"] == "$.week_start"


def test_cli_reports_missing_input_file(tmp_path: Path) -> None:
    request, output = _base_files(tmp_path, fixed_events_path="nowhere.json")

    assert run_plan_command(str(request), str(output)) == 2

    report = _read(output)
    assert report["error"]["code"] == "input_load_error"
    assert report["error"]["details"][0]["code"] == "file_not_found"


def test_cli_reports_unreadable_request(tmp_path: Path) -> None:
    request = tmp_path / "plan_request.json"
    request.write_text("{not json", encoding="utf-8")
    output = tmp_path / "plan_output.json"

    assert run_plan_command(str(request), str(output)) == 2
    assert _read(output)["error"]["code"] == "request_read_error"


def test_cli_aggregates_schema_and_domain_errors(tmp_path: Path) -> None:
    request, output = _base_files(tmp_path)
    _write(
        tmp_path / "subjects.json",
        {"subjects": [{"id": "m", "name": "Math", "level": 2}, {"id": "m", "name": "Math II"}]},
    )

    assert run_plan_command(str(request), str(output)) == 2

    report = _read(output)
    codes = {detail["code"] for detail in report["error"]["details"]}
    assert codes == {"UNKNOWN_FIELD", "DUPLICATE_SUBJECT_ID"}
    assert report["validation_report"]["errors"]


def test_main_parses_arguments(tmp_path: Path) -> None:
    request, output = _base_files(tmp_path)
    assert main(["plan", "--request", str(request), "--output", str(output), "--log-level", "INFO"]) == 0
    assert output.exists()


def test_runner_uses_clock_when_no_reference_date() -> None:
    payload = {
        "plan_request": {"week_start": "2024-01-08", "weekly_goal_minutes": 300},
        "subjects": {
            "subjects": [
                {"id": "a", "name": "A", "prior_knowledge": "Advanced", "exam_date": "2024-01-09"},
                {"id": "b", "name": "B", "prior_knowledge": "Advanced"},
            ]
        },
        "fixed_events": {"fixed_events": []},
    }
    near = run_planner(payload, clock=lambda: date(2024, 1, 8))
    # Seen from a month later the exam has passed.
    late = run_planner(payload, clock=lambda: date(2024, 2, 12))

    assert near["reference_date"] == "2024-01-08"
    assert [s["allocated_minutes"] for s in near["subjects"]] == [285, 15]
    assert [s["allocated_minutes"] for s in late["subjects"]] == [150, 150]
    assert [w["code"] for w in late["warnings"]] == ["WARN_EXAM_DATE_PASSED"]


def test_runner_accepts_resolved_config_and_collects_metrics() -> None:
    report = ValidationReport()
    config = resolve_engine_config({"min_study_block": 60}, report)
    payload = {
        "plan_request": {"week_start": "2024-01-08", "reference_date": "2024-01-08"},
        "subjects": {"subjects": [{"id": "a", "name": "A"}]},
        "fixed_events": {
            "fixed_events": [
                {"id": "bad", "name": "Bad", "start_time": "noon", "end_time": "13:00", "days": [0]},
            ]
        },
        "effective_config": config,
    }
    result = run_planner(payload, validation_report=report)

    assert result["effective_config"]["min_study_block"] == 60
    assert result["plan_summary"]["fixed_events_count"] == 1
    assert result["plan_summary"]["target_minutes"] == 7 * 960
    assert [issue.code for issue in report.infos] == ["INFO_FIXED_EVENT_SKIPPED"]

    metrics = collect_metrics(result)
    assert metrics["total_task_minutes"] == result["plan_summary"]["total_allocated_minutes"]
    assert metrics["fixed_block_count"] == 0
