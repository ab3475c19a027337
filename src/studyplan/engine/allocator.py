"""Deterministic weekly minute allocation across subjects.

Phases:
1) priority scoring and ordering (see ``scoring``),
2) rough proportional allocation snapped to the allocation step,
3) overshoot correction, lowest priority first,
4) hard cleanup of any residual overshoot.

Rule preserved: lower-priority subjects always absorb rounding loss first.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Iterable

from studyplan.normalization.config_resolver import EngineConfig
from studyplan.reporting.decision_trace import DecisionTraceCollector

from .models import Subject, SubjectWithPriority
from .scoring import prioritize_subjects
from .timeutils import round_half_up, snap_to_step


def _coerce_subjects(subjects: Iterable[Subject | dict[str, Any]]) -> list[Subject]:
    return [subject if isinstance(subject, Subject) else Subject.from_dict(subject) for subject in subjects]


def compute_target_minutes(total_available_minutes: float, weekly_goal_minutes: float) -> int:
    """Weekly goal capped by availability; a non-positive goal means "all of it"."""
    available = max(0, int(total_available_minutes))
    goal = int(weekly_goal_minutes) if weekly_goal_minutes > 0 else available
    return min(available, goal)


def rough_allocate(
    prioritized: list[SubjectWithPriority],
    target_minutes: int,
    *,
    config: EngineConfig,
) -> list[int]:
    """Share ``target_minutes`` by score, aligned with ``prioritized`` order."""
    total_score = sum(item.score for item in prioritized)
    if total_score <= 0 or target_minutes <= 0:
        return [0 for _ in prioritized]

    suggestions: list[int] = []
    for item in prioritized:
        suggested = round_half_up(item.score / total_score * target_minutes)
        if suggested > 0:
            suggested = max(config.min_study_block, snap_to_step(suggested, config.allocation_step_minutes))
        suggestions.append(max(0, suggested))
    return suggestions


def correct_overshoot(
    suggestions: list[int],
    target_minutes: int,
    *,
    config: EngineConfig,
    subject_ids: list[str] | None = None,
    decision_trace: DecisionTraceCollector | None = None,
) -> list[int]:
    """Claw back minutes until the total fits ``target_minutes``.

    ``suggestions`` must be ordered highest priority first; reductions walk
    the list backwards. Returns a new list.
    """
    adjusted = list(suggestions)
    ids = subject_ids if subject_ids is not None else [str(idx) for idx in range(len(adjusted))]
    step = config.allocation_step_minutes
    floor = config.min_study_block
    target = max(0, target_minutes)

    total = sum(adjusted)
    passes = 0
    while total > target and passes < len(adjusted) * 2:
        for idx in range(len(adjusted) - 1, -1, -1):
            current = adjusted[idx]
            if current <= 0:
                continue
            overshoot = total - target
            reduction = step
            if current - reduction < floor:
                reduction = current - floor
            if reduction <= 0:
                reduction = current
            reduction = max(0, min(reduction, current, overshoot))
            if reduction <= 0:
                continue

            adjusted[idx] = current - reduction
            total -= reduction
            if decision_trace is not None:
                decision_trace.record(
                    phase="overshoot_correction",
                    subject_id=ids[idx],
                    minutes_before=current,
                    minutes_after=adjusted[idx],
                    applied_rules=["RULE_OVERSHOOT_STEP", "RULE_LOWEST_PRIORITY_FIRST"],
                    tradeoff_note=f"Pass {passes + 1}: reduced by {reduction} min, overshoot was {overshoot} min.",
                )
            if total <= target:
                break
        passes += 1

    if total > target:
        overshoot = total - target
        for idx in range(len(adjusted) - 1, -1, -1):
            if overshoot <= 0:
                break
            current = adjusted[idx]
            if current <= 0:
                continue
            reduction = min(current, overshoot)
            adjusted[idx] = current - reduction
            overshoot -= reduction
            if decision_trace is not None:
                decision_trace.record(
                    phase="overshoot_cleanup",
                    subject_id=ids[idx],
                    minutes_before=current,
                    minutes_after=adjusted[idx],
                    applied_rules=["RULE_OVERSHOOT_CLEANUP", "RULE_LOWEST_PRIORITY_FIRST"],
                    tradeoff_note="Residual overshoot removed without the minimum block floor.",
                )

    return adjusted


def allocate_subjects(
    subjects: Iterable[Subject | dict[str, Any]],
    *,
    total_available_minutes: float,
    weekly_goal_minutes: float,
    reference_day: str | date,
    config: EngineConfig | None = None,
    decision_trace: DecisionTraceCollector | None = None,
) -> list[Subject]:
    """Populate ``allocated_minutes``/``suggested_minutes`` for every subject.

    Returns new ``Subject`` objects in the caller's order; inputs are untouched.
    """
    items = _coerce_subjects(subjects)
    if not items:
        return []

    cfg = config or EngineConfig()
    prioritized = prioritize_subjects(items, reference_day)
    target = compute_target_minutes(total_available_minutes, weekly_goal_minutes)
    rough = rough_allocate(prioritized, target, config=cfg)
    ids = [item.subject.id for item in prioritized]

    if decision_trace is not None:
        total_score = sum(item.score for item in prioritized)
        for item, minutes in zip(prioritized, rough):
            rules = ["RULE_PRIORITY_SCORE", "RULE_PROPORTIONAL_SHARE"]
            note = f"Score {item.score}/{total_score} of {target} min target."
            if target <= 0:
                rules = ["RULE_PRIORITY_SCORE", "RULE_ZERO_TARGET"]
                note = "No target minutes available: allocation is zero."
            decision_trace.record(
                phase="rough_allocation",
                subject_id=item.subject.id,
                minutes_before=0,
                minutes_after=minutes,
                applied_rules=rules,
                tradeoff_note=note,
                score=float(item.score),
            )

    final = correct_overshoot(rough, target, config=cfg, subject_ids=ids, decision_trace=decision_trace)
    minutes_by_position = {item.position: minutes for item, minutes in zip(prioritized, final)}

    return [
        replace(
            subject,
            suggested_minutes=minutes_by_position[position],
            allocated_minutes=minutes_by_position[position],
        )
        for position, subject in enumerate(items)
    ]


def override_allocation(
    subjects: Iterable[Subject],
    subject_id: str,
    minutes: float,
    *,
    config: EngineConfig | None = None,
) -> list[Subject]:
    """Manually set one subject's allocation, keeping its suggestion.

    Minutes snap to the allocation step and never go below zero.
    """
    cfg = config or EngineConfig()
    items = list(subjects)
    if not any(subject.id == subject_id for subject in items):
        raise KeyError(subject_id)

    snapped = max(0, snap_to_step(minutes, cfg.allocation_step_minutes))
    return [
        replace(subject, allocated_minutes=snapped) if subject.id == subject_id else subject
        for subject in items
    ]
