"""Weekly plan metrics collector."""

from __future__ import annotations

from collections import Counter, defaultdict
from statistics import mean, pstdev
from typing import Any


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _confidence_level(score: float) -> str:
    if score >= 0.75:
        return "high"
    if score >= 0.55:
        return "medium"
    return "low"


def collect_metrics(result: dict[str, Any]) -> dict[str, Any]:
    """Compute normalized plan metrics with ratios clamped in [0,1]."""
    summary = result.get("plan_summary", {}) if isinstance(result.get("plan_summary"), dict) else {}
    schedule = [item for item in result.get("week_schedule", []) if isinstance(item, dict)]
    subjects = [item for item in result.get("subjects", []) if isinstance(item, dict)]
    tasks = [item for item in result.get("task_pool", []) if isinstance(item, dict)]

    available = max(0, int(summary.get("total_available_minutes", 0) or 0))
    target = max(0, int(summary.get("target_minutes", 0) or 0))
    allocated = sum(max(0, int(s.get("allocated_minutes", 0) or 0)) for s in subjects)

    task_minutes_by_subject: dict[str, int] = defaultdict(int)
    for task in tasks:
        task_minutes_by_subject[str(task.get("subject_id", ""))] += max(0, int(task.get("duration", 0) or 0))
    task_minutes = sum(task_minutes_by_subject.values())

    free_by_day: list[int] = []
    slot_sizes: list[int] = []
    fixed_blocks = 0
    for day in schedule:
        slots = day.get("available_slots", [])
        sizes = [max(0, int(slot.get("minutes", 0) or 0)) for slot in slots if isinstance(slot, dict)]
        slot_sizes.extend(sizes)
        free_by_day.append(sum(sizes))
        fixed_blocks += len(day.get("fixed_events", []))

    utilization = _clamp01(allocated / available) if available else 0.0
    target_coverage = _clamp01(allocated / target) if target else 1.0
    packing_efficiency = _clamp01(task_minutes / allocated) if allocated else 1.0

    avg_free = mean(free_by_day) if free_by_day else 0.0
    cv = (pstdev(free_by_day) / max(1.0, avg_free)) if free_by_day else 0.0
    balance_score = _clamp01(1.0 - min(1.0, cv))

    shares = [int(s.get("allocated_minutes", 0) or 0) / allocated for s in subjects] if allocated else []
    subject_concentration = max(shares) if shares else 0.0
    concentration_score = _clamp01(1.0 - subject_concentration) if len(shares) > 1 else 1.0

    largest_slot = max(slot_sizes) if slot_sizes else 0
    placeable = [task for task in tasks if int(task.get("duration", 0) or 0) <= largest_slot]
    placeability = _clamp01(len(placeable) / len(tasks)) if tasks else 1.0

    confidence_score = _clamp01(
        (0.35 * target_coverage)
        + (0.25 * placeability)
        + (0.20 * packing_efficiency)
        + (0.10 * balance_score)
        + (0.10 * concentration_score)
    )

    return {
        "total_available_minutes": available,
        "total_allocated_minutes": allocated,
        "total_task_minutes": task_minutes,
        "utilization": utilization,
        "target_coverage": target_coverage,
        "packing_efficiency": packing_efficiency,
        "free_days": sum(1 for minutes in free_by_day if minutes == 0),
        "slot_count": len(slot_sizes),
        "largest_slot_minutes": largest_slot,
        "fixed_block_count": fixed_blocks,
        "cv": _clamp01(cv),
        "balance_score": balance_score,
        "subject_concentration": _clamp01(subject_concentration),
        "concentration_score": concentration_score,
        "placeability": placeability,
        "tasks_by_type": dict(sorted(Counter(str(t.get("task_type", "")) for t in tasks).items())),
        "task_minutes_by_subject": dict(sorted(task_minutes_by_subject.items())),
        "confidence_score": confidence_score,
        "confidence_level": _confidence_level(confidence_score),
    }
