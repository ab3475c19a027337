"""Weekly study planning engine."""

from .allocator import allocate_subjects, compute_target_minutes, correct_overshoot, override_allocation, rough_allocate
from .intervals import IntervalList
from .models import (
    AvailabilityCalculation,
    DaySchedule,
    FixedEvent,
    FixedEventBlock,
    Subject,
    SubjectWithPriority,
    Task,
    TimeSlot,
)
from .runner import run_planner
from .scoring import compute_priority, deterministic_tie_breaker_key, prioritize_subjects
from .slot_builder import build_week_schedule, compute_availability
from .task_pool import generate_task_pool

__all__ = [
    "AvailabilityCalculation",
    "DaySchedule",
    "FixedEvent",
    "FixedEventBlock",
    "IntervalList",
    "Subject",
    "SubjectWithPriority",
    "Task",
    "TimeSlot",
    "allocate_subjects",
    "build_week_schedule",
    "compute_availability",
    "compute_priority",
    "compute_target_minutes",
    "correct_overshoot",
    "deterministic_tie_breaker_key",
    "generate_task_pool",
    "override_allocation",
    "prioritize_subjects",
    "rough_allocate",
    "run_planner",
]
