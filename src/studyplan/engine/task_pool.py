"""Expand subject allocations into a pool of typed study tasks."""

from __future__ import annotations

import uuid
from typing import Callable, Iterable

from studyplan.normalization.config_resolver import EngineConfig

from .models import TASK_TYPES, Subject, Task
from .timeutils import snap_to_step

_TITLE_TEMPLATES = {
    "study": "Study: {subject} - {topic}",
    "practice": "Practice: {subject} - {topic}",
    "review": "Review: {subject} - {topic}",
}

_DESCRIPTION_TEMPLATES = {
    "study": "Focus on learning new material/concepts for {topic} in {subject}. Session: {minutes} min.",
    "practice": "Work through problems/exercises for {topic} in {subject}. Session: {minutes} min.",
    "review": "Revise notes and consolidate understanding for {topic} in {subject}. Session: {minutes} min.",
}


def _default_id() -> str:
    return str(uuid.uuid4())


def choose_block_duration(remaining: int, task_type: str, config: EngineConfig) -> int:
    """Size the next block for ``task_type`` out of ``remaining`` minutes.

    Returns 0 when nothing more can be emitted.
    """
    min_block = config.min_study_block
    step = config.allocation_step_minutes
    preferred = config.preferred_duration(task_type)

    if remaining >= preferred + min_block / 2:
        duration = preferred
    elif remaining >= min_block:
        duration = max(min_block, snap_to_step(remaining, step))
    else:
        # Final tail, possibly not step-aligned.
        duration = remaining
    duration = min(duration, remaining)
    if duration <= 0:
        return 0

    if duration >= min_block:
        duration = min(max(min_block, snap_to_step(duration, step)), remaining)
    return max(0, duration)


def _subject_tasks(
    subject: Subject,
    color: str,
    config: EngineConfig,
    id_factory: Callable[[], str],
) -> list[Task]:
    tasks: list[Task] = []
    remaining = int(subject.allocated_minutes)
    topic_counter = 1
    type_index = 0

    while remaining > 0:
        task_type = TASK_TYPES[type_index % len(TASK_TYPES)]
        duration = choose_block_duration(remaining, task_type, config)
        if duration <= 0:
            break

        topic = f"Topic {topic_counter}"
        tasks.append(
            Task(
                id=id_factory(),
                subject_id=subject.id,
                subject_name=subject.name,
                subject_color=color,
                title=_TITLE_TEMPLATES[task_type].format(subject=subject.name, topic=topic),
                description=_DESCRIPTION_TEMPLATES[task_type].format(
                    subject=subject.name, topic=topic, minutes=duration
                ),
                duration=duration,
                task_type=task_type,
                is_scheduled=False,
            )
        )
        if task_type == "review":
            topic_counter += 1

        remaining -= duration
        type_index += 1

    return tasks


def generate_task_pool(
    subjects: Iterable[Subject],
    *,
    config: EngineConfig | None = None,
    id_factory: Callable[[], str] | None = None,
) -> list[Task]:
    """Build the task pool, sorted by subject name then task title.

    Colors are assigned by each subject's position in ``subjects``, cycling
    through the configured palette.
    """
    cfg = config or EngineConfig()
    make_id = id_factory or _default_id
    palette = cfg.subject_colors

    pool: list[Task] = []
    for position, subject in enumerate(subjects):
        if subject.allocated_minutes <= 0:
            continue
        color = palette[position % len(palette)]
        pool.extend(_subject_tasks(subject, color, cfg, make_id))

    return sorted(pool, key=lambda task: (task.subject_name, task.title))
