"""Priority scoring and deterministic ordering of subjects."""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable

from .models import KNOWLEDGE_LEVELS, Subject, SubjectWithPriority
from .timeutils import start_of_week, to_date

BASE_SCORE = 1
KNOWLEDGE_GAP_WEIGHT = 2
EXAM_WEEK_DAYS = 7
EXAM_WEEK_DAILY_BONUS = 4
EXAM_FORTNIGHT_DAYS = 14
EXAM_FORTNIGHT_BONUS = 5
PAST_EXAM_PENALTY = 2


def knowledge_gap_bonus(prior_knowledge: str) -> int:
    """``None`` -> +6 ... ``Advanced`` -> +0; unknown levels add nothing."""
    if prior_knowledge not in KNOWLEDGE_LEVELS:
        return 0
    index = KNOWLEDGE_LEVELS.index(prior_knowledge)
    return (len(KNOWLEDGE_LEVELS) - 1 - index) * KNOWLEDGE_GAP_WEIGHT


def exam_proximity(exam_date: date | None, reference_day: date) -> tuple[int, float]:
    """Return ``(score_delta, days_until_exam)`` for an exam date.

    Distance is measured from the Monday of the reference week:
    - past exam: -2 and no further bonus,
    - 0..7 days: +4 per day left before the end of that window,
    - 8..14 days: flat +5,
    - further away (or no exam): nothing, distance is infinite.
    """
    if exam_date is None:
        return 0, math.inf

    days = (exam_date - start_of_week(reference_day)).days
    if days < 0:
        return -PAST_EXAM_PENALTY, math.inf
    if days <= EXAM_WEEK_DAYS:
        return (EXAM_WEEK_DAYS - days) * EXAM_WEEK_DAILY_BONUS, float(days)
    if days <= EXAM_FORTNIGHT_DAYS:
        return EXAM_FORTNIGHT_BONUS, float(days)
    return 0, math.inf


def compute_priority(subject: Subject, reference_day: str | date, *, position: int = 0) -> SubjectWithPriority:
    ref_day = to_date(reference_day)
    if ref_day is None:
        raise ValueError(f"Invalid reference day: {reference_day!r}")

    score = BASE_SCORE + knowledge_gap_bonus(subject.prior_knowledge)
    delta, days_until_exam = exam_proximity(subject.exam_date, ref_day)
    score = max(BASE_SCORE, score + delta)
    return SubjectWithPriority(subject=subject, score=score, days_until_exam=days_until_exam, position=position)


def deterministic_tie_breaker_key(item: SubjectWithPriority) -> tuple[int, int]:
    """Higher score first; equal scores keep the caller's input order."""
    return (-item.score, item.position)


def prioritize_subjects(subjects: Iterable[Subject], reference_day: str | date) -> list[SubjectWithPriority]:
    """Score every subject and order them from highest to lowest priority."""
    scored = [
        compute_priority(subject, reference_day, position=position)
        for position, subject in enumerate(subjects)
    ]
    return sorted(scored, key=deterministic_tie_breaker_key)
