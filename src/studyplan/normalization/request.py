"""Normalization for incoming request payloads."""

from __future__ import annotations

from typing import Any


def normalize_request(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a normalized copy of input request.

    Missing ``schema_version`` defaults to ``1.0`` and an absent weekly goal
    means "use all available time" (``0``).
    """
    normalized = dict(payload)
    normalized.setdefault("schema_version", "1.0")
    normalized.setdefault("weekly_goal_minutes", 0)
    if isinstance(normalized.get("week_start"), str):
        normalized["week_start"] = normalized["week_start"].strip()
    return normalized
