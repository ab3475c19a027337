"""Validation models shared by request, schema and domain checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ValidationError:
    """One blocking problem, reported in the CLI error envelope."""

    code: str
    message: str
    path: str

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message, "path": self.path}


@dataclass(slots=True)
class ValidationIssue:
    """Structured diagnostic carried in ``validation_report``."""

    code: str
    message: str
    field_path: str
    suggested_fix: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "field_path": self.field_path,
        }
        if self.suggested_fix:
            payload["suggested_fix"] = self.suggested_fix
        payload.update(self.extra)
        return payload


@dataclass(slots=True)
class ValidationReport:
    """Collects errors and informational notes without stopping at the first one.

    Errors block planning. Infos record silent adjustments (defaults applied,
    clamped values, skipped events) so callers can see why the output differs
    from what they sent.
    """

    errors: list[ValidationIssue] = field(default_factory=list)
    infos: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def add_error(
        self,
        *,
        code: str,
        message: str,
        field_path: str,
        suggested_fix: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.errors.append(
            ValidationIssue(
                code=code,
                message=message,
                field_path=field_path,
                suggested_fix=suggested_fix,
                extra=extra or {},
            )
        )

    def add_info(
        self,
        *,
        code: str,
        message: str,
        field_path: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.infos.append(
            ValidationIssue(
                code=code,
                message=message,
                field_path=field_path,
                extra=extra or {},
            )
        )

    def extend(self, other: ValidationReport) -> None:
        self.errors.extend(other.errors)
        self.infos.extend(other.infos)

    def codes(self) -> list[str]:
        return [issue.code for issue in self.errors] + [issue.code for issue in self.infos]

    def to_errors(self) -> list[ValidationError]:
        return [
            ValidationError(code=issue.code, message=issue.message, path=issue.field_path)
            for issue in self.errors
        ]

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "errors": [issue.as_dict() for issue in self.errors],
            "infos": [issue.as_dict() for issue in self.infos],
        }
