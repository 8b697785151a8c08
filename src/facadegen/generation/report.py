"""Diagnostics and run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from facadegen.core.errors import ErrorCode, FacadeGenError


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One skipped or degraded type or member."""

    severity: Severity
    code: ErrorCode
    type_name: str
    message: str
    member_name: str | None = None

    @classmethod
    def from_error(
        cls,
        error: FacadeGenError,
        type_name: str,
        *,
        severity: Severity = Severity.ERROR,
        member_name: str | None = None,
    ) -> Diagnostic:
        return cls(
            severity=severity,
            code=error.code,
            type_name=type_name,
            message=error.message,
            member_name=member_name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "error": self.code.name,
            "type": self.type_name,
            "member": self.member_name,
            "message": self.message,
        }

    def __str__(self) -> str:
        where = self.type_name
        if self.member_name is not None:
            where = f"{where}.{self.member_name}"
        return f"{self.severity.value}: {where}: {self.message}"


@dataclass(frozen=True, slots=True)
class FacadeUnit:
    """Generated source for one type."""

    name: str
    text: str
    type_name: str = ""


@dataclass(slots=True)
class GenerationReport:
    """Outcome of one generation run, in discovery order."""

    units: list[FacadeUnit] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no type failed. Skipped types do not count as failures."""
        return not self.failed

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]
