"""Lint data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class IssueSeverity(str, Enum):
    """Severity level for lint issues."""

    violation = "Violation"
    warning = "Warning"

    @property
    def label(self) -> str:
        """Console label used by the reporter."""
        return "ERROR" if self is IssueSeverity.violation else "WARN"


class SourceLocation(BaseModel):
    """Where a node was declared: a file, optionally with a 1-based position."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}:{self.column or 1}"


class Issue(BaseModel):
    """A single lint finding."""

    model_config = ConfigDict(frozen=True)

    source: SourceLocation
    message: str
    severity: IssueSeverity


class ValidationOutcome(BaseModel):
    """All issues found for one input file, in discovery order."""

    model_config = ConfigDict(frozen=True)

    file: str
    issues: tuple[Issue, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.issues


class LintSummary(BaseModel):
    """Issue counts by severity. Summaries add up into run totals."""

    model_config = ConfigDict(frozen=True)

    violation_count: int = 0
    warning_count: int = 0

    def __add__(self, other: LintSummary) -> LintSummary:
        return LintSummary(
            violation_count=self.violation_count + other.violation_count,
            warning_count=self.warning_count + other.warning_count,
        )


class AggregateResult(BaseModel):
    """Per-file decision produced by the severity aggregator."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    summary: LintSummary = Field(default_factory=LintSummary)
    issues: tuple[Issue, ...] = ()

    @property
    def passed(self) -> bool:
        return self.exit_code == 0
