"""Issue model, severity aggregation and reporting."""

from enforcer.linter.aggregator import aggregate, decide_exit_code, filter_issues
from enforcer.linter.models import (
    AggregateResult,
    Issue,
    IssueSeverity,
    LintSummary,
    SourceLocation,
    ValidationOutcome,
)
from enforcer.linter.reporter import Reporter

__all__ = [
    "AggregateResult",
    "Issue",
    "IssueSeverity",
    "LintSummary",
    "Reporter",
    "SourceLocation",
    "ValidationOutcome",
    "aggregate",
    "decide_exit_code",
    "filter_issues",
]
