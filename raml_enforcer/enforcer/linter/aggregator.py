"""Severity aggregation: filter, count, decide."""

from __future__ import annotations

from collections.abc import Iterable

from enforcer.linter.models import AggregateResult, Issue, IssueSeverity, LintSummary
from enforcer.options import LintOptions


def filter_issues(issues: Iterable[Issue], file: str, options: LintOptions) -> list[Issue]:
    """Drop the issues the options say should not be reported or counted."""
    kept: list[Issue] = []
    for issue in issues:
        if not options.report_includes and issue.source.file != file:
            continue
        if not options.report_warnings and issue.severity == IssueSeverity.warning:
            continue
        if not options.report_errors and issue.severity == IssueSeverity.violation:
            continue
        kept.append(issue)
    return kept


def summarize(issues: Iterable[Issue]) -> LintSummary:
    violations = 0
    warnings = 0
    for issue in issues:
        if issue.severity == IssueSeverity.violation:
            violations += 1
        else:
            warnings += 1
    return LintSummary(violation_count=violations, warning_count=warnings)


def is_failure(summary: LintSummary, options: LintOptions) -> bool:
    fails_on_errors = summary.violation_count > 0 and options.throw_on_errors
    fails_on_warnings = summary.warning_count > 0 and options.throw_on_warnings
    return fails_on_errors or fails_on_warnings


def decide_exit_code(summary: LintSummary, options: LintOptions) -> int:
    return 1 if is_failure(summary, options) else 0


def aggregate(issues: Iterable[Issue], file: str, options: LintOptions) -> AggregateResult:
    """Filter the issues of one file, count them and decide pass/fail.

    Suppressed issues are removed before counting, so a disabled severity
    can never fail the run.
    """
    kept = filter_issues(issues, file, options)
    summary = summarize(kept)
    return AggregateResult(
        exit_code=decide_exit_code(summary, options),
        summary=summary,
        issues=tuple(kept),
    )
