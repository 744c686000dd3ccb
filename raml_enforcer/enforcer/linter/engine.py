"""Lint pipeline: parse, structural validation, then the rule walk."""

from __future__ import annotations

import logging

from enforcer.document.base import DocumentParser, SchemaWriter
from enforcer.document.models import StructuralResult
from enforcer.document.parser import file_path_from_uri
from enforcer.errors import DocumentParseError, LintAbortedError, SchemaExportError
from enforcer.linter.models import Issue, IssueSeverity, SourceLocation, ValidationOutcome
from enforcer.linter.walker import TreeWalker
from enforcer.options import LintOptions

logger = logging.getLogger(__name__)


def _structural_issue(result: StructuralResult) -> Issue:
    start = result.position.start
    return Issue(
        source=SourceLocation(file=result.location, line=start.line, column=start.column),
        message=result.message,
        severity=result.level,
    )


def _parse_failure(error: DocumentParseError, file: str) -> Issue:
    # A failure inside an included file is still a failure of this file.
    if error.location.file == file:
        return Issue(source=error.location, message=error.message, severity=IssueSeverity.violation)
    return Issue(
        source=SourceLocation(file=file),
        message=f"{error.location}: {error.message}",
        severity=IssueSeverity.violation,
    )


async def lint_file(
    file_uri: str,
    parser: DocumentParser,
    writer: SchemaWriter,
    options: LintOptions,
) -> ValidationOutcome:
    """Run the full lint pipeline on one file.

    Order: 1. parse → 2. structural validation → 3. rule walk.
    A parse failure yields a single violation. The rule walk only runs when
    structural validation found no violation.
    """
    file = str(file_path_from_uri(file_uri))

    try:
        document = await parser.parse(file_uri)
    except DocumentParseError as e:
        logger.info("Parse failed for %s: %s", file, e)
        return ValidationOutcome(file=file, issues=(_parse_failure(e, file),))

    report = await parser.validate(document)
    issues = [_structural_issue(r) for r in report.results]
    if not report.conforms:
        logger.info("%s has structural violations, skipping quality rules", file)
        return ValidationOutcome(file=file, issues=tuple(issues))

    walker = TreeWalker(writer, document.file, options.no_body_status_codes)
    try:
        async for issue in walker.walk_document(document):
            issues.append(issue)
    except SchemaExportError as e:
        logger.error("Schema export failed for %s: %s", file, e)
        raise LintAbortedError(ValidationOutcome(file=file, issues=tuple(issues)), str(e)) from e

    logger.info("Linted %s: %d issues", file, len(issues))
    return ValidationOutcome(file=file, issues=tuple(issues))
