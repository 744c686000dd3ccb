"""Command line entrypoint -- raml-enforcer."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console

from enforcer import __version__
from enforcer.document.base import DocumentParser, SchemaWriter
from enforcer.document.parser import RamlParser
from enforcer.errors import LintAbortedError, OptionsError
from enforcer.export.writer import FileSchemaWriter
from enforcer.linter.aggregator import aggregate, decide_exit_code
from enforcer.linter.engine import lint_file
from enforcer.linter.models import LintSummary
from enforcer.linter.reporter import Reporter
from enforcer.options import LintOptions, load_options

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="raml-enforcer",
    help="Lint RAML API contracts for structural validity and authoring quality.",
    add_completion=False,
    pretty_exceptions_enable=False,
)


def _configure_logging() -> None:
    log_level = logging.DEBUG if os.environ.get("ENFORCER_DEV_MODE") else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"raml-enforcer {__version__}")
        raise typer.Exit()


async def run(
    files: list[str],
    options: LintOptions,
    reporter: Reporter,
    parser: DocumentParser | None = None,
    writer: SchemaWriter | None = None,
) -> int:
    """Lint ``files`` one after another and return the process exit code."""
    if parser is None:
        parser = RamlParser(warn_old_version=options.warn_old_version)
    if writer is None:
        writer = FileSchemaWriter()

    reporter.report_parameters(options)
    totals = LintSummary()
    for file_uri in files:
        try:
            outcome = await lint_file(file_uri, parser, writer, options)
        except LintAbortedError as e:
            result = aggregate(e.outcome.issues, e.outcome.file, options)
            reporter.report_issues(result.issues)
            reporter.report_error(str(e))
            reporter.report_exit_code(1)
            return 1

        result = aggregate(outcome.issues, outcome.file, options)
        reporter.report(outcome.file, result.issues)
        totals = totals + result.summary

    exit_code = decide_exit_code(totals, options)
    logger.info(
        "Linted %d files: %d violations, %d warnings",
        len(files), totals.violation_count, totals.warning_count,
    )
    reporter.report_exit_code(exit_code)
    return exit_code


@app.command()
def lint(
    ctx: typer.Context,
    files: list[str] | None = typer.Argument(
        None, help="RAML files to lint", show_default=False,
    ),
    color: bool = typer.Option(True, "--color/--no-color", help="Use color in output"),
    includes: bool | None = typer.Option(
        None, "--includes/--no-includes", help="Report issues found in included files",
    ),
    warnings: bool | None = typer.Option(
        None, "--warnings/--no-warnings", help="Report warnings",
    ),
    errors: bool | None = typer.Option(
        None, "--errors/--no-errors", help="Report errors",
    ),
    throw_on_warnings: bool | None = typer.Option(
        None, "--throw-on-warnings/--no-throw-on-warnings",
        help="Exit with code 1 when warnings occur",
    ),
    throw_on_errors: bool | None = typer.Option(
        None, "--throw-on-errors/--no-throw-on-errors",
        help="Exit with code 1 when errors occur",
    ),
    warn_old_raml_version: bool | None = typer.Option(
        None, "--warn-old-raml-version/--no-warn-old-raml-version",
        help="Warn about documents written in RAML 0.8",
    ),
    options_file: Path | None = typer.Option(
        None, "--options", help="JSON file with default lint options",
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Lint each FILE and exit with 1 if the severity policy fails."""
    if not files:
        typer.echo(ctx.get_help())
        raise typer.Exit(1)

    _configure_logging()
    console = Console(no_color=not color, highlight=False)
    try:
        options = load_options(
            {
                "report_includes": includes,
                "report_warnings": warnings,
                "report_errors": errors,
                "throw_on_warnings": throw_on_warnings,
                "throw_on_errors": throw_on_errors,
                "warn_old_version": warn_old_raml_version,
            },
            options_file,
        )
    except OptionsError as e:
        Reporter(console).report_error(str(e))
        raise typer.Exit(1) from e

    exit_code = asyncio.run(run(files, options, Reporter(console)))
    raise typer.Exit(exit_code)


def main() -> None:
    app()
