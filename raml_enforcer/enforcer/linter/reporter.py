"""Console rendering of lint results."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from enforcer.linter.models import Issue, IssueSeverity
from enforcer.options import LintOptions

SEVERITY_STYLE = {
    IssueSeverity.violation: "red",
    IssueSeverity.warning: "yellow",
}


def _start_case(name: str) -> str:
    return " ".join(word.capitalize() for word in name.split("_"))


class Reporter:
    """Prints one line per issue, in the order the issues were found."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def _line(self, text: Text) -> None:
        self._console.print(text, soft_wrap=True, highlight=False)

    def report_parameters(self, options: LintOptions) -> None:
        self._line(Text("parameters:", style="bold"))
        for name, value in options.model_dump().items():
            if isinstance(value, (set, frozenset, list, tuple)):
                value = ",".join(str(v) for v in sorted(value))
            self._line(Text.assemble(
                "  ", (f"{_start_case(name)}: ", "white"), (str(value), "magenta"),
            ))
        self._line(Text("report:", style="bold"))

    def report(self, file: str, issues: Iterable[Issue]) -> None:
        """Print the issues of one file, or a single VALID line when there are none."""
        if not self.report_issues(issues):
            self._line(Text.assemble("  ", (f"[{file}]", "white"), " ", ("VALID", "green")))

    def report_issues(self, issues: Iterable[Issue]) -> int:
        printed = 0
        for issue in issues:
            style = SEVERITY_STYLE[issue.severity]
            self._line(Text.assemble(
                "  ",
                (f"[{issue.source}]", "white"),
                " ",
                (issue.severity.label, style),
                " ",
                (issue.message, style),
            ))
            printed += 1
        return printed

    def report_error(self, message: str) -> None:
        self._line(Text(message, style="bold red"))

    def report_exit_code(self, exit_code: int) -> None:
        self._line(Text(f"Exiting with code {exit_code}", style="bold"))
