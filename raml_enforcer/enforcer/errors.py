"""Exceptions raised by the enforcer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enforcer.linter.models import SourceLocation, ValidationOutcome


class EnforcerError(Exception):
    """Base class for all enforcer failures."""


class DocumentParseError(EnforcerError):
    """The parser could not produce a document (malformed source, missing include)."""

    def __init__(self, message: str, location: SourceLocation) -> None:
        self.message = message
        self.location = location
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


class SchemaExportError(EnforcerError):
    """Writing an extracted payload schema to disk failed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Cannot write schema {self.path}: {self.reason}"


class LintAbortedError(EnforcerError):
    """Linting a file stopped on a fatal error.

    ``outcome`` holds the issues found before the failure so they can
    still be reported.
    """

    def __init__(self, outcome: ValidationOutcome, reason: str) -> None:
        self.outcome = outcome
        self.reason = reason
        super().__init__(f"Linting {outcome.file} aborted: {reason}")


class OptionsError(EnforcerError):
    """The options file is unreadable or holds invalid values."""
