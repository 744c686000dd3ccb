"""Abstract interfaces for the document parser and the schema writer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from enforcer.document.models import ApiDocument, Payload, ValidationReport


class DocumentParser(ABC):
    """Turns a file into an ApiDocument and reports its structural problems."""

    @abstractmethod
    async def parse(self, file_uri: str) -> ApiDocument:
        """Parse the document at ``file_uri`` (a path or ``file://`` URI).

        Raises DocumentParseError when no document can be produced.
        """
        ...

    @abstractmethod
    async def validate(self, document: ApiDocument) -> ValidationReport:
        """Return the grammar-level findings for a parsed document."""
        ...


class SchemaWriter(ABC):
    """Persists the JSON Schema of a payload next to its source file."""

    @abstractmethod
    async def write(self, payload: Payload, origin_file: str) -> Path:
        """Write the payload's schema and return the path written.

        Raises SchemaExportError when the file cannot be written.
        """
        ...
