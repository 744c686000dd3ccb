"""Read-only models of a parsed API document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from enforcer.linter.models import IssueSeverity, SourceLocation


class Payload(BaseModel):
    """A request or response body bound to a schema."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    media_type: str
    json_schema: dict[str, Any] = Field(default_factory=dict)
    source: SourceLocation


class Response(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    description: str = ""
    payloads: list[Payload] = Field(default_factory=list)
    source: SourceLocation


class Request(BaseModel):
    model_config = ConfigDict(frozen=True)

    payloads: list[Payload] = Field(default_factory=list)


class Operation(BaseModel):
    """An HTTP method declared on an endpoint."""

    model_config = ConfigDict(frozen=True)

    method: str
    description: str = ""
    request: Request | None = None
    responses: list[Response] = Field(default_factory=list)
    source: SourceLocation


class EndPoint(BaseModel):
    """A resource in the path hierarchy. ``path`` is relative to the parent."""

    model_config = ConfigDict(frozen=True)

    path: str
    description: str = ""
    endpoints: list[EndPoint] = Field(default_factory=list)
    operations: list[Operation] = Field(default_factory=list)
    source: SourceLocation


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class Span(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Point


class StructuralResult(BaseModel):
    """A grammar-level finding reported by the parser's validation."""

    model_config = ConfigDict(frozen=True)

    location: str
    position: Span
    message: str
    level: IssueSeverity


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    results: list[StructuralResult] = Field(default_factory=list)

    @property
    def conforms(self) -> bool:
        """True when no result is a violation."""
        return not any(r.level == IssueSeverity.violation for r in self.results)


class ApiDocument(BaseModel):
    """Root of a parsed RAML document."""

    model_config = ConfigDict(frozen=True)

    file: str
    raml_version: str | None = None
    title: str = ""
    has_title: bool = True
    description: str = ""
    version: str | None = None
    base_uri: str | None = None
    media_type: str | None = None
    endpoints: list[EndPoint] = Field(default_factory=list)
    problems: list[StructuralResult] = Field(default_factory=list)
    source: SourceLocation
