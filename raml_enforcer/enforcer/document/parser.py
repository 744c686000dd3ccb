"""RAML document loading using ruamel.yaml.

This is not a RAML grammar. It reads the parts of a RAML document the
linter needs (title, description, resources, methods, bodies, responses),
keeps the source position of each node, resolves ``!include`` and records
a small set of structural problems for ``validate`` to report.
"""

from __future__ import annotations

import asyncio
import logging
import re
from io import StringIO
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import TaggedScalar

from enforcer.document.base import DocumentParser
from enforcer.document.models import (
    ApiDocument,
    EndPoint,
    Operation,
    Payload,
    Point,
    Request,
    Response,
    Span,
    StructuralResult,
    ValidationReport,
)
from enforcer.document.schema import SchemaConversionError, SchemaConverter
from enforcer.errors import DocumentParseError
from enforcer.linter.models import IssueSeverity, SourceLocation

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^#%RAML\s+(\d+\.\d+)")
SUPPORTED_VERSION = "1.0"
OLD_VERSIONS = {"0.8"}

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace", "connect")
YAML_SUFFIXES = {".raml", ".yaml", ".yml"}
DEFAULT_MEDIA_TYPE = "application/json"


def file_path_from_uri(file_uri: str) -> Path:
    """Accept a plain path or a ``file://`` URI."""
    if file_uri.startswith("file://"):
        return Path(unquote(file_uri[len("file://"):]))
    return Path(file_uri)


def payload_identifier(*segments: str) -> str:
    """Join percent-encoded segments so that '/' only separates segments."""
    return "/".join(quote(s, safe="") for s in segments)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _position(mapping: Any, key: Any) -> tuple[int | None, int | None]:
    """1-based line/column of ``key`` in a ruamel mapping, if recorded."""
    try:
        line, column = mapping.lc.key(key)
    except (AttributeError, KeyError, TypeError):
        return None, None
    return line + 1, column + 1


def _is_include(value: Any) -> bool:
    if not isinstance(value, TaggedScalar):
        return False
    tag = getattr(value.tag, "value", value.tag)
    return str(tag) == "!include"


def _is_mapping(value: Any) -> bool:
    return hasattr(value, "items") and hasattr(value, "get")


class RamlParser(DocumentParser):
    """Loads RAML files into ApiDocument trees."""

    def __init__(self, warn_old_version: bool = True) -> None:
        self._warn_old_version = warn_old_version

    async def parse(self, file_uri: str) -> ApiDocument:
        path = file_path_from_uri(file_uri)
        return await asyncio.to_thread(self._parse_file, path)

    async def validate(self, document: ApiDocument) -> ValidationReport:
        results: list[StructuralResult] = []
        version = document.raml_version
        if version is None:
            results.append(_result(
                document.file, 1, 1,
                "Missing RAML header, expected '#%RAML 1.0' on the first line",
                IssueSeverity.violation,
            ))
        elif version in OLD_VERSIONS:
            if self._warn_old_version:
                results.append(_result(
                    document.file, 1, 1,
                    f"RAML {version} is deprecated, migrate to RAML {SUPPORTED_VERSION}",
                    IssueSeverity.warning,
                ))
        elif version != SUPPORTED_VERSION:
            results.append(_result(
                document.file, 1, 1,
                f"Unsupported RAML version {version}",
                IssueSeverity.violation,
            ))

        if not document.has_title:
            results.append(_result(
                document.file, 1, 1, "API title is required", IssueSeverity.violation,
            ))

        results.extend(document.problems)
        return ValidationReport(results=results)

    def _parse_file(self, path: Path) -> ApiDocument:
        text = _read(path, SourceLocation(file=str(path)))
        match = HEADER_RE.match(text)
        root = _load_yaml(text, path)
        if root is None:
            raise DocumentParseError("Document is empty", SourceLocation(file=str(path)))
        if not _is_mapping(root):
            raise DocumentParseError("Document root must be a mapping", SourceLocation(file=str(path)))

        builder = _DocumentBuilder(path)
        document = builder.build(root, match.group(1) if match else None)
        logger.debug(
            "Parsed %s: %d root endpoints, %d structural problems",
            path, len(document.endpoints), len(document.problems),
        )
        return document


def _result(file: str, line: int | None, column: int | None, message: str,
            level: IssueSeverity) -> StructuralResult:
    return StructuralResult(
        location=file,
        position=Span(start=Point(line=line or 1, column=column or 1)),
        message=message,
        level=level,
    )


def _read(path: Path, location: SourceLocation) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentParseError(f"Cannot read {path}: {e.strerror or e}", location) from e
    except UnicodeDecodeError as e:
        raise DocumentParseError(f"Cannot decode {path} as UTF-8: {e.reason}", location) from e


def _load_yaml(text: str, path: Path) -> Any:
    yaml = YAML()
    try:
        return yaml.load(StringIO(text))
    except YAMLError as e:
        location = SourceLocation(file=str(path))
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            location = SourceLocation(file=str(path), line=mark.line + 1, column=mark.column + 1)
        problem = getattr(e, "problem", None) or str(e)
        raise DocumentParseError(str(problem), location) from e


class _DocumentBuilder:
    """Builds the read-only document tree for one root file."""

    def __init__(self, root_file: Path) -> None:
        self._root_file = root_file
        self._problems: list[StructuralResult] = []
        self._converter = SchemaConverter()
        self._media_type = DEFAULT_MEDIA_TYPE
        root = root_file.resolve()
        # Include chain leading to each loaded file, root first.
        self._chains: dict[Path, tuple[Path, ...]] = {root: (root,)}

    def build(self, root: Any, raml_version: str | None) -> ApiDocument:
        file = str(self._root_file)

        media_type = root.get("mediaType")
        if isinstance(media_type, list) and media_type:
            media_type = media_type[0]
        if media_type:
            self._media_type = str(media_type)

        self._converter = SchemaConverter(self._declared_types(root, file))

        return ApiDocument(
            file=file,
            raml_version=raml_version,
            title=_text(self._resolve(root.get("title"), file)[0]),
            has_title="title" in root,
            description=_text(self._resolve(root.get("description"), file)[0]),
            version=_text(root.get("version")) or None,
            base_uri=_text(root.get("baseUri")) or None,
            media_type=self._media_type,
            endpoints=self._endpoints(root, file, ""),
            problems=list(self._problems),
            source=SourceLocation(file=file),
        )

    def _problem(self, file: str, line: int | None, column: int | None, message: str,
                 level: IssueSeverity = IssueSeverity.violation) -> None:
        self._problems.append(_result(file, line, column, message, level))

    def _resolve(self, value: Any, file: str) -> tuple[Any, str]:
        """Follow one ``!include`` and return the content with the file it came from.

        Includes inside the loaded content are left in place, so each node is
        resolved by whoever reads it and keeps the file it was declared in.
        """
        if not _is_include(value):
            return value, file

        origin = Path(file).resolve()
        chain = self._chains.get(origin, (origin,))
        target = (origin.parent / str(value.value).strip()).resolve()
        if target in chain:
            raise DocumentParseError(f"Circular include of {target}", SourceLocation(file=file))
        included = str(target)
        text = _read(target, SourceLocation(file=file))
        if target.suffix.lower() not in YAML_SUFFIXES:
            return text, included

        self._chains[target] = chain + (target,)
        return _load_yaml(text, target), included

    def _inline(self, value: Any, file: str) -> Any:
        """Resolve includes nested anywhere inside a type declaration."""
        if _is_include(value):
            content, included = self._resolve(value, file)
            return self._inline(content, included)
        if _is_mapping(value):
            for key in list(value.keys()):
                value[key] = self._inline(value[key], file)
        elif isinstance(value, list):
            for index, item in enumerate(value):
                value[index] = self._inline(item, file)
        return value

    def _declared_types(self, root: Any, file: str) -> dict[str, Any]:
        declared: dict[str, Any] = {}
        for key in ("schemas", "types"):
            section, section_file = self._resolve(root.get(key), file)
            if section is None:
                continue
            # RAML 0.8 declares schemas as a list of single-entry maps.
            entries = section if isinstance(section, list) else [section]
            for entry in entries:
                if not _is_mapping(entry):
                    continue
                for name, declaration in entry.items():
                    declared[str(name)] = self._inline(declaration, section_file)
        return declared

    def _endpoints(self, mapping: Any, file: str, parent_path: str) -> list[EndPoint]:
        endpoints: list[EndPoint] = []
        for key, value in mapping.items():
            segment = str(key)
            if not segment.startswith("/"):
                continue
            line, column = _position(mapping, key)
            body, body_file = self._resolve(value, file)
            endpoints.append(self._endpoint(
                segment, body, body_file,
                SourceLocation(file=file, line=line, column=column),
                parent_path + segment,
            ))
        return endpoints

    def _endpoint(self, segment: str, body: Any, file: str, source: SourceLocation,
                  full_path: str) -> EndPoint:
        if body is None:
            return EndPoint(path=segment, source=source)
        if not _is_mapping(body):
            self._problem(source.file, source.line, source.column,
                          f"Resource {full_path} must be a mapping")
            return EndPoint(path=segment, source=source)

        operations: list[Operation] = []
        for key, value in body.items():
            method = str(key).lower()
            if method not in HTTP_METHODS:
                continue
            line, column = _position(body, key)
            op_body, op_file = self._resolve(value, file)
            operations.append(self._operation(
                method, op_body, op_file,
                SourceLocation(file=file, line=line, column=column),
                full_path,
            ))

        return EndPoint(
            path=segment,
            description=_text(self._resolve(body.get("description"), file)[0]),
            endpoints=self._endpoints(body, file, full_path),
            operations=operations,
            source=source,
        )

    def _operation(self, method: str, body: Any, file: str, source: SourceLocation,
                   full_path: str) -> Operation:
        if body is None:
            return Operation(method=method, source=source)
        if not _is_mapping(body):
            self._problem(source.file, source.line, source.column,
                          f"Method {method} of {full_path} must be a mapping")
            return Operation(method=method, source=source)

        request = None
        if "body" in body:
            request_body, request_file = self._resolve(body["body"], file)
            line, column = _position(body, "body")
            request = Request(payloads=self._payloads(
                request_body, request_file,
                SourceLocation(file=file, line=line, column=column),
                (full_path, method, "request"),
            ))

        responses: list[Response] = []
        raw_responses, responses_file = self._resolve(body.get("responses"), file)
        if _is_mapping(raw_responses):
            for code, value in raw_responses.items():
                line, column = _position(raw_responses, code)
                response_source = SourceLocation(file=responses_file, line=line, column=column)
                status = _status_code(code)
                if status is None:
                    self._problem(responses_file, line, column,
                                  f"Invalid status code '{code}' on {method} {full_path}")
                    continue
                response_body, response_file = self._resolve(value, responses_file)
                responses.append(self._response(
                    status, response_body, response_file, response_source, full_path, method,
                ))

        return Operation(
            method=method,
            description=_text(self._resolve(body.get("description"), file)[0]),
            request=request,
            responses=responses,
            source=source,
        )

    def _response(self, status: int, body: Any, file: str, source: SourceLocation,
                  full_path: str, method: str) -> Response:
        if not _is_mapping(body):
            return Response(status_code=status, source=source)

        payloads: list[Payload] = []
        if "body" in body:
            payload_body, payload_file = self._resolve(body["body"], file)
            line, column = _position(body, "body")
            payloads = self._payloads(
                payload_body, payload_file,
                SourceLocation(file=file, line=line, column=column),
                (full_path, method, str(status)),
            )
        return Response(
            status_code=status,
            description=_text(self._resolve(body.get("description"), file)[0]),
            payloads=payloads,
            source=source,
        )

    def _payloads(self, body: Any, file: str, source: SourceLocation,
                  prefix: tuple[str, ...]) -> list[Payload]:
        if body is None:
            return []
        if _is_mapping(body) and any("/" in str(k) for k in body.keys()):
            payloads = []
            for media_type, declaration in body.items():
                line, column = _position(body, media_type)
                payloads.append(self._payload(
                    str(media_type), declaration,
                    SourceLocation(file=file, line=line, column=column),
                    prefix,
                ))
            return payloads
        # A body declared without media types uses the API default.
        return [self._payload(self._media_type, body, source, prefix)]

    def _payload(self, media_type: str, declaration: Any, source: SourceLocation,
                 prefix: tuple[str, ...]) -> Payload:
        declaration = self._inline(declaration, source.file)
        try:
            json_schema = self._converter.to_json_schema(declaration)
        except SchemaConversionError as e:
            self._problem(source.file, source.line, source.column,
                          f"Invalid schema for {media_type} payload: {e}")
            json_schema = {}
        return Payload(
            identifier=payload_identifier(*prefix, media_type),
            media_type=media_type,
            json_schema=json_schema,
            source=source,
        )


def _status_code(code: Any) -> int | None:
    try:
        status = int(str(code).strip())
    except ValueError:
        return None
    if 100 <= status <= 599:
        return status
    return None
