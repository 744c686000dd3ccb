"""Convert RAML type declarations into JSON Schema."""

from __future__ import annotations

import json
from typing import Any

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-04/schema#"

SCALAR_TYPES: dict[str, dict[str, Any]] = {
    "string": {"type": "string"},
    "number": {"type": "number"},
    "integer": {"type": "integer"},
    "boolean": {"type": "boolean"},
    "date-only": {"type": "string", "format": "date"},
    "time-only": {"type": "string", "format": "time"},
    "datetime-only": {"type": "string", "format": "date-time"},
    "datetime": {"type": "string", "format": "date-time"},
    "file": {"type": "string"},
    "nil": {"type": "null"},
    "any": {},
    "object": {"type": "object"},
    "array": {"type": "array"},
}

# Facets that carry over to JSON Schema unchanged.
PASSTHROUGH_FACETS = (
    "description",
    "enum",
    "pattern",
    "minLength",
    "maxLength",
    "minimum",
    "maximum",
    "multipleOf",
    "minItems",
    "maxItems",
    "uniqueItems",
    "minProperties",
    "maxProperties",
    "default",
)


class SchemaConversionError(ValueError):
    """A type declaration cannot be turned into JSON Schema."""


def _plain(value: Any) -> Any:
    """Copy ruamel containers into plain dicts/lists."""
    if hasattr(value, "items"):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _split_union(expression: str) -> list[str]:
    """Split on ``|`` outside parentheses."""
    members: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(expression):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "|" and depth == 0:
            members.append(expression[start:index].strip())
            start = index + 1
    members.append(expression[start:].strip())
    return members


def _enclosed(expression: str) -> bool:
    """True when the opening parenthesis closes at the very end."""
    if not (expression.startswith("(") and expression.endswith(")")):
        return False
    depth = 0
    for index, char in enumerate(expression):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index == len(expression) - 1
    return False


class SchemaConverter:
    """Turns RAML type expressions into JSON Schema dicts.

    ``types`` holds the API-level ``types`` (or legacy ``schemas``)
    declarations that type expressions may reference by name.
    """

    def __init__(self, types: dict[str, Any] | None = None) -> None:
        self._types = types or {}

    def to_json_schema(self, declaration: Any) -> dict[str, Any]:
        """Return a standalone JSON Schema document for a payload declaration."""
        schema = self._convert(declaration, seen=frozenset())
        return {"$schema": JSON_SCHEMA_DRAFT, **schema}

    def _convert(self, declaration: Any, seen: frozenset[str]) -> dict[str, Any]:
        if declaration is None:
            return {}
        if isinstance(declaration, str):
            return self._convert_expression(declaration.strip(), seen)
        if isinstance(declaration, list):
            # Multiple inheritance: every parent must hold.
            return {"allOf": [self._convert(d, seen) for d in declaration]}
        if hasattr(declaration, "items"):
            return self._convert_mapping(declaration, seen)
        raise SchemaConversionError(f"Unsupported type declaration: {declaration!r}")

    def _convert_expression(self, expression: str, seen: frozenset[str]) -> dict[str, Any]:
        if expression.startswith("{"):
            try:
                parsed = json.loads(expression)
            except json.JSONDecodeError as e:
                raise SchemaConversionError(f"Invalid JSON schema: {e.msg}") from e
            if not isinstance(parsed, dict):
                raise SchemaConversionError("JSON schema must be an object")
            parsed.pop("$schema", None)
            return parsed
        if expression.startswith("<"):
            # XML schemas have no JSON Schema form.
            return {}
        members = _split_union(expression)
        if len(members) > 1:
            return {"anyOf": [self._convert_expression(m, seen) for m in members]}
        if expression.endswith("[]"):
            return {"type": "array", "items": self._convert_expression(expression[:-2].strip(), seen)}
        if _enclosed(expression):
            return self._convert_expression(expression[1:-1].strip(), seen)
        if expression in SCALAR_TYPES:
            return dict(SCALAR_TYPES[expression])
        if expression in self._types:
            if expression in seen:
                return {"type": "object"}
            return self._convert(self._types[expression], seen | {expression})
        raise SchemaConversionError(f"Unknown type '{expression}'")

    def _convert_mapping(self, declaration: Any, seen: frozenset[str]) -> dict[str, Any]:
        base = declaration.get("type", declaration.get("schema"))
        if base is None:
            base = "object" if "properties" in declaration else "string"
        schema = self._convert(base, seen)

        properties = declaration.get("properties")
        if properties is not None:
            schema["type"] = "object"
            props: dict[str, Any] = dict(schema.get("properties", {}))
            required: list[str] = list(schema.get("required", []))
            for raw_name, prop in properties.items():
                name = str(raw_name)
                optional = name.endswith("?")
                if optional:
                    name = name[:-1]
                if hasattr(prop, "items") and prop.get("required") is False:
                    optional = True
                props[name] = self._convert(prop, seen)
                if not optional and name not in required:
                    required.append(name)
            schema["properties"] = props
            if required:
                schema["required"] = required
            if declaration.get("additionalProperties") is False:
                schema["additionalProperties"] = False

        if "items" in declaration:
            schema["type"] = "array"
            schema["items"] = self._convert(declaration["items"], seen)

        for facet in PASSTHROUGH_FACETS:
            if facet in declaration:
                schema[facet] = _plain(declaration[facet])
        if "format" in declaration and schema.get("type") == "string":
            schema["format"] = str(declaration["format"])
        return schema
