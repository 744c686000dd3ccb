"""Tests for the RAML document parser."""

from __future__ import annotations

from pathlib import Path

import pytest

from enforcer.document.parser import (
    RamlParser,
    file_path_from_uri,
    payload_identifier,
)
from enforcer.document.schema import JSON_SCHEMA_DRAFT
from enforcer.errors import DocumentParseError
from enforcer.linter.models import IssueSeverity, SourceLocation

USERS_API = """
#%RAML 1.0
title: Users API
description: Manages users
/Users:
  description: list users
  get:
    description: List users
    responses:
      200:
        body:
          application/json:
            type: object
            properties:
              name: string
              age?: integer
  /{id}:
    description: One user
    delete:
      description: Remove a user
      responses:
        204:
"""


class TestHelpers:
    def test_file_uri(self) -> None:
        assert file_path_from_uri("file:///tmp/api%20v1.raml") == Path("/tmp/api v1.raml")
        assert file_path_from_uri("specs/api.raml") == Path("specs/api.raml")

    def test_payload_identifier_encodes_slashes(self) -> None:
        assert payload_identifier("/users", "get", "200", "application/json") == (
            "%2Fusers/get/200/application%2Fjson"
        )


class TestParse:
    @pytest.mark.asyncio
    async def test_builds_tree(self, write_raml) -> None:
        path = write_raml(USERS_API)
        document = await RamlParser().parse(str(path))

        assert document.file == str(path)
        assert document.raml_version == "1.0"
        assert document.title == "Users API"
        assert document.description == "Manages users"
        assert document.source == SourceLocation(file=str(path))

        [users] = document.endpoints
        assert users.path == "/Users"
        assert users.description == "list users"
        assert users.source == SourceLocation(file=str(path), line=4, column=1)

        [get] = users.operations
        assert get.method == "get"
        assert get.description == "List users"
        assert get.request is None
        assert get.source.line == 6

        [ok] = get.responses
        assert ok.status_code == 200
        assert ok.source.line == 9
        [body] = ok.payloads
        assert body.media_type == "application/json"
        assert body.identifier == "%2FUsers/get/200/application%2Fjson"
        assert body.json_schema == {
            "$schema": JSON_SCHEMA_DRAFT,
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
            "required": ["name"],
        }

        [item] = users.endpoints
        assert item.path == "/{id}"
        assert item.source.line == 16
        [delete] = item.operations
        [no_content] = delete.responses
        assert no_content.status_code == 204
        assert no_content.payloads == []

    @pytest.mark.asyncio
    async def test_accepts_file_uri(self, write_raml) -> None:
        path = write_raml(USERS_API)
        document = await RamlParser().parse(path.as_uri())
        assert document.file == str(path)

    @pytest.mark.asyncio
    async def test_request_body_and_default_media_type(self, write_raml) -> None:
        path = write_raml("""
#%RAML 1.0
title: T
mediaType: application/xml
/items:
  post:
    body:
      type: string
    responses:
      201:
""")
        document = await RamlParser().parse(str(path))
        [post] = document.endpoints[0].operations
        assert post.request is not None
        [request_body] = post.request.payloads
        assert request_body.media_type == "application/xml"
        assert request_body.identifier == "%2Fitems/post/request/application%2Fxml"
        assert request_body.json_schema == {"$schema": JSON_SCHEMA_DRAFT, "type": "string"}

    @pytest.mark.asyncio
    async def test_empty_values(self, write_raml) -> None:
        path = write_raml("""
#%RAML 1.0
title:
/items:
""")
        document = await RamlParser().parse(str(path))
        assert document.title == ""
        assert document.has_title
        assert document.description == ""
        [items] = document.endpoints
        assert items.description == ""
        assert items.operations == []

    @pytest.mark.asyncio
    async def test_includes_keep_their_own_file(self, write_raml) -> None:
        write_raml("""
#%RAML 1.0 DataType
type: object
properties:
  sku: string
""", name="types/item.raml")
        resource = write_raml("""
description: Items
get:
  description: List items
  responses:
    200:
      body:
        application/json:
          type: Item[]
""", name="resources/items.raml")
        path = write_raml("""
#%RAML 1.0
title: T
description: D
types:
  Item: !include types/item.raml
/items: !include resources/items.raml
""")
        document = await RamlParser().parse(str(path))

        [items] = document.endpoints
        assert items.source == SourceLocation(file=str(path), line=6, column=1)
        assert items.description == "Items"
        [get] = items.operations
        assert get.source.file == str(resource.resolve())
        assert get.source.line == 2
        [body] = get.responses[0].payloads
        assert body.json_schema == {
            "$schema": JSON_SCHEMA_DRAFT,
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"sku": {"type": "string"}},
                "required": ["sku"],
            },
        }

    @pytest.mark.asyncio
    async def test_nested_include_keeps_innermost_file(self, write_raml) -> None:
        method = write_raml("""
description: List items
responses:
  200:
""", name="get.raml")
        resource = write_raml("""
description: Items
get: !include get.raml
""", name="items.raml")
        path = write_raml("""
#%RAML 1.0
title: T
/items: !include items.raml
""")
        document = await RamlParser().parse(str(path))

        [items] = document.endpoints
        [get] = items.operations
        assert get.source == SourceLocation(file=str(resource.resolve()), line=2, column=1)
        assert get.description == "List items"
        [ok] = get.responses
        assert ok.source == SourceLocation(file=str(method.resolve()), line=3, column=3)

    @pytest.mark.asyncio
    async def test_same_file_included_twice_is_not_circular(self, write_raml) -> None:
        write_raml("description: Shared\n", name="shared.raml")
        path = write_raml("""
#%RAML 1.0
title: T
/a: !include shared.raml
/b: !include shared.raml
""")
        document = await RamlParser().parse(str(path))
        assert [e.description for e in document.endpoints] == ["Shared", "Shared"]

    @pytest.mark.asyncio
    async def test_json_schema_include(self, write_raml) -> None:
        write_raml('{"$schema": "http://json-schema.org/draft-04/schema#", "type": "object"}',
                   name="schemas-src/user.json")
        path = write_raml("""
#%RAML 1.0
title: T
/users:
  get:
    responses:
      200:
        body:
          application/json:
            type: !include schemas-src/user.json
""")
        document = await RamlParser().parse(str(path))
        [body] = document.endpoints[0].operations[0].responses[0].payloads
        assert body.json_schema == {"$schema": JSON_SCHEMA_DRAFT, "type": "object"}


class TestParseFailures:
    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope.raml"
        with pytest.raises(DocumentParseError) as exc_info:
            await RamlParser().parse(str(missing))
        assert exc_info.value.location == SourceLocation(file=str(missing))

    @pytest.mark.asyncio
    async def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.raml"
        path.write_bytes(b"#%RAML 1.0\ntitle: caf\xe9\n")
        with pytest.raises(DocumentParseError, match="UTF-8") as exc_info:
            await RamlParser().parse(str(path))
        assert exc_info.value.location == SourceLocation(file=str(path))

    @pytest.mark.asyncio
    async def test_yaml_syntax_error_has_position(self, write_raml) -> None:
        path = write_raml("""
#%RAML 1.0
title: T
/items:
  get: [unclosed
""")
        with pytest.raises(DocumentParseError) as exc_info:
            await RamlParser().parse(str(path))
        assert exc_info.value.location.file == str(path)
        assert exc_info.value.location.line is not None

    @pytest.mark.asyncio
    async def test_missing_include(self, write_raml) -> None:
        path = write_raml("""
#%RAML 1.0
title: T
/items: !include missing.raml
""")
        with pytest.raises(DocumentParseError) as exc_info:
            await RamlParser().parse(str(path))
        assert exc_info.value.location.file == str(path)
        assert "missing.raml" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_circular_include(self, write_raml) -> None:
        write_raml("""
description: Loop
/again: !include loop.raml
""", name="loop.raml")
        path = write_raml("""
#%RAML 1.0
title: T
/loop: !include loop.raml
""")
        with pytest.raises(DocumentParseError) as exc_info:
            await RamlParser().parse(str(path))
        assert "Circular include" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_root_must_be_mapping(self, write_raml) -> None:
        path = write_raml("#%RAML 1.0\n- a\n- b\n")
        with pytest.raises(DocumentParseError, match="must be a mapping"):
            await RamlParser().parse(str(path))

    @pytest.mark.asyncio
    async def test_empty_document(self, write_raml) -> None:
        path = write_raml("#%RAML 1.0\n")
        with pytest.raises(DocumentParseError, match="empty"):
            await RamlParser().parse(str(path))


class TestValidate:
    async def _report(self, parser: RamlParser, path: Path):
        document = await parser.parse(str(path))
        return await parser.validate(document)

    @pytest.mark.asyncio
    async def test_valid_document_conforms(self, write_raml) -> None:
        report = await self._report(RamlParser(), write_raml(USERS_API))
        assert report.results == []
        assert report.conforms

    @pytest.mark.asyncio
    async def test_missing_header(self, write_raml) -> None:
        report = await self._report(RamlParser(), write_raml("title: T\n"))
        [result] = report.results
        assert result.level == IssueSeverity.violation
        assert "Missing RAML header" in result.message
        assert not report.conforms

    @pytest.mark.asyncio
    async def test_old_version_warns(self, write_raml) -> None:
        path = write_raml("#%RAML 0.8\ntitle: T\n")
        report = await self._report(RamlParser(), path)
        [result] = report.results
        assert result.level == IssueSeverity.warning
        assert result.message == "RAML 0.8 is deprecated, migrate to RAML 1.0"
        assert result.location == str(path)
        assert result.position.start.line == 1
        assert report.conforms

    @pytest.mark.asyncio
    async def test_old_version_warning_can_be_disabled(self, write_raml) -> None:
        path = write_raml("#%RAML 0.8\ntitle: T\n")
        report = await self._report(RamlParser(warn_old_version=False), path)
        assert report.results == []

    @pytest.mark.asyncio
    async def test_unsupported_version(self, write_raml) -> None:
        report = await self._report(RamlParser(), write_raml("#%RAML 2.0\ntitle: T\n"))
        assert [r.message for r in report.results] == ["Unsupported RAML version 2.0"]

    @pytest.mark.asyncio
    async def test_missing_title(self, write_raml) -> None:
        report = await self._report(RamlParser(), write_raml("#%RAML 1.0\ndescription: D\n"))
        assert [r.message for r in report.results] == ["API title is required"]

    @pytest.mark.asyncio
    async def test_invalid_status_code(self, write_raml) -> None:
        path = write_raml("""
#%RAML 1.0
title: T
/items:
  get:
    responses:
      abc:
      700:
      200:
""")
        parser = RamlParser()
        document = await parser.parse(str(path))
        assert [r.status_code for r in document.endpoints[0].operations[0].responses] == [200]
        report = await parser.validate(document)
        assert [r.message for r in report.results] == [
            "Invalid status code 'abc' on get /items",
            "Invalid status code '700' on get /items",
        ]
        assert report.results[0].position.start.line == 6

    @pytest.mark.asyncio
    async def test_invalid_inline_json_schema(self, write_raml) -> None:
        path = write_raml("""
#%RAML 1.0
title: T
/items:
  get:
    responses:
      200:
        body:
          application/json:
            type: '{"type": '
""")
        report = await self._report(RamlParser(), path)
        [result] = report.results
        assert result.level == IssueSeverity.violation
        assert result.message.startswith("Invalid schema for application/json payload")
