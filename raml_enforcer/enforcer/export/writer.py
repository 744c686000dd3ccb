"""Payload schema export to ``<dirname(file)>/schemas/``."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from urllib.parse import unquote

from enforcer.document.base import SchemaWriter
from enforcer.document.models import Payload
from enforcer.errors import SchemaExportError

logger = logging.getLogger(__name__)

SCHEMA_DIR = "schemas"
SCHEMA_SUFFIX = ".schema"


def schema_file_name(identifier: str) -> str:
    """Decode a payload identifier into a flat ``.schema`` file name."""
    name = unquote(identifier)
    for separator in {"/", "\\", os.sep}:
        name = name.replace(separator, "_")
    return name.strip("_") + SCHEMA_SUFFIX


def get_schema_dir(origin_file: str) -> Path:
    """Return (and create) the schema directory next to ``origin_file``."""
    schema_dir = Path(origin_file).parent / SCHEMA_DIR
    schema_dir.mkdir(parents=True, exist_ok=True)
    return schema_dir


def render_schema(payload: Payload) -> str:
    return json.dumps(payload.json_schema, indent=2, ensure_ascii=False) + "\n"


class FileSchemaWriter(SchemaWriter):
    """Writes payload schemas as JSON, overwriting earlier exports."""

    async def write(self, payload: Payload, origin_file: str) -> Path:
        return await asyncio.to_thread(self._write, payload, origin_file)

    def _write(self, payload: Payload, origin_file: str) -> Path:
        target = Path(origin_file).parent / SCHEMA_DIR / schema_file_name(payload.identifier)
        try:
            get_schema_dir(origin_file)
            target.write_text(render_schema(payload), encoding="utf-8")
        except OSError as e:
            raise SchemaExportError(str(target), e.strerror or str(e)) from e
        logger.debug("Schema written: %s", target)
        return target
