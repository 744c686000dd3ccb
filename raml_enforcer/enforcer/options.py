"""Lint options: defaults, an optional JSON options file, then CLI flags."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from enforcer.errors import OptionsError

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS_FILE = "validation-options.json"


class LintOptions(BaseModel):
    """Immutable run configuration, resolved once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    report_includes: bool = True
    report_warnings: bool = True
    report_errors: bool = True
    throw_on_warnings: bool = False
    throw_on_errors: bool = True
    warn_old_version: bool = True
    no_body_status_codes: frozenset[int] = Field(default_factory=lambda: frozenset({204}))


def _options_path(explicit: Path | None) -> Path:
    if explicit is not None:
        return explicit
    return Path(os.environ.get("ENFORCER_OPTIONS_PATH", DEFAULT_OPTIONS_FILE))


def _read_options_file(path: Path, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise OptionsError(f"Options file not found: {path}")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise OptionsError(f"Cannot read options file {path}: {e}") from e
    if not isinstance(data, dict):
        raise OptionsError(f"Options file {path} must contain a JSON object")
    logger.debug("Loaded options from %s", path)
    return data


def load_options(
    overrides: dict[str, bool | None] | None = None,
    options_path: Path | None = None,
) -> LintOptions:
    """Resolve options from defaults, the options file and CLI overrides.

    Overrides set to None were not given on the command line and leave the
    file or default value in place.
    """
    values = _read_options_file(_options_path(options_path), required=options_path is not None)
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    try:
        return LintOptions.model_validate(values)
    except ValidationError as e:
        raise OptionsError(f"Invalid options: {e}") from e
