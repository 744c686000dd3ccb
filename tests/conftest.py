"""Shared test fixtures and configuration."""

import os
import sys
from pathlib import Path

# Add raml_enforcer/ to Python path so `from enforcer.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "raml_enforcer"))
# Shared builders in tests/factories.py
sys.path.insert(0, str(Path(__file__).resolve().parent))

import pytest

os.environ["ENFORCER_DEV_MODE"] = "true"


@pytest.fixture
def write_raml(tmp_path: Path):
    """Write a RAML document into tmp_path and return its path."""

    def _write(text: str, name: str = "api.raml") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text.lstrip("\n"), encoding="utf-8")
        return path

    return _write
