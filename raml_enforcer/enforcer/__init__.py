"""RAML contract linter."""

__version__ = "0.1.0"
