"""Flexible custom fields: per-model schemas and typed, translatable values."""

__version__ = "1.0.0"
