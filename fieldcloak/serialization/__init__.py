"""Redaction at the structured-serialization boundary."""

from .redactor import SerializationRedactor, get_default_redactor, set_default_redactor

__all__ = ["SerializationRedactor", "get_default_redactor", "set_default_redactor"]
