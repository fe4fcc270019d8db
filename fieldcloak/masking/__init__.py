"""Redaction at the logging boundary."""

from .log_redactor import LEAF_TYPES, LogRedactor, RedactingFilter, RedactingProcessor

__all__ = ["LEAF_TYPES", "LogRedactor", "RedactingFilter", "RedactingProcessor"]
