"""Logging configuration for applications using FieldCloak."""

from .config import LoggingConfig
from .logging import configure_logging, get_logger, install_redaction

__all__ = ["LoggingConfig", "configure_logging", "get_logger", "install_redaction"]
