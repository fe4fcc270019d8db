"""Structured logging with sensitive-argument redaction."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

from ..core.exceptions import ConfigurationError
from ..masking.log_redactor import LogRedactor, RedactingFilter, RedactingProcessor
from .config import LoggingConfig

_HANDLER_NAME = "fieldcloak"


def add_timestamp(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_level(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add log level to event dict."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(
    config: LoggingConfig | None = None, redactor: LogRedactor | None = None
) -> logging.Handler:
    """Configure structlog on top of stdlib logging.

    When ``config.redact_arguments`` is set, structlog events pass through a
    ``RedactingProcessor`` before positional arguments are formatted, and the
    installed root handler carries a ``RedactingFilter`` for plain stdlib
    records. Returns the installed handler.
    """
    if config is None:
        config = LoggingConfig.from_env()
    if redactor is None:
        redactor = LogRedactor()
    if config.output == "file" and not config.file_path:
        raise ConfigurationError("File output requires file_path")

    processors_list: list[Any] = [
        structlog.stdlib.filter_by_level,
        add_timestamp,
        add_level,
        structlog.stdlib.add_logger_name,
    ]
    if config.redact_arguments:
        processors_list.append(RedactingProcessor(redactor))
    processors_list.extend(
        [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]
    )

    if config.format == "json":
        processors_list.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors_list.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors_list,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if config.output == "file":
        handler: logging.Handler = logging.FileHandler(config.file_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    if config.redact_arguments:
        handler.addFilter(RedactingFilter(redactor))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
            existing.close()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    return handler


def install_redaction(
    target: logging.Logger | None = None, redactor: LogRedactor | None = None
) -> RedactingFilter:
    """Attach a ``RedactingFilter`` to every handler of ``target`` (root by default)."""
    target = target or logging.getLogger()
    log_filter = RedactingFilter(redactor)
    for handler in target.handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(log_filter)
    return log_filter


def get_logger(name: str) -> Any:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)
