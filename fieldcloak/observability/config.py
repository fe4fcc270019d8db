"""Configuration for structured logging."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.exceptions import ConfigurationError


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format (json or text)")
    output: str = Field(default="stdout", description="Log output (stdout or file)")
    file_path: str | None = Field(default=None, description="Log file path")
    redact_arguments: bool = Field(
        default=True, description="Mask sensitive fields of logged objects"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in {"json", "text"}:
            raise ValueError(f"Log format must be 'json' or 'text', got '{v}'")
        return v

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: str) -> str:
        if v not in {"stdout", "file"}:
            raise ValueError(f"Log output must be 'stdout' or 'file', got '{v}'")
        return v

    @classmethod
    def from_file(cls, config_path: Path | str) -> LoggingConfig:
        """Load the ``logging`` section of a YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}: {e}", context={"config_file": str(config_path)}
            ) from e

        section = (config_data.get("logging") or {}) if isinstance(config_data, dict) else None
        if not isinstance(section, dict):
            raise ConfigurationError(
                "The 'logging' section must be a mapping",
                context={"config_file": str(config_path)},
            )
        try:
            return cls(**section)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid logging configuration: {e}", context={"config_file": str(config_path)}
            ) from e

    @classmethod
    def from_env(cls) -> LoggingConfig:
        """Load configuration from environment variables."""
        defaults = cls()
        return cls(
            level=os.getenv("FIELDCLOAK_LOG_LEVEL", defaults.level),
            format=os.getenv("FIELDCLOAK_LOG_FORMAT", defaults.format),
            output=os.getenv("FIELDCLOAK_LOG_OUTPUT", defaults.output),
            file_path=os.getenv("FIELDCLOAK_LOG_FILE", defaults.file_path),
            redact_arguments=os.getenv("FIELDCLOAK_LOG_REDACTION", "true").lower() == "true",
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
