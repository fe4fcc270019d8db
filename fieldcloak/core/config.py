"""Runtime redaction configuration from environment variables.

Environment Variables:
    FIELDCLOAK_PRINCIPAL_KEY: Serialization-context key holding the principal
    FIELDCLOAK_LOG_REDACTION: Enable log argument redaction (true|false)
    FIELDCLOAK_MASKED_OBJECT_TEMPLATE: Placeholder logged for objects that
        cannot be copied; ``{name}`` is replaced by the class name
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_PRINCIPAL_KEY = "principal"
DEFAULT_MASKED_OBJECT_TEMPLATE = "MaskedObject({name})"


@dataclass
class RedactionConfig:
    """Runtime configuration shared by the serialization and logging redactors.

    Attributes:
        principal_context_key: Key under which the principal is looked up in a
            serialization context mapping
        log_redaction_enabled: Whether log filters/processors redact arguments
        masked_object_template: Placeholder for log arguments that cannot be
            copied for redaction
    """

    principal_context_key: str = DEFAULT_PRINCIPAL_KEY
    log_redaction_enabled: bool = True
    masked_object_template: str = DEFAULT_MASKED_OBJECT_TEMPLATE

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_principal_key()
        self._validate_template()

    def _validate_principal_key(self) -> None:
        if not isinstance(self.principal_context_key, str) or not self.principal_context_key.strip():
            logger.warning(
                f"principal_context_key must be a non-empty string, got "
                f"{self.principal_context_key!r}, using '{DEFAULT_PRINCIPAL_KEY}'"
            )
            self.principal_context_key = DEFAULT_PRINCIPAL_KEY

    def _validate_template(self) -> None:
        template = self.masked_object_template
        try:
            valid = isinstance(template, str) and bool(template.format(name="X"))
        except (IndexError, KeyError, ValueError):
            valid = False
        if not valid:
            logger.warning(
                f"Invalid masked_object_template {template!r}, "
                f"using '{DEFAULT_MASKED_OBJECT_TEMPLATE}'"
            )
            self.masked_object_template = DEFAULT_MASKED_OBJECT_TEMPLATE

    def masked_object_label(self, obj: object) -> str:
        return self.masked_object_template.format(name=type(obj).__name__)

    @classmethod
    def from_environment(cls) -> "RedactionConfig":
        """Load configuration from environment variables, falling back to defaults."""
        return cls(
            principal_context_key=cls._get_env_string(
                "FIELDCLOAK_PRINCIPAL_KEY", DEFAULT_PRINCIPAL_KEY
            ),
            log_redaction_enabled=cls._get_env_bool("FIELDCLOAK_LOG_REDACTION", True),
            masked_object_template=cls._get_env_string(
                "FIELDCLOAK_MASKED_OBJECT_TEMPLATE", DEFAULT_MASKED_OBJECT_TEMPLATE
            ),
        )

    @staticmethod
    def _get_env_string(key: str, default: str) -> str:
        value = os.environ.get(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    @staticmethod
    def _get_env_bool(key: str, default: bool) -> bool:
        value = os.environ.get(key)
        if value is None:
            return default

        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on", "enabled"}:
            return True
        if normalized in {"false", "0", "no", "off", "disabled"}:
            return False

        logger.warning(f"Invalid boolean value for {key}: '{value}', using {default}")
        return default


_config: Optional[RedactionConfig] = None
_config_lock = threading.Lock()


def get_config() -> RedactionConfig:
    """Process-wide configuration, loaded from the environment on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = RedactionConfig.from_environment()
    return _config


def set_config(config: RedactionConfig) -> None:
    global _config
    with _config_lock:
        _config = config


def reset_config() -> None:
    """Forget the process-wide configuration so the next access reloads it."""
    global _config
    with _config_lock:
        _config = None
