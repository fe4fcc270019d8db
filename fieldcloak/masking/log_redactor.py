"""Redaction of sensitive fields in objects passed as log arguments.

Log masking is unconditional: there is no viewer identity at write time, so no
authorization check is made. Redaction never mutates the caller's object. The
argument is shallow-copied, each sensitive field on the copy is replaced by its
masked text, and the copy is handed to the formatter so that its own
``__str__``/``__repr__`` renders masked values. Objects that cannot be copied
are replaced by a placeholder label.
"""

import copy
import logging
from collections.abc import Iterable, Mapping, MutableMapping
from decimal import Decimal
from typing import Any, Optional

from ..core.config import RedactionConfig, get_config
from ..core.discovery import FieldDiscoveryIndex, SensitiveField, get_default_index
from ..core.strategies import mask_with

logger = logging.getLogger(__name__)

# Rendered verbatim without looking for sensitive fields
LEAF_TYPES = (str, bytes, bytearray, bool, int, float, complex, Decimal)

# Set on a LogRecord once its arguments have been redacted
REDACTED_RECORD_ATTR = "_fieldcloak_redacted"


class LogRedactor:
    """Replaces log arguments carrying sensitive fields with masked copies."""

    def __init__(
        self,
        index: Optional[FieldDiscoveryIndex] = None,
        config: Optional[RedactionConfig] = None,
    ):
        self.index = index or get_default_index()
        self._config = config

    @property
    def config(self) -> RedactionConfig:
        return self._config or get_config()

    def redact_argument(self, arg: Any) -> Any:
        """Return ``arg`` itself, or a masked stand-in when it has sensitive fields."""
        if arg is None or isinstance(arg, LEAF_TYPES):
            return arg

        fields = self.index.fields_of(type(arg))
        if not fields:
            return arg
        return self._masked_copy(arg, fields)

    def redact_arguments(self, args: Any) -> Any:
        """Redact every positional argument of a log call.

        A mapping (logging's ``%(name)s`` form) yields a new dict; any other
        iterable yields a new tuple. ``None`` and empty arguments are returned
        as given.
        """
        if not args:
            return args
        if isinstance(args, Mapping):
            return {key: self.redact_argument(value) for key, value in args.items()}
        if isinstance(args, Iterable) and not isinstance(args, LEAF_TYPES):
            return tuple(self.redact_argument(arg) for arg in args)
        return self.redact_argument(args)

    def _masked_copy(self, obj: Any, fields: tuple[SensitiveField, ...]) -> Any:
        try:
            clone = copy.copy(obj)
        except Exception as e:
            logger.debug("Cannot copy %s for redaction: %s", type(obj).__name__, e)
            return self.config.masked_object_label(obj)

        if clone is obj:
            return self.config.masked_object_label(obj)

        for field in fields:
            try:
                value = field.read(obj)
            except Exception as e:
                logger.debug(
                    "Cannot read sensitive field %s.%s: %s", type(obj).__name__, field.name, e
                )
                continue

            if value is None:
                continue
            text = value if isinstance(value, str) else str(value)
            if not text:
                continue

            try:
                object.__setattr__(clone, field.name, mask_with(field.descriptor, text))
            except Exception as e:
                logger.debug(
                    "Cannot mask sensitive field %s.%s: %s", type(obj).__name__, field.name, e
                )
        return clone


class RedactingFilter(logging.Filter):
    """``logging.Filter`` that redacts ``record.args`` and non-string messages.

    Attach it to handlers (or loggers) so that records are redacted before
    ``record.getMessage()`` renders them.
    """

    def __init__(self, redactor: Optional[LogRedactor] = None, name: str = ""):
        super().__init__(name)
        self.redactor = redactor or LogRedactor()

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.redactor.config.log_redaction_enabled:
            return True
        # One record is shared by every handler it reaches; mask it once
        if getattr(record, REDACTED_RECORD_ATTR, False):
            return True

        setattr(record, REDACTED_RECORD_ATTR, True)
        if record.args:
            record.args = self.redactor.redact_arguments(record.args)
        if not isinstance(record.msg, str):
            record.msg = self.redactor.redact_argument(record.msg)
        return True


class RedactingProcessor:
    """structlog processor redacting ``positional_args`` and event dict values.

    Place it before ``PositionalArgumentsFormatter`` and the renderer.
    Keys starting with an underscore (structlog internals such as ``_record``)
    are left alone.
    """

    def __init__(self, redactor: Optional[LogRedactor] = None):
        self.redactor = redactor or LogRedactor()

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        if not self.redactor.config.log_redaction_enabled:
            return event_dict

        for key, value in list(event_dict.items()):
            if key.startswith("_"):
                continue
            if key == "positional_args":
                event_dict[key] = self.redactor.redact_arguments(value)
            else:
                event_dict[key] = self.redactor.redact_argument(value)
        return event_dict
