"""Per-field redaction at the structured-serialization boundary."""

import dataclasses
import json
import logging
import threading
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from ..core.authorization import AuthorizationOracle, Principal, PrincipalProvider, principal_from_provider
from ..core.config import RedactionConfig, get_config
from ..core.descriptor import SensitivityDescriptor
from ..core.discovery import FieldDiscoveryIndex, get_default_index
from ..core.strategies import mask_with

logger = logging.getLogger(__name__)

_LEAF_TYPES = (str, bytes, bool, int, float, complex, Decimal)


class SerializationRedactor:
    """Decides, per sensitive field, whether to emit the raw or the masked value.

    The redactor holds no per-call state; the principal is supplied with every
    call (or resolved from the oracle's fallback provider).
    """

    def __init__(
        self,
        oracle: Optional[AuthorizationOracle] = None,
        index: Optional[FieldDiscoveryIndex] = None,
        config: Optional[RedactionConfig] = None,
    ):
        self.oracle = oracle or AuthorizationOracle()
        self.index = index or get_default_index()
        self._config = config

    @property
    def config(self) -> RedactionConfig:
        return self._config or get_config()

    def redact(
        self,
        value: Any,
        descriptor: SensitivityDescriptor,
        principal: Optional[Principal] = None,
        emit: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """Redact a single field value.

        Args:
            value: Raw field value; never mutated
            descriptor: Policy of the field
            principal: Caller the output is produced for
            emit: Host serializer for the raw value. When omitted the raw
                value is returned as is.

        Returns:
            ``None`` for ``None``, the emitted raw value when the principal is
            authorized, otherwise the masked text.
        """
        if value is None:
            return None

        if self.oracle.is_authorized(descriptor.allowed_roles, principal):
            return emit(value) if emit is not None else value

        text = value if isinstance(value, str) else str(value)
        return mask_with(descriptor, text)

    def principal_from_context(self, context: Any) -> Optional[Principal]:
        """Look up the principal in a serialization context mapping."""
        if not isinstance(context, Mapping):
            return None

        candidate = context.get(self.config.principal_context_key)
        if isinstance(candidate, Principal):
            return candidate
        if isinstance(candidate, PrincipalProvider):
            return principal_from_provider(candidate)
        if candidate is not None:
            logger.debug(
                "Ignoring serialization context entry of type %s; values stay masked",
                type(candidate).__name__,
            )
        return None

    def to_dict(self, obj: Any, principal: Optional[Principal] = None) -> dict[str, Any]:
        """Serialize a dataclass or plain object into a dict with sensitive fields redacted.

        Nested objects, mappings and collections are serialized recursively;
        pydantic models are delegated to ``model_dump`` with the principal in
        the serialization context.
        """
        return self._encode_object(obj, principal, set())

    def dumps(self, obj: Any, principal: Optional[Principal] = None, **json_kwargs: Any) -> str:
        """Serialize ``obj`` to JSON text with sensitive fields redacted."""
        json_kwargs.setdefault("default", str)
        return json.dumps(self._encode(obj, principal, set()), **json_kwargs)

    def _encode(self, value: Any, principal: Optional[Principal], active: set[int]) -> Any:
        if value is None or isinstance(value, _LEAF_TYPES):
            return value
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, BaseModel):
            return value.model_dump(context={self.config.principal_context_key: principal})
        if isinstance(value, Mapping):
            return {key: self._encode(item, principal, active) for key, item in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._encode(item, principal, active) for item in value]
        if _is_record(value):
            return self._encode_object(value, principal, active)
        return value

    def _encode_object(
        self, obj: Any, principal: Optional[Principal], active: set[int]
    ) -> dict[str, Any]:
        if isinstance(obj, BaseModel):
            return obj.model_dump(context={self.config.principal_context_key: principal})

        marker = id(obj)
        if marker in active:
            raise ValueError(f"Circular reference detected while serializing {type(obj).__name__}")
        active.add(marker)
        try:
            sensitive = {f.name: f.descriptor for f in self.index.fields_of(type(obj))}
            result: dict[str, Any] = {}
            for name in _field_names(obj, sensitive):
                value = getattr(obj, name, None)
                descriptor = sensitive.get(name)
                if descriptor is None:
                    result[name] = self._encode(value, principal, active)
                else:
                    result[name] = self.redact(
                        value,
                        descriptor,
                        principal,
                        emit=lambda raw: self._encode(raw, principal, active),
                    )
            return result
        finally:
            active.discard(marker)


def _is_record(value: Any) -> bool:
    if isinstance(value, type):
        return False
    return dataclasses.is_dataclass(value) or hasattr(value, "__dict__")


def _field_names(obj: Any, sensitive: Mapping[str, SensitivityDescriptor]) -> list[str]:
    if dataclasses.is_dataclass(obj):
        names = [f.name for f in dataclasses.fields(obj)]
    else:
        names = [name for name in getattr(obj, "__dict__", {}) if not name.startswith("_")]
    names.extend(name for name in sensitive if name not in names)
    return names


_default_redactor: Optional[SerializationRedactor] = None
_default_redactor_lock = threading.Lock()


def get_default_redactor() -> SerializationRedactor:
    """Process-wide redactor used by annotation-driven serialization hooks."""
    global _default_redactor
    if _default_redactor is None:
        with _default_redactor_lock:
            if _default_redactor is None:
                _default_redactor = SerializationRedactor()
    return _default_redactor


def set_default_redactor(redactor: Optional[SerializationRedactor]) -> None:
    """Replace the process-wide redactor; ``None`` restores a fresh default on next use."""
    global _default_redactor
    with _default_redactor_lock:
        _default_redactor = redactor
