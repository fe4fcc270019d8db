"""Discovery of sensitive fields across a type hierarchy.

``FieldDiscoveryIndex.fields_of(cls)`` walks ``cls.__mro__`` (excluding
``object``) and collects every field declared with a ``SensitivityDescriptor``,
either as ``Annotated`` metadata or through dataclass field metadata. Results
are memoized per type for the life of the process in a shared registry;
each index also keeps an instance-local tier in front of it.

Population is compute-if-absent: two threads discovering the same type at the
same time may both compute it, but only the first stored entry is ever
published, so every caller sees the same immutable tuple.
"""

import inspect
import logging
import threading
import types
from typing import Annotated, Any, ClassVar, NamedTuple, Optional, Union, get_args, get_origin

from .descriptor import SENSITIVE_METADATA_KEY, SensitivityDescriptor, descriptor_from_metadata

logger = logging.getLogger(__name__)


class SensitiveField(NamedTuple):
    """A discovered sensitive field.

    Attributes:
        name: Attribute name on instances
        owner: Most-derived class in the hierarchy declaring the descriptor
        descriptor: Masking policy for the field
    """

    name: str
    owner: type
    descriptor: SensitivityDescriptor

    def read(self, obj: Any) -> Any:
        return getattr(obj, self.name)


# Process-wide authoritative tier, keyed by type
_SHARED_FIELDS: dict[type, tuple[SensitiveField, ...]] = {}
_SHARED_LOCK = threading.Lock()


def _class_annotations(klass: type) -> dict[str, Any]:
    """Annotations declared directly on ``klass``, forward references resolved where possible."""
    try:
        return inspect.get_annotations(klass, eval_str=True)
    except Exception as e:
        logger.debug("Could not resolve annotations of %s: %s", klass.__qualname__, e)

    try:
        raw = inspect.get_annotations(klass)
    except Exception as e:
        logger.debug("Could not read annotations of %s: %s", klass.__qualname__, e)
        return {}

    # Unresolved string annotations are treated as carrying no descriptor
    unresolved = [name for name, annotation in raw.items() if isinstance(annotation, str)]
    if unresolved:
        logger.debug("Skipping unresolved annotations of %s: %s", klass.__qualname__, unresolved)
    return {name: annotation for name, annotation in raw.items() if name not in unresolved}


def descriptor_from_annotation(annotation: Any) -> Optional[SensitivityDescriptor]:
    """Find a descriptor in ``Annotated`` metadata, looking inside ``Optional``/``Union``."""
    origin = get_origin(annotation)
    if origin is ClassVar:
        return None

    if origin is Annotated:
        descriptor = descriptor_from_metadata(annotation.__metadata__)
        if descriptor is not None:
            return descriptor
        annotation = get_args(annotation)[0]
        origin = get_origin(annotation)

    if origin is Union or origin is types.UnionType:
        for member in get_args(annotation):
            descriptor = descriptor_from_annotation(member)
            if descriptor is not None:
                return descriptor
    return None


def _dataclass_descriptor(klass: type, name: str) -> Optional[SensitivityDescriptor]:
    dataclass_fields = klass.__dict__.get("__dataclass_fields__")
    if not dataclass_fields or name not in dataclass_fields:
        return None
    descriptor = dataclass_fields[name].metadata.get(SENSITIVE_METADATA_KEY)
    return descriptor if isinstance(descriptor, SensitivityDescriptor) else None


def discover_sensitive_fields(cls: type) -> tuple[SensitiveField, ...]:
    """Compute the sensitive fields of ``cls`` without consulting any cache.

    A field redeclared in a subclass appears once. The most-derived declaration
    carrying a descriptor wins; a redeclaration without a descriptor does not
    remove the descriptor an ancestor declared. Fields are ordered as declared,
    ancestors first.
    """
    hierarchy = [klass for klass in cls.__mro__ if klass is not object]
    annotations = {klass: _class_annotations(klass) for klass in hierarchy}

    found: dict[str, SensitiveField] = {}
    for klass in hierarchy:
        for name, annotation in annotations[klass].items():
            if name in found:
                continue
            descriptor = descriptor_from_annotation(annotation) or _dataclass_descriptor(klass, name)
            if descriptor is not None:
                found[name] = SensitiveField(name, klass, descriptor)

    ordered: dict[str, SensitiveField] = {}
    for klass in reversed(hierarchy):
        for name in annotations[klass]:
            if name in found and name not in ordered:
                ordered[name] = found[name]
    return tuple(ordered.values())


class FieldDiscoveryIndex:
    """Memoizing read-through lookup of sensitive fields per runtime type."""

    def __init__(self, shared: Optional[dict[type, tuple[SensitiveField, ...]]] = None):
        self._local: dict[type, tuple[SensitiveField, ...]] = {}
        self._shared = _SHARED_FIELDS if shared is None else shared
        self._lock = _SHARED_LOCK if shared is None else threading.Lock()

    def fields_of(self, cls: type) -> tuple[SensitiveField, ...]:
        """Return the sensitive fields of ``cls`` and every ancestor type."""
        if not isinstance(cls, type):
            raise TypeError(f"fields_of expects a type, got {type(cls).__name__}")

        fields = self._local.get(cls)
        if fields is not None:
            return fields

        fields = self._shared.get(cls)
        if fields is None:
            computed = discover_sensitive_fields(cls)
            with self._lock:
                fields = self._shared.setdefault(cls, computed)
            if fields is computed:
                logger.debug(
                    "Discovered %d sensitive field(s) on %s",
                    len(fields),
                    cls.__qualname__,
                )

        self._local[cls] = fields
        return fields

    def has_sensitive_fields(self, cls: type) -> bool:
        return bool(self.fields_of(cls))

    def cache_info(self) -> dict[str, int]:
        """Sizes of the local and shared cache tiers."""
        return {"local_types": len(self._local), "shared_types": len(self._shared)}

    def clear_local(self) -> None:
        self._local.clear()


_DEFAULT_INDEX: Optional[FieldDiscoveryIndex] = None
_DEFAULT_INDEX_LOCK = threading.Lock()


def get_default_index() -> FieldDiscoveryIndex:
    """Process-wide index backed by the shared registry."""
    global _DEFAULT_INDEX
    if _DEFAULT_INDEX is None:
        with _DEFAULT_INDEX_LOCK:
            if _DEFAULT_INDEX is None:
                _DEFAULT_INDEX = FieldDiscoveryIndex()
    return _DEFAULT_INDEX


def fields_of(cls: type) -> tuple[SensitiveField, ...]:
    """Sensitive fields of ``cls`` from the process-wide index."""
    return get_default_index().fields_of(cls)


def clear_discovery_cache() -> None:
    """Drop every memoized entry.

    Types are assumed static for the life of the process, so this exists for
    test isolation rather than invalidation.
    """
    with _SHARED_LOCK:
        _SHARED_FIELDS.clear()
    if _DEFAULT_INDEX is not None:
        _DEFAULT_INDEX.clear_local()
