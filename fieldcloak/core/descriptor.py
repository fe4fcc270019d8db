"""Per-field sensitivity descriptors.

A descriptor is attached to a field when the schema is defined, either as
``typing.Annotated`` metadata or, for dataclasses, through ``sensitive_field()``:

    >>> from typing import Annotated
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Customer:
    ...     username: str
    ...     email: Annotated[str, Sensitive(kind=MaskKind.EMAIL)]
    ...     iban: str = sensitive_field(kind=MaskKind.IBAN, default="")
"""

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .exceptions import DescriptorValidationError
from .kinds import MaskKind
from .strategies import DEFAULT_MASK_CHAR, mask_with

SENSITIVE_METADATA_KEY = "fieldcloak.sensitive"

# Accepted spellings for each descriptor parameter in plain mappings
_PARAMETER_ALIASES = {
    "kind": ("kind", "type", "mask_kind", "maskKind"),
    "show_first": ("show_first", "showFirst"),
    "show_last": ("show_last", "showLast"),
    "mask_char": ("mask_char", "maskChar"),
    "allowed_roles": ("allowed_roles", "allowedRoles", "roles_allowed", "rolesAllowed"),
}


@dataclass(frozen=True)
class SensitivityDescriptor:
    """
    Immutable masking policy for a single field.

    Attributes:
        kind: Masking algorithm to apply
        show_first: Visible leading characters (``MaskKind.GENERIC`` only)
        show_last: Visible trailing characters (``MaskKind.GENERIC`` only)
        mask_char: Single fill character
        allowed_roles: Roles allowed to see the raw value during serialization.
            An empty set means the value is always masked.

    Examples:
        >>> # Whole value masked for everybody
        >>> password = SensitivityDescriptor()

        >>> # Admins see "john.doe@example.com", everybody else "j******e@example.com"
        >>> email = SensitivityDescriptor(
        ...     kind=MaskKind.EMAIL, allowed_roles={"ROLE_ADMIN"}
        ... )

        >>> # Last four characters visible, masked with '#'
        >>> account = SensitivityDescriptor(show_last=4, mask_char="#")
    """

    kind: MaskKind = MaskKind.GENERIC
    show_first: int = 0
    show_last: int = 0
    mask_char: str = DEFAULT_MASK_CHAR
    allowed_roles: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate and normalize descriptor parameters."""
        self._validate_kind()
        self._validate_reveal_count("show_first", self.show_first)
        self._validate_reveal_count("show_last", self.show_last)
        self._validate_mask_char()
        self._normalize_allowed_roles()

    def _validate_kind(self) -> None:
        try:
            object.__setattr__(self, "kind", MaskKind.parse(self.kind))
        except ValueError as e:
            raise DescriptorValidationError(str(e), parameter="kind", actual_value=self.kind) from e

    @staticmethod
    def _validate_reveal_count(name: str, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise DescriptorValidationError(
                f"{name} must be a non-negative integer", parameter=name, actual_value=value
            )

    def _validate_mask_char(self) -> None:
        if not isinstance(self.mask_char, str) or len(self.mask_char) != 1:
            raise DescriptorValidationError(
                "mask_char must be a single character string",
                parameter="mask_char",
                actual_value=self.mask_char,
            )

    def _normalize_allowed_roles(self) -> None:
        roles = self.allowed_roles
        if roles is None:
            roles = frozenset()
        elif isinstance(roles, str):
            roles = frozenset({roles})
        elif isinstance(roles, Iterable):
            roles = frozenset(roles)
        else:
            raise DescriptorValidationError(
                "allowed_roles must be a string or an iterable of strings",
                parameter="allowed_roles",
                actual_value=roles,
            )

        for role in roles:
            if not isinstance(role, str) or not role:
                raise DescriptorValidationError(
                    "allowed_roles entries must be non-empty strings",
                    parameter="allowed_roles",
                    actual_value=role,
                )
        object.__setattr__(self, "allowed_roles", roles)

    @property
    def always_masked(self) -> bool:
        """True when no role can bypass masking."""
        return not self.allowed_roles

    def mask(self, value: str) -> str:
        """Mask ``value`` according to this descriptor."""
        return mask_with(self, value)

    def with_parameters(self, **changes: Any) -> "SensitivityDescriptor":
        """Create a new descriptor with some parameters replaced."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SensitivityDescriptor":
        """Build a descriptor from a plain mapping such as a parsed YAML entry.

        Both snake_case and camelCase keys are accepted. Unknown keys are
        rejected so that typos in policy files surface early.
        """
        if not isinstance(data, Mapping):
            raise DescriptorValidationError(
                f"Descriptor definition must be a mapping, got {type(data).__name__}"
            )

        known = {alias: name for name, aliases in _PARAMETER_ALIASES.items() for alias in aliases}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            raise DescriptorValidationError(
                f"Unknown descriptor parameters: {unknown}", parameter=unknown[0]
            )

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = known[key]
            if name in kwargs:
                raise DescriptorValidationError(
                    f"Parameter '{name}' given more than once", parameter=name
                )
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain mapping accepted by ``from_dict``."""
        return {
            "kind": self.kind.value,
            "show_first": self.show_first,
            "show_last": self.show_last,
            "mask_char": self.mask_char,
            "allowed_roles": sorted(self.allowed_roles),
        }

    def __get_pydantic_core_schema__(self, source_type: Any, handler: Any) -> Any:
        """Install the redacting serializer when used as pydantic ``Annotated`` metadata."""
        from ..serialization.pydantic_hook import sensitive_core_schema

        return sensitive_core_schema(self, source_type, handler)


# Declarative spelling used in annotations: Annotated[str, Sensitive(kind=MaskKind.EMAIL)]
Sensitive = SensitivityDescriptor


def sensitive_field(
    kind: Union[MaskKind, str] = MaskKind.GENERIC,
    show_first: int = 0,
    show_last: int = 0,
    mask_char: str = DEFAULT_MASK_CHAR,
    allowed_roles: Iterable[str] = (),
    **field_kwargs: Any,
) -> Any:
    """Declare a dataclass field carrying a sensitivity descriptor.

    Remaining keyword arguments (``default``, ``default_factory``, ``repr``...)
    are passed to ``dataclasses.field``.
    """
    descriptor = SensitivityDescriptor(
        kind=kind,
        show_first=show_first,
        show_last=show_last,
        mask_char=mask_char,
        allowed_roles=allowed_roles,
    )
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[SENSITIVE_METADATA_KEY] = descriptor
    return dataclasses.field(metadata=metadata, **field_kwargs)


def descriptor_from_metadata(metadata: Iterable[Any]) -> Union[SensitivityDescriptor, None]:
    """Return the first sensitivity descriptor among ``Annotated`` metadata items."""
    for item in metadata:
        if isinstance(item, SensitivityDescriptor):
            return item
    return None
