"""Named sensitivity policies loaded from YAML files with inheritance support.

A policy file maps names to descriptor definitions::

    version: "1.0"
    name: customer-data
    extends: base.yaml
    policies:
      email: {kind: email}
      admin_note:
        kind: generic
        show_first: 2
        allowed_roles: [ROLE_ADMIN]

Models then reference loaded descriptors by name::

    policies = PolicyLoader().load("customer.yaml")

    class Customer(BaseModel):
        email: Annotated[str, policies["email"]]
"""

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .descriptor import SensitivityDescriptor
from .exceptions import (
    DescriptorValidationError,
    PolicyInheritanceError,
    PolicyValidationError,
)
from .kinds import MaskKind

logger = logging.getLogger(__name__)


@dataclass
class PolicyLoadContext:
    """Context for loading policies, tracks inheritance chain."""

    current_file: Path
    inheritance_chain: list[Path]

    def derive_path(self, relative_path: str) -> Path:
        """Resolve relative path from current policy file location."""
        if Path(relative_path).is_absolute():
            return Path(relative_path)
        return (self.current_file.parent / relative_path).resolve()


class DescriptorConfig(BaseModel):
    """Pydantic model for a single named descriptor definition."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kind: str = Field("generic", description="Mask kind")
    show_first: int = Field(0, ge=0, alias="showFirst", description="Visible leading chars")
    show_last: int = Field(0, ge=0, alias="showLast", description="Visible trailing chars")
    mask_char: str = Field(
        "*", min_length=1, max_length=1, alias="maskChar", description="Fill character"
    )
    allowed_roles: list[str] = Field(
        default_factory=list, alias="allowedRoles", description="Roles that bypass masking"
    )

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: Any) -> Any:
        """Validate mask kind is supported."""
        return MaskKind.parse(v).value

    def to_descriptor(self) -> SensitivityDescriptor:
        return SensitivityDescriptor(
            kind=MaskKind(self.kind),
            show_first=self.show_first,
            show_last=self.show_last,
            mask_char=self.mask_char,
            allowed_roles=frozenset(self.allowed_roles),
        )


class PolicyFileSchema(BaseModel):
    """Pydantic model for policy file schema validation."""

    model_config = ConfigDict(extra="forbid")

    version: Optional[str] = Field("1.0", description="Policy schema version")
    name: Optional[str] = Field(None, description="Policy set name")
    description: Optional[str] = Field(None, description="Policy set description")
    extends: Optional[Union[str, list[str]]] = Field(
        None, description="Base policy files to inherit from"
    )
    policies: dict[str, DescriptorConfig] = Field(
        default_factory=dict, description="Named descriptor definitions"
    )

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: Any) -> Any:
        """Validate version format."""
        if v is not None:
            version_pattern = r"^\d+\.\d+(\.\d+)?$"
            if not re.match(version_pattern, v):
                raise ValueError(
                    f"Version must follow format 'x.y' or 'x.y.z', got '{v}'"
                )
        return v

    @field_validator("policies")
    @classmethod
    def validate_policy_names(cls, v: dict[str, DescriptorConfig]) -> dict[str, DescriptorConfig]:
        """Policy names must be usable as plain identifiers."""
        for name in v:
            if not re.match(r"^[A-Za-z_][A-Za-z0-9_.-]*$", name):
                raise ValueError(f"Invalid policy name '{name}'")
        return v


class PolicySet(Mapping[str, SensitivityDescriptor]):
    """Read-only mapping of policy names to descriptors."""

    def __init__(
        self,
        descriptors: Mapping[str, SensitivityDescriptor],
        name: Optional[str] = None,
        source: Optional[Path] = None,
    ):
        self._descriptors = dict(descriptors)
        self.name = name
        self.source = source

    def __getitem__(self, key: str) -> SensitivityDescriptor:
        try:
            return self._descriptors[key]
        except KeyError:
            raise KeyError(
                f"Unknown policy '{key}'. Available: {sorted(self._descriptors)}"
            ) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def names(self) -> list[str]:
        return sorted(self._descriptors)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: descriptor.to_dict() for name, descriptor in self._descriptors.items()}

    def __repr__(self) -> str:
        return f"PolicySet(name={self.name!r}, policies={self.names()})"


class PolicyLoader:
    """
    Policy loader with inheritance and validation support.

    Child files override base definitions by policy name. Loaded files are
    cached per loader instance.
    """

    def __init__(self, base_path: Optional[Path] = None):
        """
        Initialize policy loader.

        Args:
            base_path: Base directory for resolving relative policy paths
        """
        self.base_path = base_path or Path.cwd()
        self._policy_cache: dict[Path, PolicyFileSchema] = {}

    def load(self, policy_path: Union[str, Path]) -> PolicySet:
        """
        Load a policy set from file with full inheritance support.

        Raises:
            PolicyValidationError: If YAML parsing or schema validation fails
            PolicyInheritanceError: If inheritance is circular
            FileNotFoundError: If the policy file or a base file doesn't exist
        """
        policy_path = Path(policy_path)
        if not policy_path.is_absolute():
            policy_path = self.base_path / policy_path
        policy_path = policy_path.resolve()

        context = PolicyLoadContext(current_file=policy_path, inheritance_chain=[])
        schema = self._load_policy_file(policy_path, context)

        descriptors = self._build_descriptors(schema, policy_path)
        logger.info("Loaded %d sensitivity policies from %s", len(descriptors), policy_path)
        return PolicySet(descriptors, name=schema.name, source=policy_path)

    def load_from_mapping(self, data: Mapping[str, Any]) -> PolicySet:
        """Build a policy set from already parsed data; ``extends`` is not allowed here."""
        try:
            schema = PolicyFileSchema(**data)
        except ValidationError as e:
            raise PolicyValidationError(f"Schema validation failed: {e}") from e
        if schema.extends:
            raise PolicyValidationError("'extends' requires loading from a file")
        return PolicySet(self._build_descriptors(schema), name=schema.name)

    @staticmethod
    def _build_descriptors(
        schema: PolicyFileSchema, source: Optional[Path] = None
    ) -> dict[str, SensitivityDescriptor]:
        descriptors = {}
        for name, config in schema.policies.items():
            try:
                descriptors[name] = config.to_descriptor()
            except DescriptorValidationError as e:
                raise PolicyValidationError(
                    f"Invalid policy '{name}': {e.message}",
                    policy_file=str(source) if source else None,
                    policy_name=name,
                ) from e
        return descriptors

    def _load_policy_file(
        self, policy_path: Path, context: PolicyLoadContext
    ) -> PolicyFileSchema:
        """Load one policy file and merge every base it extends."""
        if policy_path in context.inheritance_chain:
            chain = [str(p) for p in context.inheritance_chain + [policy_path]]
            raise PolicyInheritanceError(
                f"Circular inheritance detected: {' -> '.join(chain)}",
                chain=chain,
                policy_file=str(policy_path),
            )

        if policy_path in self._policy_cache:
            return self._policy_cache[policy_path]

        if not policy_path.exists():
            raise FileNotFoundError(f"Policy file not found: {policy_path}")

        try:
            with open(policy_path, encoding="utf-8") as f:
                policy_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise PolicyValidationError(
                f"Invalid YAML in {policy_path}: {e}", policy_file=str(policy_path)
            ) from e

        if not isinstance(policy_data, dict):
            raise PolicyValidationError(
                f"Policy file {policy_path} must contain a mapping at top level",
                policy_file=str(policy_path),
            )

        try:
            policy_schema = PolicyFileSchema(**policy_data)
        except ValidationError as e:
            raise PolicyValidationError(
                f"Schema validation failed for {policy_path}: {e}",
                policy_file=str(policy_path),
            ) from e

        if policy_schema.extends:
            new_context = PolicyLoadContext(
                current_file=policy_path,
                inheritance_chain=context.inheritance_chain + [policy_path],
            )
            extends_list = (
                policy_schema.extends
                if isinstance(policy_schema.extends, list)
                else [policy_schema.extends]
            )

            merged: dict[str, DescriptorConfig] = {}
            for base_path_str in extends_list:
                base_path = new_context.derive_path(base_path_str)
                base_schema = self._load_policy_file(base_path, new_context)
                merged.update(base_schema.policies)
            merged.update(policy_schema.policies)

            policy_schema = policy_schema.model_copy(update={"policies": merged})

        self._policy_cache[policy_path] = policy_schema
        return policy_schema


def load_policies(policy_path: Union[str, Path]) -> PolicySet:
    """Load a policy set with a fresh loader."""
    return PolicyLoader().load(policy_path)
