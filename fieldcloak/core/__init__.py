"""Core masking engine: kinds, algorithms, descriptors, authorization and discovery."""

from .authorization import AuthorizationOracle, Principal, PrincipalProvider, is_authorized
from .config import RedactionConfig, get_config, reset_config, set_config
from .descriptor import (
    SENSITIVE_METADATA_KEY,
    Sensitive,
    SensitivityDescriptor,
    sensitive_field,
)
from .discovery import (
    FieldDiscoveryIndex,
    SensitiveField,
    clear_discovery_cache,
    fields_of,
    get_default_index,
)
from .exceptions import (
    ConfigurationError,
    DescriptorValidationError,
    FieldCloakError,
    PolicyError,
    PolicyInheritanceError,
    PolicyValidationError,
)
from .kinds import MaskKind
from .policy_loader import PolicyLoader, PolicySet, load_policies
from .strategies import (
    DEFAULT_MASK_CHAR,
    mask,
    mask_credit_card,
    mask_email,
    mask_generic,
    mask_iban,
    mask_phone_number,
    mask_with,
)

__all__ = [
    # Kinds and algorithms
    "MaskKind",
    "DEFAULT_MASK_CHAR",
    "mask",
    "mask_with",
    "mask_generic",
    "mask_email",
    "mask_credit_card",
    "mask_phone_number",
    "mask_iban",
    # Descriptors
    "SensitivityDescriptor",
    "Sensitive",
    "sensitive_field",
    "SENSITIVE_METADATA_KEY",
    # Authorization
    "AuthorizationOracle",
    "Principal",
    "PrincipalProvider",
    "is_authorized",
    # Discovery
    "FieldDiscoveryIndex",
    "SensitiveField",
    "fields_of",
    "get_default_index",
    "clear_discovery_cache",
    # Configuration
    "RedactionConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Policy files
    "PolicyLoader",
    "PolicySet",
    "load_policies",
    # Errors
    "FieldCloakError",
    "DescriptorValidationError",
    "ConfigurationError",
    "PolicyError",
    "PolicyValidationError",
    "PolicyInheritanceError",
]
