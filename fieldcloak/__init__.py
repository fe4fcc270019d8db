"""FieldCloak: policy-driven redaction of sensitive fields.

Sensitive fields are declared once, on the schema, with a
``SensitivityDescriptor``. Their values are then redacted at two output
boundaries: structured serialization (gated by the caller's roles) and
free-text logging (always masked).
"""

__version__ = "0.1.0"

from .core import (
    AuthorizationOracle,
    ConfigurationError,
    DescriptorValidationError,
    FieldCloakError,
    FieldDiscoveryIndex,
    MaskKind,
    PolicyError,
    PolicyInheritanceError,
    PolicyLoader,
    PolicySet,
    PolicyValidationError,
    Principal,
    PrincipalProvider,
    RedactionConfig,
    Sensitive,
    SensitiveField,
    SensitivityDescriptor,
    fields_of,
    is_authorized,
    load_policies,
    mask,
    sensitive_field,
)
from .masking import LogRedactor, RedactingFilter, RedactingProcessor
from .serialization import SerializationRedactor

__all__ = [
    "__version__",
    # Masking
    "MaskKind",
    "mask",
    # Descriptors
    "SensitivityDescriptor",
    "Sensitive",
    "sensitive_field",
    # Authorization
    "AuthorizationOracle",
    "Principal",
    "PrincipalProvider",
    "is_authorized",
    # Discovery
    "FieldDiscoveryIndex",
    "SensitiveField",
    "fields_of",
    # Redactors
    "SerializationRedactor",
    "LogRedactor",
    "RedactingFilter",
    "RedactingProcessor",
    # Configuration and policies
    "RedactionConfig",
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
