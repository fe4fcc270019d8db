"""FieldCloak exception hierarchy.

Only definition-time and configuration-time code raises these errors. The
redaction paths (serialization and logging) degrade to the more-masked or
pass-through outcome instead of raising.
"""

from typing import Any, Dict, List, Optional


class FieldCloakError(Exception):
    """Base exception for all FieldCloak errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        context: Additional error context and metadata
        component: Component where the error originated
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        component: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._default_error_code()
        self.context = context or {}
        self.component = component or self._infer_component()

    def _default_error_code(self) -> str:
        """Generate default error code based on exception class name."""
        return self.__class__.__name__.upper().replace("ERROR", "_ERROR")

    def _infer_component(self) -> str:
        """Infer component name from exception class."""
        name = self.__class__.__name__.lower()
        if "descriptor" in name:
            return "descriptor"
        elif "policy" in name:
            return "policy"
        elif "configuration" in name:
            return "config"
        else:
            return "core"

    def add_context(self, key: str, value: Any) -> None:
        """Add additional context to the error."""
        self.context[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to structured dictionary for logging/reporting."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "component": self.component,
            "context": self.context,
        }

    def __str__(self) -> str:
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({details})"
        return self.message


class DescriptorValidationError(FieldCloakError, ValueError):
    """Raised when a sensitivity descriptor is declared with invalid parameters."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if parameter:
            self.add_context("parameter", parameter)
        if actual_value is not None:
            self.add_context("actual_value", repr(actual_value))


class ConfigurationError(FieldCloakError):
    """Raised when runtime configuration is invalid."""


class PolicyError(FieldCloakError):
    """Raised when policy-related operations fail."""

    def __init__(
        self,
        message: str,
        policy_file: Optional[str] = None,
        policy_name: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if policy_file:
            self.add_context("policy_file", policy_file)
        if policy_name:
            self.add_context("policy_name", policy_name)


class PolicyValidationError(PolicyError):
    """Raised when a policy file fails YAML parsing or schema validation."""


class PolicyInheritanceError(PolicyError):
    """Raised when policy inheritance cannot be resolved."""

    def __init__(self, message: str, chain: Optional[List[str]] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if chain:
            self.add_context("inheritance_chain", chain)
