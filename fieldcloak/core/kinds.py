"""Mask kinds selecting the masking algorithm for a sensitive field."""

from enum import Enum
from typing import Union


class MaskKind(Enum):
    """Types of masking algorithms available for sensitive fields."""

    GENERIC = "generic"
    EMAIL = "email"
    CREDIT_CARD = "credit_card"
    PHONE_NUMBER = "phone_number"
    IBAN = "iban"

    @classmethod
    def parse(cls, value: Union["MaskKind", str]) -> "MaskKind":
        """Resolve a kind from an enum member, its value or its name.

        Matching is case-insensitive and tolerates ``-`` in place of ``_``,
        so ``"credit-card"``, ``"CREDIT_CARD"`` and ``"credit_card"`` all
        resolve to ``MaskKind.CREDIT_CARD``.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Mask kind must be a MaskKind or string, got {type(value).__name__}")

        normalized = value.strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == normalized:
                return kind

        valid_kinds = [k.value for k in cls]
        raise ValueError(f"Invalid mask kind '{value}'. Valid kinds: {valid_kinds}")
