"""Masking algorithms, one per mask kind.

Every function here is a pure string transform: deterministic, no side
effects. Masking is not idempotent: masking an already masked value may mask
further characters.
"""

import re
from typing import TYPE_CHECKING, Union

from .kinds import MaskKind

if TYPE_CHECKING:
    from .descriptor import SensitivityDescriptor

DEFAULT_MASK_CHAR = "*"

_NON_DIGITS = re.compile(r"[^0-9]")
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")

# Minimum cleaned lengths below which the whole original value is masked
CREDIT_CARD_MIN_DIGITS = 12
CREDIT_CARD_VISIBLE_DIGITS = 4
PHONE_MIN_DIGITS = 7
PHONE_SHOW_FIRST = 3
PHONE_SHOW_LAST = 2
IBAN_MIN_CHARS = 8
IBAN_SHOW_FIRST = 4
IBAN_SHOW_LAST = 4


def mask_generic(
    value: str, show_first: int = 0, show_last: int = 0, mask_char: str = DEFAULT_MASK_CHAR
) -> str:
    """Mask the middle of ``value``, keeping ``show_first``/``show_last`` characters.

    When the visible counts cover the whole value (``len <= show_first + show_last``)
    every character is masked.

    Examples:
        >>> mask_generic("password", show_first=3)
        'pas*****'
        >>> mask_generic("abc", show_first=2, show_last=2)
        '***'
    """
    length = len(value)
    if length <= show_first + show_last:
        return mask_char * length

    head = value[:show_first]
    tail = value[length - show_last:] if show_last else ""
    return head + mask_char * (length - show_first - show_last) + tail


def mask_email(value: str, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Mask the local part of an address, keeping its first and last character and the domain."""
    at_index = value.find("@")
    if at_index <= 0:
        # Not an address; mask everything
        return mask_generic(value, 0, 0, mask_char)

    local_part = value[:at_index]
    domain_part = value[at_index:]
    return mask_generic(local_part, 1, 1, mask_char) + domain_part


def mask_credit_card(value: str, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Keep only the last four digits of a card number; separators are dropped."""
    digits = _NON_DIGITS.sub("", value)
    if len(digits) < CREDIT_CARD_MIN_DIGITS:
        return mask_generic(value, 0, 0, mask_char)

    hidden = len(digits) - CREDIT_CARD_VISIBLE_DIGITS
    return mask_char * hidden + digits[hidden:]


def mask_phone_number(value: str, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Keep the first three and last two digits of a phone number; separators are dropped."""
    digits = _NON_DIGITS.sub("", value)
    if len(digits) < PHONE_MIN_DIGITS:
        return mask_generic(value, 0, 0, mask_char)

    return mask_generic(digits, PHONE_SHOW_FIRST, PHONE_SHOW_LAST, mask_char)


def mask_iban(value: str, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Keep the first and last four characters of an IBAN; whitespace and punctuation are dropped."""
    cleaned = _NON_ALPHANUMERIC.sub("", value)
    if len(cleaned) < IBAN_MIN_CHARS:
        return mask_generic(value, 0, 0, mask_char)

    return mask_generic(cleaned, IBAN_SHOW_FIRST, IBAN_SHOW_LAST, mask_char)


def mask(
    kind: Union[MaskKind, str],
    value: str,
    show_first: int = 0,
    show_last: int = 0,
    mask_char: str = DEFAULT_MASK_CHAR,
) -> str:
    """Mask ``value`` with the algorithm selected by ``kind``.

    ``show_first`` and ``show_last`` only apply to ``MaskKind.GENERIC``; the
    other kinds use fixed reveal rules. Empty values are returned unchanged.

    Examples:
        >>> mask(MaskKind.EMAIL, "user@example.com")
        'u**r@example.com'
        >>> mask(MaskKind.CREDIT_CARD, "4111 1111 1111 1234")
        '************1234'
    """
    if not value:
        return value

    kind = MaskKind.parse(kind)

    if kind == MaskKind.EMAIL:
        return mask_email(value, mask_char)
    elif kind == MaskKind.CREDIT_CARD:
        return mask_credit_card(value, mask_char)
    elif kind == MaskKind.PHONE_NUMBER:
        return mask_phone_number(value, mask_char)
    elif kind == MaskKind.IBAN:
        return mask_iban(value, mask_char)
    return mask_generic(value, show_first, show_last, mask_char)


def mask_with(descriptor: "SensitivityDescriptor", value: str) -> str:
    """Mask ``value`` using every parameter of a sensitivity descriptor."""
    return mask(
        descriptor.kind,
        value,
        descriptor.show_first,
        descriptor.show_last,
        descriptor.mask_char,
    )
