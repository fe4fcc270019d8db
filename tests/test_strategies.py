"""Tests for the masking algorithms."""

import pytest

from fieldcloak.core.kinds import MaskKind
from fieldcloak.core.strategies import (
    mask,
    mask_credit_card,
    mask_email,
    mask_generic,
    mask_iban,
    mask_phone_number,
)


class TestMaskKind:
    """Test the MaskKind enum."""

    def test_enum_values(self) -> None:
        """Test that enum has expected values."""
        assert MaskKind.GENERIC.value == "generic"
        assert MaskKind.EMAIL.value == "email"
        assert MaskKind.CREDIT_CARD.value == "credit_card"
        assert MaskKind.PHONE_NUMBER.value == "phone_number"
        assert MaskKind.IBAN.value == "iban"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("email", MaskKind.EMAIL),
            ("EMAIL", MaskKind.EMAIL),
            ("credit-card", MaskKind.CREDIT_CARD),
            ("Phone_Number", MaskKind.PHONE_NUMBER),
            (MaskKind.IBAN, MaskKind.IBAN),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert MaskKind.parse(raw) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Invalid mask kind 'ssn'"):
            MaskKind.parse("ssn")

    def test_parse_rejects_non_string(self) -> None:
        with pytest.raises(ValueError, match="must be a MaskKind or string"):
            MaskKind.parse(3)  # type: ignore[arg-type]


class TestGenericMasking:
    """Test generic masking with reveal counts."""

    def test_masks_everything_by_default(self) -> None:
        assert mask_generic("secret123") == "*********"

    def test_show_first(self) -> None:
        assert mask_generic("SENSITIVE_DATA_123", show_first=3) == "SEN" + "*" * 15

    def test_show_last(self) -> None:
        assert mask_generic("1234567890", show_last=4) == "******7890"

    def test_show_first_and_last(self) -> None:
        assert mask_generic("abcdefgh", show_first=2, show_last=3) == "ab***fgh"

    def test_reveal_counts_covering_value_mask_everything(self) -> None:
        """No partial reveal when the visible counts reach the value length."""
        assert mask_generic("abcd", show_first=2, show_last=2) == "****"
        assert mask_generic("abc", show_first=5, show_last=5) == "***"

    def test_custom_mask_char(self) -> None:
        assert mask_generic("CUSTOM_MASK_CHAR_DATA", mask_char="#") == "#" * 21

    def test_single_character_value(self) -> None:
        assert mask_generic("x", show_first=1) == "*"


class TestEmailMasking:
    """Test email masking."""

    def test_scenario(self) -> None:
        assert mask(MaskKind.EMAIL, "user@example.com") == "u**r@example.com"

    def test_longer_local_part(self) -> None:
        assert mask_email("john.doe@example.com") == "j******e@example.com"

    def test_short_local_part_fully_masked(self) -> None:
        assert mask_email("ab@example.com") == "**@example.com"

    def test_splits_on_first_at(self) -> None:
        assert mask_email("abc@def@ghi") == "a*c@def@ghi"

    def test_missing_at_masks_everything(self) -> None:
        assert mask_email("not-an-email") == "************"

    def test_leading_at_masks_everything(self) -> None:
        assert mask_email("@example.com") == "************"

    def test_custom_mask_char(self) -> None:
        assert mask_email("user@example.com", mask_char="#") == "u##r@example.com"


class TestCreditCardMasking:
    """Test credit card masking."""

    def test_scenario(self) -> None:
        assert mask(MaskKind.CREDIT_CARD, "4111 1111 1111 1234") == "************1234"

    def test_dashes_are_dropped(self) -> None:
        assert mask_credit_card("4111-1111-1111-1111") == "************1111"

    def test_too_few_digits_masks_original(self) -> None:
        assert mask_credit_card("1234-5678") == "*********"

    def test_exactly_twelve_digits(self) -> None:
        assert mask_credit_card("123456789012") == "********9012"


class TestPhoneNumberMasking:
    """Test phone number masking."""

    def test_scenario(self) -> None:
        assert mask(MaskKind.PHONE_NUMBER, "+1 (555) 123-4567") == "155******67"

    def test_plain_digits(self) -> None:
        assert mask_phone_number("12345678901") == "123******01"

    def test_too_few_digits_masks_original(self) -> None:
        assert mask_phone_number("555-12") == "******"

    def test_exactly_seven_digits(self) -> None:
        assert mask_phone_number("555-1234") == "555**34"


class TestIbanMasking:
    """Test IBAN masking."""

    def test_scenario(self) -> None:
        assert mask(MaskKind.IBAN, "DE89 3704 0044 0532 0130 00") == "DE89**************3000"

    def test_compact_iban(self) -> None:
        assert mask_iban("DE89370400440532013000") == "DE89**************3000"

    def test_too_short_masks_original(self) -> None:
        assert mask_iban("DE89 37") == "*******"

    def test_eight_characters_fully_masked(self) -> None:
        """Four plus four visible characters cover an eight character IBAN."""
        assert mask_iban("AB12CD34") == "********"


class TestMaskDispatch:
    """Test the kind dispatcher."""

    def test_empty_value_unchanged(self) -> None:
        for kind in MaskKind:
            assert mask(kind, "") == ""

    def test_generic_uses_reveal_counts(self) -> None:
        assert mask(MaskKind.GENERIC, "password", 3, 0) == "pas*****"

    def test_reveal_counts_ignored_for_fixed_kinds(self) -> None:
        assert mask(MaskKind.EMAIL, "user@example.com", 5, 5) == "u**r@example.com"

    def test_accepts_kind_name(self) -> None:
        assert mask("iban", "DE89370400440532013000") == "DE89**************3000"

    def test_deterministic(self) -> None:
        results = {mask(MaskKind.PHONE_NUMBER, "+1 (555) 123-4567") for _ in range(5)}
        assert results == {"155******67"}

    def test_not_idempotent(self) -> None:
        """Masking an already masked value can mask further."""
        phone_once = mask(MaskKind.PHONE_NUMBER, "+1 (555) 123-4567")
        assert mask(MaskKind.PHONE_NUMBER, phone_once) == "*" * len(phone_once)

        iban_once = mask(MaskKind.IBAN, "DE89 3704 0044 0532 0130 00")
        assert mask(MaskKind.IBAN, iban_once) != iban_once

        card_once = mask(MaskKind.CREDIT_CARD, "4111 1111 1111 1234")
        assert mask(MaskKind.CREDIT_CARD, card_once) == "*" * 16
