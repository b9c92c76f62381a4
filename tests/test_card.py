"""Tests for payment card parsing and validation."""

import pytest

from pizzabox.errors import ValidationError
from pizzabox.vendor.card import BAD_EXPIRATION, new_card, parse_expiration, validate_card


AMEX = "370218180742397"


class TestParseExpiration:
    """Test the expiration date formats."""

    @pytest.mark.parametrize("raw,expected", [
        ("01/25", (1, 2025)),
        ("0125", (1, 2025)),
        ("1/25", (1, 2025)),
        ("11/02", (11, 2002)),
        ("11/2002", (11, 2002)),
        ("125", (1, 2025)),
        ("012025", BAD_EXPIRATION),
        ("11/2", (11, 202)),
        ("ab/cd", BAD_EXPIRATION),
        ("1/2/3", BAD_EXPIRATION),
        ("", BAD_EXPIRATION),
    ])
    def test_table(self, raw, expected):
        assert parse_expiration(raw) == expected


class TestValidateCard:
    """Test structural card checks."""

    @pytest.mark.parametrize("expiration", ["0123", "01/23", "1/23", "01/02"])
    def test_valid(self, expiration):
        validate_card(new_card(AMEX, expiration))

    @pytest.mark.parametrize("expiration", ["0123", "01/23", "13/21"])
    def test_empty_number(self, expiration):
        with pytest.raises(ValidationError) as exc_info:
            validate_card(new_card("", expiration))
        assert exc_info.value.field == "number"

    @pytest.mark.parametrize("expiration", ["13/21", "0/21", "012025"])
    def test_bad_expiration(self, expiration):
        with pytest.raises(ValidationError) as exc_info:
            validate_card(new_card(AMEX, expiration))
        assert exc_info.value.field == "expiration"


class TestCard:
    """Test card helpers."""

    def test_card_type(self):
        assert new_card(AMEX, "0125").card_type == "AmericanExpress"
        assert new_card("4111111111111111", "0125").card_type == "Visa"
        assert new_card("1234", "0125").card_type == ""

    def test_payment_json(self):
        payment = new_card(AMEX, "1/25", cvv=1234).to_payment(amount=12.5, postal_code="20500")
        assert payment["Number"] == AMEX
        assert payment["CardType"] == "AMERICANEXPRESS"
        assert payment["Expiration"] == "0125"
        assert payment["SecurityCode"] == "1234"
        assert payment["PostalCode"] == "20500"

    def test_repr_masks_number(self):
        text = repr(new_card(AMEX, "0125", cvv=123))
        assert AMEX not in text
        assert "***2397" in text
        assert "cvv" not in text
