"""Tests for address normalization."""

import pytest

from pizzabox.errors import ParseError
from pizzabox.vendor.address import (
    APARTMENT,
    HOUSE,
    StreetAddr,
    UserAddress,
    classify,
    from_user_address,
    parse_address,
    split_street,
)


class TestParseAddress:
    """Test one-line address parsing."""

    def test_white_house(self):
        addr = parse_address("1600 Pennsylvania Ave. Washington, DC 20500")

        assert addr.street_num == "1600"
        assert addr.street_name == "Pennsylvania Ave."
        assert addr.line_one() == "1600 Pennsylvania Ave."
        assert addr.city() == "Washington"
        assert addr.state_code() == "DC"
        assert addr.zip() == "20500"
        assert addr.addr_type == HOUSE

    def test_chicago(self):
        addr = parse_address("378 James St. Chicago, IL 60621")
        assert addr.line_one() == "378 James St."
        assert addr.city() == "Chicago"
        assert addr.state_code() == "IL"
        assert addr.zip() == "60621"

    def test_multi_word_city(self):
        addr = parse_address("12 Main St. Salt Lake City, UT 84101")
        assert addr.street_name == "Main St."
        assert addr.city() == "Salt Lake City"

    def test_explicit_city_segment(self):
        addr = parse_address("42 Elm Street, Springfield, il 62701")
        assert addr.street_name == "Elm Street"
        assert addr.city() == "Springfield"
        assert addr.state_code() == "IL"

    def test_no_period_uses_last_word_as_city(self):
        addr = parse_address("42 Elm Street Springfield, IL 62701")
        assert addr.street_name == "Elm Street"
        assert addr.city() == "Springfield"

    def test_apartment_detected(self):
        addr = parse_address("10 Oak Ave Apt 4, Boston, MA 02110")
        assert addr.addr_type == APARTMENT

    @pytest.mark.parametrize("raw", [
        "",
        "1600 Pennsylvania Ave. Washington DC 20500",
        "1600 Pennsylvania Ave. Washington, D.C. 20500",
        "1600 Pennsylvania Ave. Washington, DC 2050",
        "Pennsylvania Ave. Washington, DC 20500",
        "a, b, c, d",
    ])
    def test_malformed(self, raw):
        with pytest.raises(ParseError):
            parse_address(raw)


class TestStructuredAddress:
    """Test conversion of field-by-field input."""

    @pytest.mark.parametrize("state", ["DC", "dc", "Dc"])
    def test_matches_parsed_form(self, state):
        parsed = parse_address(f"1600 Pennsylvania Ave. Washington, {state} 20500")
        structured = from_user_address(UserAddress(
            street="1600 Pennsylvania Ave.",
            city_name="Washington",
            region=state,
            postal_code="20500",
        ))

        assert structured.line_one() == parsed.line_one()
        assert structured.city() == parsed.city()
        assert structured.state_code() == parsed.state_code() == "DC"
        assert structured.zip() == parsed.zip()
        assert structured.locality() == parsed.locality() == "Washington, DC 20500"

    def test_split_street(self):
        assert split_street("221B Baker Street") == ("221B", "Baker Street")
        assert split_street("Baker Street") == ("", "Baker Street")

    def test_classify(self):
        assert classify("5 Main St Suite 200") == APARTMENT
        assert classify("5 Main St") == HOUSE


class TestStreetAddrEncoding:
    """Test wire and cache encodings."""

    def test_wire_layout(self, white_house):
        wire = white_house.to_wire()
        assert wire["Street"] == "1600 Pennsylvania Ave."
        assert wire["Region"] == "DC"
        assert wire["PostalCode"] == "20500"
        assert StreetAddr.from_wire(wire) == white_house

    def test_bytes(self, white_house):
        assert StreetAddr.from_bytes(white_house.to_bytes()) == white_house

    def test_format(self, white_house):
        assert white_house.format(indent=2) == "  1600 Pennsylvania Ave.\n  Washington, DC 20500"
