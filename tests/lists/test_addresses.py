"""Tests for tribunal.lists.addresses module."""

from __future__ import annotations

import pytest

from conftest import CHALLENGER, REQUESTER
from tribunal.core.arbitration.enums import ItemStatus
from tribunal.core.exceptions import ValidationException
from tribunal.lists.addresses import AddressList, normalize_address

LISTED = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


class TestNormalizeAddress:
    """Tests for normalize_address."""

    def test_lowercases(self):
        assert normalize_address(LISTED) == LISTED.lower()

    def test_strips_whitespace(self):
        assert normalize_address(f"  {LISTED}\n") == LISTED.lower()

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "0x123",
            "AbCdEf0123456789aBcDeF0123456789AbCdEf0101",
            "0xZZcdef0123456789abcdef0123456789abcdef01",
            LISTED + "00",
            None,
        ],
    )
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationException) as exc_info:
            normalize_address(value)
        assert exc_info.value.field == "address"


class TestAddressList:
    """Tests for AddressList over the generic engine."""

    @pytest.fixture
    def addresses(self, engine) -> AddressList:
        return AddressList(engine)

    def test_casing_maps_to_one_item(self, addresses, engine):
        addresses.request_status_change(LISTED, REQUESTER, 15)

        assert addresses.status_of(LISTED.lower()) == ItemStatus.REGISTRATION_REQUESTED
        assert engine.item_count() == 1
        assert addresses.get(LISTED.upper().replace("0X", "0x")).id == LISTED.lower()

    def test_invalid_address_never_reaches_engine(self, addresses, engine):
        with pytest.raises(ValidationException):
            addresses.request_status_change("0x1", REQUESTER, 15)
        assert engine.item_count() == 0

    def test_unknown_address_is_absent(self, addresses):
        assert addresses.status_of(LISTED) == ItemStatus.ABSENT
        assert not addresses.is_registered(LISTED)

    def test_full_lifecycle(self, addresses, engine, clock):
        request_id = addresses.request_status_change(LISTED, REQUESTER, 15)
        clock.advance(101)
        engine.execute_request(request_id)
        assert addresses.is_registered(LISTED)

        clearing = addresses.request_status_change(LISTED, CHALLENGER, 15)
        assert addresses.status_of(LISTED) == ItemStatus.CLEARING_REQUESTED
        assert addresses.is_registered(LISTED)

        clock.advance(101)
        engine.execute_request(clearing)
        assert not addresses.is_registered(LISTED)
