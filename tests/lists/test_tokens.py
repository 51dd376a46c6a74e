"""Tests for tribunal.lists.tokens module."""

from __future__ import annotations

import pytest

from conftest import ARBITRATOR, CHALLENGER, REQUESTER
from tribunal.core.arbitration.enums import ItemStatus, Ruling
from tribunal.core.exceptions import InvalidState, ValidationException
from tribunal.lists.tokens import Token, TokenList

PNK = Token(
    name="Pinakion",
    ticker="PNK",
    address="0x93ED3FBe21207Ec2E8f2d3c3de6e058Cb73Bc04d",
    symbol_multihash="BcdwnVkEp8Nn41U2homNwyiVWYmPsXxEdxCUBn9V8y5AvqQaDwadDkQmwEWoyWgZxYnKsFPNauPhawDkME1nFNQbCu",
)


class TestToken:
    """Tests for the Token payload."""

    def test_round_trip_dict(self):
        assert Token.from_dict(PNK.to_dict()) == PNK

    def test_token_id_is_stable(self):
        copy = Token.from_dict(PNK.to_dict())
        assert copy.token_id == PNK.token_id
        assert len(PNK.token_id) == 64

    def test_different_description_different_id(self):
        other = Token(PNK.name, "PNK2", PNK.address, PNK.symbol_multihash)
        assert other.token_id != PNK.token_id


class TestTokenList:
    """Tests for TokenList over the generic engine."""

    @pytest.fixture
    def tokens(self, engine) -> TokenList:
        return TokenList(engine)

    def test_validate_normalizes(self, tokens):
        raw = Token(" Pinakion ", "pnk", PNK.address.upper().replace("0X", "0x"), PNK.symbol_multihash)

        token = tokens.validate(raw)

        assert token.name == "Pinakion"
        assert token.ticker == "PNK"
        assert token.address == PNK.address.lower()

    @pytest.mark.parametrize("field", ["name", "ticker", "symbol_multihash"])
    def test_required_fields(self, tokens, field):
        values = PNK.to_dict()
        values[field] = "  "
        with pytest.raises(ValidationException) as exc_info:
            tokens.validate(Token.from_dict(values))
        assert exc_info.value.field == field

    def test_bad_address(self, tokens):
        values = PNK.to_dict()
        values["address"] = "0x1"
        with pytest.raises(ValidationException):
            tokens.validate(Token.from_dict(values))

    def test_equivalent_submissions_share_an_item(self, tokens, engine):
        tokens.request_status_change(PNK, REQUESTER, 15)
        same = Token(PNK.name, "pnk", PNK.address.lower(), PNK.symbol_multihash)
        with pytest.raises(InvalidState):
            tokens.request_status_change(same, CHALLENGER, 15)
        assert engine.item_count() == 1

    def test_payload_stored_in_canonical_form(self, tokens, engine):
        request_id = tokens.request_status_change(PNK, REQUESTER, 15)
        item = engine.get_item(engine.get_request(request_id).item_id)
        assert item.payload == tokens.validate(PNK)
        assert item.to_dict()["payload"]["ticker"] == "PNK"

    def test_tokens_for_address(self, tokens):
        tokens.request_status_change(PNK, REQUESTER, 15)
        tokens.request_status_change(Token("Kleros", "PNK", PNK.address, PNK.symbol_multihash), REQUESTER, 15)

        found = tokens.tokens_for_address(PNK.address)

        assert {t.name for t in found} == {"Pinakion", "Kleros"}

    def test_challenged_token_refused(self, tokens, engine, clock):
        request_id = tokens.request_status_change(PNK, REQUESTER, 15)
        engine.challenge_request(request_id, CHALLENGER, 15, evidence="wrong symbol")
        engine.rule(ARBITRATOR, 0, Ruling.REFUSE)
        clock.advance(100)
        engine.rule(ARBITRATOR, 0, Ruling.REFUSE)

        assert tokens.status_of(PNK) == ItemStatus.ABSENT
        assert engine.withdraw(CHALLENGER, tokens.item_id(tokens.validate(PNK)), request_id, 0) == 25
