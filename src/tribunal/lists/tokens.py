"""Token list: a curated list of token descriptions.

A token is identified by the SHA-256 of its canonical JSON form, so two
submissions describing the same token (name, ticker, address and symbol
image) are the same item, while a different description of the same
contract is a separate item that can be challenged on its own.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from ..core.exceptions import ValidationException
from .addresses import normalize_address
from .base import CuratedList


@dataclass(frozen=True)
class Token:
    """Description of a token as submitted to the list."""

    name: str
    ticker: str
    address: str
    symbol_multihash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "ticker": self.ticker,
            "address": self.address,
            "symbol_multihash": self.symbol_multihash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        return cls(
            name=data["name"],
            ticker=data["ticker"],
            address=data["address"],
            symbol_multihash=data["symbol_multihash"],
        )

    @property
    def token_id(self) -> str:
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()


class TokenList(CuratedList[Token]):
    """Curated list whose items are tokens."""

    def item_id(self, payload: Token) -> str:
        return payload.token_id

    def validate(self, payload: Token) -> Token:
        """Check the required fields and normalize the contract address."""
        for name in ("name", "ticker", "symbol_multihash"):
            value = getattr(payload, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationException(f"Token {name} is required", field=name, value=value)
        return Token(
            name=payload.name.strip(),
            ticker=payload.ticker.strip().upper(),
            address=normalize_address(payload.address),
            symbol_multihash=payload.symbol_multihash.strip(),
        )

    def tokens_for_address(self, address: str) -> list[Token]:
        """Every submitted token description pointing at ``address``."""
        address = normalize_address(address)
        return [
            item.payload
            for item in self.engine.store.items()
            if isinstance(item.payload, Token) and item.payload.address == address
        ]
