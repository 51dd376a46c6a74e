"""Address list: a curated list of 20-byte hex addresses.

The item id of an address is its lowercase hex form, so the same address
written with different casing maps to a single item.
"""

from __future__ import annotations

import re

from ..core.exceptions import ValidationException
from .base import CuratedList

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(address: str) -> str:
    """Lowercase ``address`` after checking its shape.

    Raises:
        ValidationException: If it is not ``0x`` followed by 40 hex digits.
    """
    if not isinstance(address, str) or not ADDRESS_PATTERN.match(address.strip()):
        raise ValidationException("Invalid address", field="address", value=address)
    return address.strip().lower()


class AddressList(CuratedList[str]):
    """Curated list whose items are addresses."""

    def item_id(self, payload: str) -> str:
        return payload

    def validate(self, payload: str) -> str:
        return normalize_address(payload)
