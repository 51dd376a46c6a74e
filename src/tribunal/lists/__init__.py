"""Curated lists built on the arbitrable-item engine."""

from .addresses import AddressList, normalize_address
from .base import CuratedList
from .tokens import Token, TokenList

__all__ = [
    "AddressList",
    "CuratedList",
    "Token",
    "TokenList",
    "normalize_address",
]
