"""Scryfall API access."""

from .client import RetryConfig, ScryfallClient
from .models import CardEntry, CardFace, SetRecord, SetType

__all__ = [
    "CardEntry",
    "CardFace",
    "RetryConfig",
    "ScryfallClient",
    "SetRecord",
    "SetType",
]
