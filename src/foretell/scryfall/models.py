"""Scryfall objects used by the sync pass and the foreground flow."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional


class SetType(str, Enum):
    """Scryfall set types."""

    CORE = "core"
    EXPANSION = "expansion"
    MASTERS = "masters"
    ETERNAL = "eternal"
    ALCHEMY = "alchemy"
    MASTERPIECE = "masterpiece"
    ARSENAL = "arsenal"
    FROM_THE_VAULT = "from_the_vault"
    SPELLBOOK = "spellbook"
    PREMIUM_DECK = "premium_deck"
    DUEL_DECK = "duel_deck"
    DRAFT_INNOVATION = "draft_innovation"
    TREASURE_CHEST = "treasure_chest"
    COMMANDER = "commander"
    PLANECHASE = "planechase"
    ARCHENEMY = "archenemy"
    VANGUARD = "vanguard"
    FUNNY = "funny"
    STARTER = "starter"
    BOX = "box"
    PROMO = "promo"
    TOKEN = "token"
    MEMORABILIA = "memorabilia"
    MINIGAME = "minigame"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        # Scryfall adds set types from time to time
        return cls.UNKNOWN


@dataclass(frozen=True)
class SetRecord:
    """A release listed by ``GET /sets``."""

    code: str
    name: str
    set_type: SetType
    digital: bool = False
    released_at: Optional[date] = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "SetRecord":
        released = payload.get("released_at")
        return cls(
            code=payload["code"],
            name=payload.get("name", payload["code"]),
            set_type=SetType(payload.get("set_type", "unknown")),
            digital=bool(payload.get("digital", False)),
            released_at=date.fromisoformat(released) if released else None,
        )


@dataclass
class CardFace:
    name: str
    image_uris: dict[str, str] = field(default_factory=dict)


@dataclass
class CardEntry:
    """A card object from a search result."""

    name: str
    type_line: Optional[str] = None
    set_code: Optional[str] = None
    image_uris: dict[str, str] = field(default_factory=dict)
    card_faces: list[CardFace] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "CardEntry":
        faces = [
            CardFace(name=face.get("name", ""), image_uris=face.get("image_uris") or {})
            for face in payload.get("card_faces") or []
        ]
        return cls(
            name=payload["name"],
            type_line=payload.get("type_line"),
            set_code=payload.get("set"),
            image_uris=payload.get("image_uris") or {},
            card_faces=faces,
        )

    def large_image_uris(self) -> list[str]:
        """Return the large image of the card, or of each face for double-faced cards."""
        large = self.image_uris.get("large")
        if large:
            return [large]
        return [face.image_uris["large"] for face in self.card_faces if "large" in face.image_uris]
