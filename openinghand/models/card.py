from dataclasses import dataclass
from enum import Enum

# Monster type keywords that place a card in the Extra Deck
EXTRA_DECK_KEYWORDS = ("xyz", "link", "fusion", "synchro")


class CardKind(str, Enum):
    """Top-level card category."""

    MONSTER = "Monster"
    SPELL = "Spell"
    TRAP = "Trap"
    UNKNOWN = "Unknown"

    @classmethod
    def from_type_line(cls, type_line: str | None) -> "CardKind":
        """Classify a type string such as "Synchro Tuner Monster" or "Spell Card"."""
        lowered = (type_line or "").lower()
        if "monster" in lowered:
            return cls.MONSTER
        if "spell" in lowered:
            return cls.SPELL
        if "trap" in lowered:
            return cls.TRAP
        return cls.UNKNOWN


class Attribute(str, Enum):
    DARK = "DARK"
    LIGHT = "LIGHT"
    EARTH = "EARTH"
    WATER = "WATER"
    FIRE = "FIRE"
    WIND = "WIND"
    DIVINE = "DIVINE"


@dataclass(frozen=True, slots=True)
class CardMeta:
    """
    Static metadata for one card.

    Attributes:
        id: Numeric card id (passcode) as used in deck lists
        name: Card name
        kind: Monster, Spell, Trap or Unknown
        type_line: Raw type string from the metadata source
        level: Level or rank for monsters
        attribute: Monster attribute
        is_extra_deck: True for Fusion, Synchro, Xyz and Link monsters
        description: Card text, used by the hand-trap heuristics
        atk: Attack points (monsters only)
        defense: Defense points (monsters only)
    """

    id: int
    name: str
    kind: CardKind = CardKind.UNKNOWN
    type_line: str = ""
    level: int | None = None
    attribute: Attribute | None = None
    is_extra_deck: bool = False
    description: str = ""
    atk: int | None = None
    defense: int | None = None


def is_extra_deck_type(kind: CardKind, type_line: str) -> bool:
    """Extra Deck status derived from the card's type string."""
    if kind != CardKind.MONSTER:
        return False
    lowered = type_line.lower()
    return any(keyword in lowered for keyword in EXTRA_DECK_KEYWORDS)


class SlotKind(str, Enum):
    CARD = "card"
    BLANK = "blank"


@dataclass(frozen=True, slots=True)
class CardSlot:
    """One position of a sample opening hand: a named card or a blank."""

    kind: SlotKind
    name: str | None = None

    @classmethod
    def card(cls, name: str) -> "CardSlot":
        return cls(kind=SlotKind.CARD, name=name)

    @classmethod
    def blank(cls) -> "CardSlot":
        return cls(kind=SlotKind.BLANK)

    @property
    def is_blank(self) -> bool:
        return self.kind == SlotKind.BLANK
