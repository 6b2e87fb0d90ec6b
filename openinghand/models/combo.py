"""
Combo model.

A combo is a predicate over opening-hand multiplicities: an ordered list of
card constraints joined left to right by AND/OR. The first constraint's
logic is ignored.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from openinghand.config import (
    DEFAULT_COPIES_IN_DECK,
    DEFAULT_MAX_IN_HAND,
    DEFAULT_MIN_IN_HAND,
)

COMBO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 ]+$")


class Logic(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True, slots=True)
class CardConstraint:
    """
    Requirement on one card in the opening hand.

    Attributes:
        card_name: Opaque card identifier; equal names share one pool
        copies_in_deck: Copies of the card in the deck
        min_in_hand: Minimum copies in the opening hand
        max_in_hand: Maximum copies in the opening hand
        logic: How this constraint joins the ones before it
    """

    card_name: str
    copies_in_deck: int = DEFAULT_COPIES_IN_DECK
    min_in_hand: int = DEFAULT_MIN_IN_HAND
    max_in_hand: int = DEFAULT_MAX_IN_HAND
    logic: Logic = Logic.AND

    def sort_key(self) -> tuple[str, int, int, int, str]:
        return (
            self.card_name.strip().casefold(),
            self.copies_in_deck,
            self.min_in_hand,
            self.max_in_hand,
            self.logic.value,
        )


@dataclass(frozen=True)
class Combo:
    """
    A named combo.

    Attributes:
        id: Stable identifier used as the key of per-combo results
        name: Display name (letters, digits and spaces)
        cards: Ordered constraints; the first card is the combo's starter
    """

    id: str
    name: str
    cards: tuple[CardConstraint, ...] = field(default_factory=tuple)

    def joins(self) -> list[Logic]:
        """Logic operators between consecutive constraints."""
        return [card.logic for card in self.cards[1:]]


def create_combo(combo_id: str, index: int, card_name: str = "") -> Combo:
    """Create a combo with a single default constraint."""
    return Combo(
        id=combo_id,
        name=f"Combo {index + 1}",
        cards=(CardConstraint(card_name=card_name),),
    )
