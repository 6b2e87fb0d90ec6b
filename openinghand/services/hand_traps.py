"""
Hand-trap classification.

A hand-trap is a card playable from the hand during the opponent's turn.
The classifier is data: a list of known names plus text-pattern tables
applied to card descriptions when metadata is available. Pass different
tables to the constructor to change what counts as a hand-trap.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from openinghand.models.card import CardKind, CardMeta
from openinghand.models.deck import normalize_card_name
from openinghand.services.card_database import CardMetadataStore

logger = logging.getLogger(__name__)

KNOWN_HAND_TRAPS: frozenset[str] = frozenset(
    {
        # Monsters
        "Ash Blossom & Joyous Spring",
        "Effect Veiler",
        "Nibiru, the Primal Being",
        "Ghost Ogre & Snow Rabbit",
        "D.D. Crow",
        "Droll & Lock Bird",
        # Traps
        "Infinite Impermanence",
        "Dominus Impulse",
        "Dominus Purge",
    }
)

MONSTER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\(quick effect\):\s*you can discard this card", re.IGNORECASE),
    re.compile(
        r"during your opponent's turn.*from your hand|from your hand.*during your opponent's turn",
        re.IGNORECASE,
    ),
    re.compile(r"when your opponent.*you can.*from your hand", re.IGNORECASE),
    re.compile(r"if your opponent.*discard this card from your hand", re.IGNORECASE),
)

TRAP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"you can activate this card from your hand", re.IGNORECASE),
)

EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Only usable from hand on your own turn
    re.compile(r"during your turn.*from your hand|from your hand.*during your turn", re.IGNORECASE),
    re.compile(r"reveal.*from your hand", re.IGNORECASE),
    re.compile(r"during your main phase.*from your hand", re.IGNORECASE),
)

_FROM_HAND = re.compile(r"from your hand", re.IGNORECASE)


@dataclass(frozen=True)
class HandTrapClassifier:
    """
    Decides which card names are hand-traps.

    Attributes:
        known_names: Names that are always hand-traps
        store: Metadata used for the text heuristics; names only if None
        monster_patterns: Description patterns for monster hand-traps
        trap_patterns: Description patterns for trap hand-traps
        exclusion_patterns: Description patterns that rule a card out
    """

    known_names: frozenset[str] = KNOWN_HAND_TRAPS
    store: CardMetadataStore | None = None
    monster_patterns: tuple[re.Pattern[str], ...] = MONSTER_PATTERNS
    trap_patterns: tuple[re.Pattern[str], ...] = TRAP_PATTERNS
    exclusion_patterns: tuple[re.Pattern[str], ...] = EXCLUSION_PATTERNS
    _known_keys: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        keys = frozenset(normalize_card_name(name) for name in self.known_names)
        object.__setattr__(self, "_known_keys", keys)

    def is_hand_trap(self, name: str) -> bool:
        """True if the named card is classified as a hand-trap."""
        if normalize_card_name(name) in self._known_keys:
            return True
        if self.store is None:
            return False
        card = self.store.lookup_by_name(name)
        if card is None:
            return False
        return self._matches_text(card)

    def hand_trap_names(self, names: Iterable[str]) -> list[str]:
        """Distinct hand-trap names among ``names``, in first-seen order."""
        seen: set[str] = set()
        result: list[str] = []
        for name in names:
            key = normalize_card_name(name)
            if key in seen:
                continue
            seen.add(key)
            if self.is_hand_trap(name):
                result.append(name)
        return result

    def _matches_text(self, card: CardMeta) -> bool:
        text = card.description
        if card.kind == CardKind.SPELL or not text:
            return False

        if any(pattern.search(text) for pattern in self.exclusion_patterns):
            return False

        if card.kind == CardKind.MONSTER:
            if card.atk == 0 and card.defense == 0 and _FROM_HAND.search(text):
                logger.debug("Hand-trap by 0/0 rule: %s", card.name)
                return True
            return any(pattern.search(text) for pattern in self.monster_patterns)

        if card.kind == CardKind.TRAP:
            return any(pattern.search(text) for pattern in self.trap_patterns)

        return False
