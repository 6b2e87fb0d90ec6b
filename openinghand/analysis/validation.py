"""
Query validation.

Checks the deck and combo invariants before any simulation runs. Every
violation raises InvalidQueryError; nothing is clamped silently except the
trial count, which is capped at MAX_SIM_COUNT.
"""

import logging

from openinghand.config import MAX_CARDS_PER_COMBO, MAX_HAND_SIZE, MAX_SIM_COUNT
from openinghand.models.combo import COMBO_NAME_PATTERN, Combo
from openinghand.models.deck import DeckSpec, normalize_card_name
from openinghand.models.failure import InvalidQueryError
from openinghand.models.query import Query

logger = logging.getLogger(__name__)


def validate_deck(deck: DeckSpec) -> None:
    """
    Validate deck and hand size.

    Raises:
        InvalidQueryError: If a size is out of range
    """
    if deck.deck_size < 1:
        raise InvalidQueryError("Deck size must be at least 1", detail=f"deck_size={deck.deck_size}")

    if deck.hand_size < 0:
        raise InvalidQueryError("Hand size cannot be negative", detail=f"hand_size={deck.hand_size}")

    if deck.hand_size > MAX_HAND_SIZE:
        raise InvalidQueryError(
            f"Hand size cannot exceed {MAX_HAND_SIZE}", detail=f"hand_size={deck.hand_size}"
        )

    if deck.hand_size > deck.deck_size:
        raise InvalidQueryError(
            "Hand size cannot exceed deck size",
            detail=f"hand_size={deck.hand_size}, deck_size={deck.deck_size}",
        )

    if deck.main is not None and len(deck.main) != deck.deck_size:
        raise InvalidQueryError(
            "Deck size must equal the number of main deck cards",
            detail=f"deck_size={deck.deck_size}, main={len(deck.main)}",
        )


def validate_combo(combo: Combo, deck_size: int, hand_size: int) -> None:
    """
    Validate one combo against the deck shape.

    Raises:
        InvalidQueryError: If the combo is malformed or a constraint is impossible
    """
    label = combo.name or combo.id

    if not combo.name.strip() or not COMBO_NAME_PATTERN.match(combo.name):
        raise InvalidQueryError(
            "Combo names must be non-empty and use only letters, digits and spaces",
            detail=repr(combo.name),
        )

    if not combo.cards:
        raise InvalidQueryError(f"{label}: combo must have at least one card")

    if len(combo.cards) > MAX_CARDS_PER_COMBO:
        raise InvalidQueryError(
            f"{label}: combos are limited to {MAX_CARDS_PER_COMBO} cards",
            detail=f"{len(combo.cards)} cards",
        )

    copies_by_name: dict[str, int] = {}
    for index, card in enumerate(combo.cards, 1):
        where = f"{label}, card {index}"

        if not card.card_name.strip():
            raise InvalidQueryError(f"{where}: card name is required")

        if not 0 <= card.copies_in_deck <= deck_size:
            raise InvalidQueryError(
                f"{where}: copies in deck must be between 0 and {deck_size}",
                detail=f"copies_in_deck={card.copies_in_deck}",
            )

        if not 0 <= card.min_in_hand <= hand_size:
            raise InvalidQueryError(
                f"{where}: min copies in hand must be between 0 and {hand_size}",
                detail=f"min_in_hand={card.min_in_hand}",
            )

        if card.max_in_hand < card.min_in_hand:
            raise InvalidQueryError(
                f"{where}: max copies cannot be less than min copies",
                detail=f"min_in_hand={card.min_in_hand}, max_in_hand={card.max_in_hand}",
            )

        if card.max_in_hand > card.copies_in_deck:
            raise InvalidQueryError(
                f"{where}: max copies in hand cannot exceed copies in deck",
                detail=f"max_in_hand={card.max_in_hand}, copies_in_deck={card.copies_in_deck}",
            )

        if card.max_in_hand > hand_size:
            raise InvalidQueryError(
                f"{where}: max copies in hand cannot exceed hand size",
                detail=f"max_in_hand={card.max_in_hand}, hand_size={hand_size}",
            )

        key = normalize_card_name(card.card_name)
        copies_by_name[key] = max(copies_by_name.get(key, 0), card.copies_in_deck)

    total_copies = sum(copies_by_name.values())
    if total_copies > deck_size:
        raise InvalidQueryError(
            f"{label}: total card copies exceed deck size",
            detail=f"{total_copies} > {deck_size}",
        )


def validate_query(query: Query) -> int:
    """
    Validate a query.

    Returns:
        The trial count to run, capped at MAX_SIM_COUNT

    Raises:
        InvalidQueryError: If any invariant is violated
    """
    validate_deck(query.deck)

    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for combo in query.combos:
        if combo.id in seen_ids:
            raise InvalidQueryError("Combo ids must be unique", detail=repr(combo.id))
        seen_ids.add(combo.id)

        name = combo.name.strip()
        if name in seen_names:
            raise InvalidQueryError("Combo names must be unique", detail=repr(combo.name))
        seen_names.add(name)

        validate_combo(combo, query.deck.deck_size, query.deck.hand_size)

    if query.sim_count < 1:
        raise InvalidQueryError(
            "Simulation count must be at least 1", detail=f"sim_count={query.sim_count}"
        )

    if query.sim_count > MAX_SIM_COUNT:
        logger.warning(
            "SIM_COUNT_CAPPED",
            extra={"requested": query.sim_count, "limit": MAX_SIM_COUNT},
        )
        return MAX_SIM_COUNT

    return query.sim_count
