"""
Sample opening hands.

Draws one representative opening hand, either from the combo pools padded
with blanks or from a concrete main deck. Sample hands use their own PRNG
streams, derived from the query seed and a refresh counter, so refreshing
the sample never disturbs the estimator's stream.
"""

import numpy as np

from openinghand.analysis.deck_model import BLANK, DeckModel
from openinghand.analysis.simulation import draw_positions, seed_entropy
from openinghand.models.card import CardSlot
from openinghand.models.deck import normalize_card_name

# Distinguishes sample-hand streams from the estimator stream
SAMPLE_STREAM = 0x5A4D


def sample_rng(seed: int | None, refresh: int = 0) -> np.random.Generator:
    """
    PRNG for the ``refresh``-th sample hand of a query.

    With no seed every call draws fresh OS entropy.
    """
    if seed is None:
        return np.random.Generator(np.random.PCG64())
    sequence = np.random.SeedSequence([seed_entropy(seed), SAMPLE_STREAM, refresh])
    return np.random.Generator(np.random.PCG64(sequence))


def generate_sample_hand(model: DeckModel, rng: np.random.Generator) -> list[CardSlot]:
    """One opening hand from the model's pools plus blanks, in draw order."""
    if model.hand_size == 0:
        return []
    positions = draw_positions(rng, model.deck_size, model.hand_size, 1)
    hand = model.pool_at(positions)[0]
    return [
        CardSlot.blank() if pool == BLANK else CardSlot.card(model.pool_names[pool])
        for pool in hand.tolist()
    ]


def generate_hand_from_deck(
    main: list[str] | tuple[str, ...],
    hand_size: int,
    rng: np.random.Generator,
) -> list[CardSlot]:
    """
    One opening hand from a concrete main deck, in draw order.

    The deck is put in a canonical order before shuffling so equal decks
    listed differently give the same hand for the same stream. Slots past
    the end of a short deck are blanks.
    """
    if hand_size <= 0:
        return []
    if not main:
        return [CardSlot.blank() for _ in range(hand_size)]

    ordered = sorted(main, key=normalize_card_name)
    drawn = min(hand_size, len(ordered))
    indices = draw_positions(rng, len(ordered), drawn, 1)[0]

    hand = [CardSlot.card(ordered[i]) for i in indices.tolist()]
    hand.extend(CardSlot.blank() for _ in range(hand_size - drawn))
    return hand
