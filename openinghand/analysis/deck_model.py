"""
Deck model for simulation.

Turns a DeckSpec and a set of combos into integer card pools. Each distinct
card name (compared case-insensitively) across all combos gets exactly one
pool, sized by the largest copies_in_deck any constraint declares for it, so
a physical card is either in the hand for every combo or for none.

The unshuffled deck is the pools laid out in index order followed by blanks
(-1) up to deck_size; pool_at maps deck positions to pool labels without
building it.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from openinghand.models.combo import Combo
from openinghand.models.deck import DeckSpec, normalize_card_name
from openinghand.models.failure import InvalidQueryError

BLANK = -1


@dataclass(frozen=True)
class DeckModel:
    """
    Integer view of a deck.

    Attributes:
        deck_size: Cards in the deck (N)
        hand_size: Cards in the opening hand (H)
        pool_names: Display name per pool
        pool_sizes: Copies per pool
        hand_trap_pools: Pools classified as hand-traps (concrete decks only)
    """

    deck_size: int
    hand_size: int
    pool_names: tuple[str, ...]
    pool_sizes: tuple[int, ...]
    hand_trap_pools: tuple[int, ...] = ()

    @property
    def pool_count(self) -> int:
        return len(self.pool_sizes)

    @property
    def blank_count(self) -> int:
        return self.deck_size - sum(self.pool_sizes)

    def pool_index(self, card_name: str) -> int:
        """
        Pool index for a card name.

        Raises:
            KeyError: If no pool exists for the name
        """
        key = normalize_card_name(card_name)
        for index, name in enumerate(self.pool_names):
            if normalize_card_name(name) == key:
                return index
        raise KeyError(card_name)

    def pool_at(self, positions: np.ndarray) -> np.ndarray:
        """Pool index, or BLANK, of the card at each unshuffled deck position."""
        bounds = np.cumsum(self.pool_sizes, dtype=np.int64)
        pools = np.searchsorted(bounds, positions, side="right")
        return np.where(pools < self.pool_count, pools, BLANK).astype(np.int32)


class _PoolAllocator:
    def __init__(self) -> None:
        self.names: list[str] = []
        self.sizes: list[int] = []
        self.index_by_key: dict[str, int] = {}

    def claim(self, name: str, size: int) -> int:
        key = normalize_card_name(name)
        index = self.index_by_key.get(key)
        if index is None:
            index = len(self.names)
            self.index_by_key[key] = index
            self.names.append(name.strip())
            self.sizes.append(size)
        else:
            self.sizes[index] = max(self.sizes[index], size)
        return index


def build_deck_model(
    deck: DeckSpec,
    combos: Sequence[Combo],
    hand_trap_names: Iterable[str] = (),
) -> DeckModel:
    """
    Allocate card pools for a deck and its combos.

    For concrete decks, hand-trap names present in the main deck also get a
    pool. A name already claimed by a combo keeps the combo's copy count;
    otherwise the pool is sized by its main-deck count.

    Raises:
        InvalidQueryError: If the pools do not fit in the deck
    """
    allocator = _PoolAllocator()
    for combo in combos:
        for card in combo.cards:
            allocator.claim(card.card_name, card.copies_in_deck)

    hand_trap_pools: list[int] = []
    if deck.is_concrete:
        main_counts: dict[str, int] = {}
        display: dict[str, str] = {}
        for name in deck.main or ():
            key = normalize_card_name(name)
            main_counts[key] = main_counts.get(key, 0) + 1
            display.setdefault(key, name)

        for name in hand_trap_names:
            key = normalize_card_name(name)
            if key not in main_counts:
                continue
            index = allocator.index_by_key.get(key)
            if index is None:
                index = allocator.claim(display[key], main_counts[key])
            if index not in hand_trap_pools:
                hand_trap_pools.append(index)

    total = sum(allocator.sizes)
    if total > deck.deck_size:
        raise InvalidQueryError(
            "Total card copies across combos exceed deck size",
            detail=f"{total} > {deck.deck_size}",
        )

    return DeckModel(
        deck_size=deck.deck_size,
        hand_size=deck.hand_size,
        pool_names=tuple(allocator.names),
        pool_sizes=tuple(allocator.sizes),
        hand_trap_pools=tuple(hand_trap_pools),
    )
