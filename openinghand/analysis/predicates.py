"""
Compiled combo predicates.

A combo compiles to a list of (pool, min, max) terms and the logic joining
them. Evaluation folds left: the first term seeds the result and every later
term is combined with AND or OR. Predicates are evaluated on a whole batch
of hands at once; ``counts`` has one row per hand and one column per pool.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from openinghand.analysis.deck_model import DeckModel
from openinghand.models.combo import Combo, Logic


@dataclass(frozen=True, slots=True)
class Term:
    pool: int
    min_in_hand: int
    max_in_hand: int

    def evaluate(self, counts: np.ndarray) -> np.ndarray:
        column = counts[:, self.pool]
        return (column >= self.min_in_hand) & (column <= self.max_in_hand)


@dataclass(frozen=True)
class ComboPredicate:
    """
    A combo in pool-index form.

    Attributes:
        combo_id: Id of the source combo
        terms: One term per constraint, in combo order
        joins: Logic between term i and the fold of terms [0, i)
    """

    combo_id: str
    terms: tuple[Term, ...]
    joins: tuple[Logic, ...]

    @property
    def starter_pool(self) -> int:
        return self.terms[0].pool

    def evaluate(self, counts: np.ndarray) -> np.ndarray:
        """Boolean array with one entry per hand (row of ``counts``)."""
        result = self.terms[0].evaluate(counts)
        for term, logic in zip(self.terms[1:], self.joins, strict=True):
            if logic == Logic.AND:
                result = result & term.evaluate(counts)
            else:
                result = result | term.evaluate(counts)
        return result

    def matches(self, hand_counts: Sequence[int]) -> bool:
        """Evaluate against a single hand's per-pool counts."""
        row = np.asarray(hand_counts, dtype=np.int32).reshape(1, -1)
        return bool(self.evaluate(row)[0])


def compile_combo(combo: Combo, model: DeckModel) -> ComboPredicate:
    """Map a combo's constraints onto the deck model's pools."""
    terms = tuple(
        Term(
            pool=model.pool_index(card.card_name),
            min_in_hand=card.min_in_hand,
            max_in_hand=card.max_in_hand,
        )
        for card in combo.cards
    )
    return ComboPredicate(combo_id=combo.id, terms=terms, joins=tuple(combo.joins()))


def compile_combos(combos: Sequence[Combo], model: DeckModel) -> list[ComboPredicate]:
    return [compile_combo(combo, model) for combo in combos]
