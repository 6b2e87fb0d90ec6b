"""Tests for compiled combo predicates."""

import numpy as np

from openinghand.analysis.deck_model import build_deck_model
from openinghand.analysis.predicates import Term, compile_combo
from openinghand.models.combo import CardConstraint, Combo, Logic
from openinghand.models.deck import DeckSpec


def compile_single(*cards: CardConstraint):
    combo = Combo(id="c", name="C", cards=cards)
    model = build_deck_model(DeckSpec(40, 5), [combo])
    return compile_combo(combo, model)


class TestTerm:
    def test_interval_inclusive(self) -> None:
        counts = np.array([[0], [1], [2], [3]])

        result = Term(pool=0, min_in_hand=1, max_in_hand=2).evaluate(counts)

        assert result.tolist() == [False, True, True, False]


class TestComboPredicate:
    def test_compiles_to_pool_terms(self) -> None:
        predicate = compile_single(
            CardConstraint("A"),
            CardConstraint("B", min_in_hand=2, max_in_hand=3, logic=Logic.OR),
        )

        assert predicate.combo_id == "c"
        assert predicate.terms == (Term(0, 1, 3), Term(1, 2, 3))
        assert predicate.joins == (Logic.OR,)
        assert predicate.starter_pool == 0

    def test_and(self) -> None:
        predicate = compile_single(CardConstraint("A"), CardConstraint("B"))
        counts = np.array([[1, 0], [1, 1], [0, 2]])

        assert predicate.evaluate(counts).tolist() == [False, True, False]

    def test_or(self) -> None:
        predicate = compile_single(CardConstraint("A"), CardConstraint("B", logic=Logic.OR))
        counts = np.array([[1, 0], [0, 0], [0, 2]])

        assert predicate.evaluate(counts).tolist() == [True, False, True]

    def test_left_fold(self) -> None:
        """A AND B OR C reads as (A AND B) OR C."""
        predicate = compile_single(
            CardConstraint("A"),
            CardConstraint("B"),
            CardConstraint("C", logic=Logic.OR),
        )

        assert predicate.matches([0, 0, 1])
        assert predicate.matches([1, 1, 0])
        assert not predicate.matches([1, 0, 0])

    def test_first_logic_ignored(self) -> None:
        predicate = compile_single(CardConstraint("A", logic=Logic.OR), CardConstraint("B"))

        assert not predicate.matches([1, 0])
        assert predicate.matches([1, 1])

    def test_shared_name_in_one_combo(self) -> None:
        """Two constraints on one card read the same pool."""
        predicate = compile_single(
            CardConstraint("A", min_in_hand=1, max_in_hand=3),
            CardConstraint("a", min_in_hand=2, max_in_hand=3),
        )

        assert predicate.terms[0].pool == predicate.terms[1].pool
        assert not predicate.matches([1])
        assert predicate.matches([2])

    def test_empty_hand(self) -> None:
        predicate = compile_single(CardConstraint("A", min_in_hand=0, max_in_hand=0))

        assert predicate.matches([0])
