"""
Tests for the probability engine.

Expected values are exact hypergeometric probabilities for a 40-card deck and
a 5-card hand; Monte Carlo estimates must land within the stated tolerance.
"""

import threading
from math import comb

import pytest

from openinghand.models.combo import CardConstraint, Combo, Logic
from openinghand.models.deck import DeckSpec
from openinghand.models.failure import InvalidQueryError, SimulationCancelledError
from openinghand.models.query import Query
from openinghand.services.hand_traps import HandTrapClassifier
from openinghand.services.probability import ProbabilityEngine
from openinghand.services.result_cache import ResultCache

SIMS = 100_000
SEED = 20240601

TOTAL_HANDS = comb(40, 5)
P_NO_A = comb(37, 5) / TOTAL_HANDS
P_NO_A_NO_B = comb(34, 5) / TOTAL_HANDS
P_AT_LEAST_ONE = 1 - P_NO_A
P_EXACTLY_ONE = 3 * comb(37, 4) / TOTAL_HANDS
P_BOTH = 1 - 2 * P_NO_A + P_NO_A_NO_B
P_EITHER = 1 - P_NO_A_NO_B

A = CardConstraint("A", copies_in_deck=3, min_in_hand=1, max_in_hand=3)
B = CardConstraint("B", copies_in_deck=3, min_in_hand=1, max_in_hand=3)


def abstract_query(*combos: Combo, sim_count: int = SIMS, seed: int | None = SEED) -> Query:
    return Query(deck=DeckSpec(40, 5), combos=combos, sim_count=sim_count, seed=seed)


@pytest.fixture
def engine() -> ProbabilityEngine:
    return ProbabilityEngine(workers=1)


class TestScenarios:
    def test_single_card_at_least_one(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(abstract_query(Combo("c", "Single", (A,))))

        assert report.per_combo["c"] == pytest.approx(P_AT_LEAST_ONE, abs=0.005)
        assert report.sim_count == SIMS

    def test_exactly_one(self, engine: ProbabilityEngine) -> None:
        exactly_one = CardConstraint("C", copies_in_deck=3, min_in_hand=1, max_in_hand=1)

        report = engine.evaluate(abstract_query(Combo("c", "Exactly One", (exactly_one,))))

        assert report.per_combo["c"] == pytest.approx(P_EXACTLY_ONE, abs=0.005)

    def test_two_card_and(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(abstract_query(Combo("c", "Both", (A, B))))

        assert report.per_combo["c"] == pytest.approx(P_BOTH, abs=0.004)

    def test_two_card_or(self, engine: ProbabilityEngine) -> None:
        either = Combo("c", "Either", (A, CardConstraint("B", logic=Logic.OR)))

        report = engine.evaluate(abstract_query(either))

        assert report.per_combo["c"] == pytest.approx(P_EITHER, abs=0.006)

    def test_multi_starter(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(
            abstract_query(Combo("x", "Line A", (A,)), Combo("y", "Line B", (B,)))
        )

        assert report.multi_starter is not None
        assert set(report.multi_starter) == {2}
        assert report.multi_starter[2] == pytest.approx(P_BOTH, abs=0.004)
        assert report.independent_starters == 2


class TestProperties:
    def test_deterministic(self) -> None:
        query = abstract_query(Combo("x", "Line A", (A, B)), Combo("y", "Line B", (B,)))

        first = ProbabilityEngine().evaluate(query)
        second = ProbabilityEngine().evaluate(query)

        assert first.per_combo == second.per_combo
        assert first.union_all == second.union_all
        assert first.sample_hand == second.sample_hand

    def test_deterministic_with_workers(self) -> None:
        query = abstract_query(Combo("x", "Line A", (A, B)))

        first = ProbabilityEngine(workers=4).evaluate(query)
        second = ProbabilityEngine(workers=4).evaluate(query)

        assert first.per_combo == second.per_combo

    def test_monotonic_in_max(self, engine: ProbabilityEngine) -> None:
        reports = [
            engine.evaluate(
                abstract_query(Combo("c", "C", (CardConstraint("A", max_in_hand=high),)))
            )
            for high in (1, 2, 3)
        ]

        values = [r.per_combo["c"] for r in reports]
        assert values == sorted(values)

    def test_union_bounds(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(
            abstract_query(
                Combo("x", "Line A", (A, B)),
                Combo("y", "Line B", (CardConstraint("C", copies_in_deck=2, max_in_hand=2),)),
                Combo("z", "Line C", (B,)),
            )
        )

        assert report.union_all is not None
        assert report.union_all <= sum(report.per_combo.values())
        assert report.union_all >= max(report.per_combo.values())

    def test_sharing_same_card(self, engine: ProbabilityEngine) -> None:
        """Two combos on the same card see the same physical copies."""
        report = engine.evaluate(
            abstract_query(Combo("x", "One", (A,)), Combo("y", "Two", (A,)))
        )

        assert report.per_combo["x"] == report.per_combo["y"]
        assert report.union_all == report.per_combo["x"]
        assert report.multi_starter is None

    def test_single_combo_has_no_union(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(abstract_query(Combo("c", "Single", (A,)), sim_count=1000))

        assert report.union_all is None
        assert report.multi_hand_trap is None

    def test_no_combos(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(abstract_query(sim_count=1000))

        assert report.per_combo == {}
        assert len(report.sample_hand) == 5
        assert all(slot.is_blank for slot in report.sample_hand)

    def test_formulas_in_query_order(self, engine: ProbabilityEngine) -> None:
        report = engine.evaluate(
            abstract_query(Combo("z", "Last", (B,)), Combo("a", "First", (A, B)), sim_count=1000)
        )

        assert [f.combo_id for f in report.formulas] == ["z", "a"]
        assert report.formulas[1].type == "multi-card"

    def test_invalid_query_raises(self, engine: ProbabilityEngine) -> None:
        with pytest.raises(InvalidQueryError):
            engine.evaluate(Query(DeckSpec(4, 5), ()))


class TestCaching:
    def test_repeat_does_not_resimulate(self, engine: ProbabilityEngine) -> None:
        query = abstract_query(Combo("x", "Line A", (A, B)), sim_count=5000)

        first = engine.evaluate(query)
        second = engine.evaluate(query)

        assert engine.simulations_run == 1
        assert first == second

    def test_permuted_query_hits_cache(self, engine: ProbabilityEngine) -> None:
        x = Combo("x", "Line A", (A, B))
        y = Combo("y", "Line B", (CardConstraint("C", copies_in_deck=2, max_in_hand=2),))

        first = engine.evaluate(abstract_query(x, y, sim_count=5000))
        second = engine.evaluate(abstract_query(y, x, sim_count=5000))

        assert engine.simulations_run == 1
        assert first.per_combo == second.per_combo

    def test_renamed_combos_keyed_by_new_ids(self, engine: ProbabilityEngine) -> None:
        first = engine.evaluate(abstract_query(Combo("x", "Line A", (A,)), sim_count=5000))
        second = engine.evaluate(abstract_query(Combo("new", "Renamed", (A,)), sim_count=5000))

        assert engine.simulations_run == 1
        assert second.per_combo == {"new": first.per_combo["x"]}

    def test_shape_change_invalidates(self) -> None:
        cache = ResultCache()
        engine = ProbabilityEngine(cache=cache)
        combo = Combo("x", "Line A", (A,))

        engine.evaluate(abstract_query(combo, sim_count=1000))
        engine.evaluate(Query(DeckSpec(40, 6), (combo,), sim_count=1000, seed=SEED))
        engine.evaluate(abstract_query(combo, sim_count=1000))

        assert engine.simulations_run == 3
        assert len(cache) == 1

    def test_cancelled_run_not_cached(self, engine: ProbabilityEngine) -> None:
        query = abstract_query(Combo("x", "Line A", (A,)), sim_count=20_000)
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SimulationCancelledError):
            engine.evaluate(query, cancel_event=cancel)

        assert len(engine.cache) == 0
        engine.evaluate(query)
        assert engine.simulations_run == 1

    def test_clear_cache(self, engine: ProbabilityEngine) -> None:
        query = abstract_query(Combo("x", "Line A", (A,)), sim_count=1000)
        engine.evaluate(query)
        engine.clear_cache()
        engine.evaluate(query)

        assert engine.simulations_run == 2


class TestRefreshSample:
    def test_refresh_leaves_report(self, engine: ProbabilityEngine) -> None:
        query = abstract_query(Combo("x", "Line A", (A, B)), sim_count=2000)
        before = engine.evaluate(query)

        engine.refresh_sample(query)
        after = engine.evaluate(query)

        assert after == before
        assert engine.simulations_run == 1

    def test_refresh_sequence_reproducible(self) -> None:
        main = tuple(f"Card {i}" for i in range(40))
        query = Query(DeckSpec.concrete(main, 5), (), sim_count=1000, seed=SEED)
        first_engine, second_engine = ProbabilityEngine(), ProbabilityEngine()

        first = [first_engine.refresh_sample(query) for _ in range(3)]
        second = [second_engine.refresh_sample(query) for _ in range(3)]

        assert first == second
        assert len({tuple(slot.name for slot in hand) for hand in first}) > 1

    def test_refresh_differs_from_report_sample(self, engine: ProbabilityEngine) -> None:
        main = tuple(f"Card {i}" for i in range(40))
        query = Query(DeckSpec.concrete(main, 5), (), sim_count=1000, seed=SEED)

        report = engine.evaluate(query)
        refreshed = engine.refresh_sample(query)

        assert len(refreshed) == 5
        assert refreshed != report.sample_hand


class TestConcreteDeck:
    MAIN = (
        ["Ash Blossom & Joyous Spring"] * 3
        + ["Effect Veiler"] * 2
        + ["Snake-Eye Ash"] * 3
        + [f"Filler {i}" for i in range(32)]
    )

    def test_hand_trap_aggregates(self) -> None:
        engine = ProbabilityEngine(hand_traps=HandTrapClassifier())
        query = Query(
            DeckSpec.concrete(self.MAIN, 5),
            (Combo("x", "Snake Eye", (CardConstraint("Snake-Eye Ash"),)),),
            sim_count=SIMS,
            seed=SEED,
        )

        report = engine.evaluate(query)

        assert report.unique_hand_traps == 2
        assert report.multi_hand_trap is not None
        assert set(report.multi_hand_trap) == {1, 2}
        expected_any = 1 - comb(35, 5) / TOTAL_HANDS
        assert report.multi_hand_trap[1] == pytest.approx(expected_any, abs=0.006)
        assert report.multi_hand_trap[2] <= report.multi_hand_trap[1]

    def test_sample_hand_from_main_deck(self) -> None:
        engine = ProbabilityEngine()
        query = Query(DeckSpec.concrete(self.MAIN, 5), (), sim_count=1000, seed=SEED)

        report = engine.evaluate(query)

        assert len(report.sample_hand) == 5
        assert all(slot.name in self.MAIN for slot in report.sample_hand)
