"""
Probability engine: the single entry point for queries.

evaluate(query) validates the query, fingerprints it, answers from the
result cache when possible and otherwise runs the simulation kernel, the
aggregate evaluator and the sample-hand generator before caching the result.

refresh_sample(query) draws a new sample hand from the next sub-seed without
touching the cached estimates.
"""

import logging
import threading
from collections import OrderedDict

from openinghand.analysis.aggregates import build_aggregate_plan
from openinghand.analysis.deck_model import DeckModel, build_deck_model
from openinghand.analysis.fingerprint import QueryFingerprint, fingerprint_query
from openinghand.analysis.formulas import build_formula
from openinghand.analysis.predicates import ComboPredicate, compile_combos
from openinghand.analysis.simulation import ProgressCallback, run_simulation
from openinghand.analysis.validation import validate_query
from openinghand.config import settings
from openinghand.models.card import CardSlot
from openinghand.models.deck import normalize_card_name
from openinghand.models.query import Query, Report
from openinghand.services.hand_traps import HandTrapClassifier
from openinghand.services.result_cache import CachedResult, ResultCache
from openinghand.services.sample_hand import (
    generate_hand_from_deck,
    generate_sample_hand,
    sample_rng,
)

logger = logging.getLogger(__name__)


class ProbabilityEngine:
    """
    Owns the hand-trap classifier, the result cache and the worker setting.

    Usage:
        engine = ProbabilityEngine()
        report = engine.evaluate(query)
        hand = engine.refresh_sample(query)
    """

    def __init__(
        self,
        hand_traps: HandTrapClassifier | None = None,
        cache: ResultCache | None = None,
        workers: int | None = None,
    ) -> None:
        self.hand_traps = hand_traps if hand_traps is not None else HandTrapClassifier()
        self.cache = cache if cache is not None else ResultCache(max_size=settings.cache_size)
        self.workers = workers if workers is not None else settings.simulation_workers
        self.simulations_run = 0
        self._refreshes: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()

    def evaluate(
        self,
        query: Query,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Report:
        """
        Evaluate a query.

        Args:
            query: Deck, combos, trial count and seed
            on_progress: Called with (done, total) after every trial batch
            cancel_event: When set, the simulation stops and nothing is cached

        Returns:
            Report with per-combo and aggregate probabilities

        Raises:
            InvalidQueryError: If the query violates a deck or combo invariant
            SimulationCancelledError: If cancel_event was set mid-run
        """
        sim_count = validate_query(query)
        fingerprint = fingerprint_query(query, sim_count)

        self.cache.observe_shape(query.deck.deck_size, query.deck.hand_size)
        cached = self.cache.get(fingerprint.key)
        if cached is None:
            cached = self._compute(query, fingerprint, sim_count, on_progress, cancel_event)
            self.cache.put(fingerprint.key, cached)

        return self._build_report(query, fingerprint, cached)

    def refresh_sample(self, query: Query) -> list[CardSlot]:
        """
        Draw a new sample hand for a query.

        Each call uses the next sub-seed of the query's seed; the cached
        report and its estimates are left as they are.
        """
        sim_count = validate_query(query)
        fingerprint = fingerprint_query(query, sim_count)

        with self._lock:
            refresh = self._refreshes.get(fingerprint.key, 0) + 1
            self._refreshes[fingerprint.key] = refresh
            self._refreshes.move_to_end(fingerprint.key)
            while len(self._refreshes) > self.cache.max_size:
                self._refreshes.popitem(last=False)

        model, _ = self._prepare(query, fingerprint)
        return self._sample_hand(query, model, refresh)

    def clear_cache(self) -> None:
        self.cache.clear()
        with self._lock:
            self._refreshes.clear()

    # -------------------------------------------------------------------------

    def _prepare(
        self, query: Query, fingerprint: QueryFingerprint
    ) -> tuple[DeckModel, list[ComboPredicate]]:
        hand_trap_names: list[str] = []
        if query.deck.main is not None:
            hand_trap_names = sorted(
                self.hand_traps.hand_trap_names(query.deck.main), key=normalize_card_name
            )
        model = build_deck_model(query.deck, fingerprint.combos, hand_trap_names)
        return model, compile_combos(fingerprint.combos, model)

    def _compute(
        self,
        query: Query,
        fingerprint: QueryFingerprint,
        sim_count: int,
        on_progress: ProgressCallback | None,
        cancel_event: threading.Event | None,
    ) -> CachedResult:
        model, predicates = self._prepare(query, fingerprint)
        plan = build_aggregate_plan(model, predicates)

        counts = run_simulation(
            model,
            predicates,
            plan,
            sim_count,
            seed=query.seed,
            workers=self.workers,
            on_progress=on_progress,
            cancel_event=cancel_event,
        )
        with self._lock:
            self.simulations_run += 1

        union_all = counts.union_probability() if plan.include_union else None
        multi_starter = counts.starter_probabilities() if plan.starter_thresholds else None
        multi_hand_trap = counts.hand_trap_probabilities() if plan.hand_trap_thresholds else None

        return CachedResult(
            combo_probabilities=tuple(counts.combo_probabilities()),
            union_all=union_all,
            multi_starter=multi_starter,
            multi_hand_trap=multi_hand_trap,
            sample_hand=tuple(self._sample_hand(query, model, 0)),
            sim_count=sim_count,
            independent_starters=len(plan.starter_pools),
            unique_hand_traps=len(plan.hand_trap_pools),
        )

    def _sample_hand(self, query: Query, model: DeckModel, refresh: int) -> list[CardSlot]:
        rng = sample_rng(query.seed, refresh)
        if query.deck.main is not None:
            return generate_hand_from_deck(query.deck.main, query.deck.hand_size, rng)
        return generate_sample_hand(model, rng)

    @staticmethod
    def _build_report(query: Query, fingerprint: QueryFingerprint, cached: CachedResult) -> Report:
        canonical_position = {
            query_index: canonical_index
            for canonical_index, query_index in enumerate(fingerprint.order)
        }
        per_combo = {
            combo.id: cached.combo_probabilities[canonical_position[query_index]]
            for query_index, combo in enumerate(query.combos)
        }

        formulas = [
            build_formula(combo, query.deck.deck_size, query.deck.hand_size, per_combo[combo.id])
            for combo in query.combos
        ]

        return Report(
            per_combo=per_combo,
            union_all=cached.union_all,
            multi_starter=dict(cached.multi_starter) if cached.multi_starter else None,
            multi_hand_trap=dict(cached.multi_hand_trap) if cached.multi_hand_trap else None,
            sample_hand=list(cached.sample_hand),
            formulas=formulas,
            sim_count=cached.sim_count,
            independent_starters=cached.independent_starters,
            unique_hand_traps=cached.unique_hand_traps,
        )
