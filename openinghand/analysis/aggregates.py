"""
Aggregate events computed alongside the per-combo predicates.

- Union: a hand succeeds if any combo succeeds (reported for 2+ combos).
- Multi-starter: number of distinct combo starters in the hand. Starters are
  the distinct first cards across combos; reported with 2+ starters.
- Multi-hand-trap: number of distinct hand-traps in the hand (concrete decks).
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from openinghand.analysis.deck_model import DeckModel
from openinghand.analysis.predicates import ComboPredicate

MAX_STARTER_THRESHOLD = 3
MAX_HAND_TRAP_THRESHOLD = 4


@dataclass
class AggregateCounts:
    """Success counters for the aggregate events."""

    union: int = 0
    starters: dict[int, int] = field(default_factory=dict)
    hand_traps: dict[int, int] = field(default_factory=dict)

    def merge(self, other: "AggregateCounts") -> None:
        self.union += other.union
        for k, count in other.starters.items():
            self.starters[k] = self.starters.get(k, 0) + count
        for k, count in other.hand_traps.items():
            self.hand_traps[k] = self.hand_traps.get(k, 0) + count


@dataclass(frozen=True)
class AggregatePlan:
    """
    Which aggregate events to count for a query.

    Attributes:
        include_union: Count the union of all combos
        starter_pools: Pool of each distinct starter
        starter_thresholds: k values for "k+ distinct starters"
        hand_trap_pools: Pool of each distinct hand-trap
        hand_trap_thresholds: k values for "k+ distinct hand-traps"
    """

    include_union: bool = False
    starter_pools: tuple[int, ...] = ()
    starter_thresholds: tuple[int, ...] = ()
    hand_trap_pools: tuple[int, ...] = ()
    hand_trap_thresholds: tuple[int, ...] = ()

    def empty_counts(self) -> AggregateCounts:
        return AggregateCounts(
            starters={k: 0 for k in self.starter_thresholds},
            hand_traps={k: 0 for k in self.hand_trap_thresholds},
        )

    def tally(self, counts: np.ndarray, combo_hits: np.ndarray) -> AggregateCounts:
        """
        Count aggregate successes for one batch.

        Args:
            counts: Hands x pools matrix of copies in hand
            combo_hits: Hands x combos boolean matrix of combo successes
        """
        result = self.empty_counts()

        if self.include_union:
            result.union = int(np.count_nonzero(combo_hits.any(axis=1)))

        if self.starter_thresholds:
            distinct = _distinct_present(counts, self.starter_pools)
            for k in self.starter_thresholds:
                result.starters[k] = int(np.count_nonzero(distinct >= k))

        if self.hand_trap_thresholds:
            distinct = _distinct_present(counts, self.hand_trap_pools)
            for k in self.hand_trap_thresholds:
                result.hand_traps[k] = int(np.count_nonzero(distinct >= k))

        return result


def _distinct_present(counts: np.ndarray, pools: tuple[int, ...]) -> np.ndarray:
    return (counts[:, list(pools)] > 0).sum(axis=1)


def build_aggregate_plan(model: DeckModel, predicates: Sequence[ComboPredicate]) -> AggregatePlan:
    """Decide which aggregate events apply to a deck model and its combos."""
    starter_pools: list[int] = []
    for predicate in predicates:
        if predicate.starter_pool not in starter_pools:
            starter_pools.append(predicate.starter_pool)

    starter_thresholds: tuple[int, ...] = ()
    if len(starter_pools) >= 2:
        starter_thresholds = tuple(
            range(2, min(len(starter_pools), MAX_STARTER_THRESHOLD) + 1)
        )

    hand_trap_thresholds = tuple(
        range(1, min(len(model.hand_trap_pools), MAX_HAND_TRAP_THRESHOLD) + 1)
    )

    return AggregatePlan(
        include_union=len(predicates) >= 2,
        starter_pools=tuple(starter_pools),
        starter_thresholds=starter_thresholds,
        hand_trap_pools=model.hand_trap_pools,
        hand_trap_thresholds=hand_trap_thresholds,
    )
