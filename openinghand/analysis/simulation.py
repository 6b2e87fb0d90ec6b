"""
Monte Carlo simulation kernel.

Each trial deals the first H cards of a shuffled deck, maps them to pools,
counts copies per pool and evaluates every combo predicate on those counts.
Only the H-card prefix matters, so the shuffle is a partial Fisher-Yates:
position i (for i < H) is swapped with a uniform j in [i, N). Swaps are kept
in a sparse per-trial map, so the deck itself is never built.

Trials run in vectorized batches of BATCH_SIZE hands. Batch boundaries are
the only points where the kernel reports progress or honours cancellation.

Randomness comes from numpy's PCG64 generator. With one worker a single
stream feeds every trial. With several workers, trials are split into
contiguous shares and worker w draws from child stream w of the master
SeedSequence, so a given (seed, workers) pair always yields the same counts.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from openinghand.analysis.aggregates import AggregateCounts, AggregatePlan
from openinghand.analysis.deck_model import DeckModel
from openinghand.analysis.predicates import ComboPredicate
from openinghand.config import BATCH_SIZE
from openinghand.models.failure import InternalEngineError, SimulationCancelledError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# Negative seeds are wrapped into [0, SEED_MODULUS)
SEED_MODULUS = 2**64


@dataclass
class SimulationCounts:
    """
    Raw success counters from a simulation run.

    Attributes:
        trials: Number of simulated hands
        combo_successes: Successes per predicate, in predicate order
        aggregates: Union, multi-starter and multi-hand-trap counters
    """

    trials: int
    combo_successes: list[int]
    aggregates: AggregateCounts = field(default_factory=AggregateCounts)

    def merge(self, other: "SimulationCounts") -> None:
        if len(other.combo_successes) != len(self.combo_successes):
            raise InternalEngineError("Cannot merge counters for different combo sets")
        self.trials += other.trials
        self.combo_successes = [
            a + b for a, b in zip(self.combo_successes, other.combo_successes, strict=True)
        ]
        self.aggregates.merge(other.aggregates)

    def combo_probabilities(self) -> list[float]:
        return [successes / self.trials for successes in self.combo_successes]

    def union_probability(self) -> float:
        return self.aggregates.union / self.trials

    def starter_probabilities(self) -> dict[int, float]:
        return {k: count / self.trials for k, count in self.aggregates.starters.items()}

    def hand_trap_probabilities(self) -> dict[int, float]:
        return {k: count / self.trials for k, count in self.aggregates.hand_traps.items()}


# =============================================================================
# RANDOM STREAMS
# =============================================================================


def seed_entropy(seed: int) -> int:
    """Non-negative entropy for a user seed; -1 and 2**64 - 1 are the same seed."""
    return seed % SEED_MODULUS if seed < 0 else seed


def seed_sequence(seed: int | None) -> np.random.SeedSequence:
    """Master seed sequence; OS entropy when seed is None."""
    if seed is None:
        return np.random.SeedSequence()
    return np.random.SeedSequence(seed_entropy(seed))


def make_streams(seed: int | None, workers: int = 1) -> list[np.random.Generator]:
    """
    Independent PCG64 generators, one per worker.

    A single worker uses the master sequence directly.
    """
    if workers < 1:
        raise InternalEngineError(f"Worker count must be positive, got {workers}")
    master = seed_sequence(seed)
    if workers == 1:
        return [np.random.Generator(np.random.PCG64(master))]
    return [np.random.Generator(np.random.PCG64(child)) for child in master.spawn(workers)]


def split_trials(total: int, workers: int) -> list[int]:
    """Contiguous per-worker trial shares; earlier workers take the remainder."""
    base, remainder = divmod(total, workers)
    return [base + (1 if w < remainder else 0) for w in range(workers)]


# =============================================================================
# KERNEL
# =============================================================================


def _find_moved(
    moved_from: np.ndarray,
    used: int,
    positions: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Per row: whether ``positions`` is in the swap map, and its slot."""
    if used == 0:
        rows = positions.shape[0]
        return np.zeros(rows, dtype=bool), np.zeros(rows, dtype=np.intp)
    hits = moved_from[:, :used] == positions[:, None]
    return hits.any(axis=1), hits.argmax(axis=1)


def draw_positions(
    rng: np.random.Generator,
    deck_size: int,
    hand_size: int,
    trials: int,
) -> np.ndarray:
    """
    Opening hands for ``trials`` independent shuffles of a ``deck_size`` deck.

    The deck is never materialized. Each row keeps a swap map of the
    positions displaced so far (at most one entry per step), so memory and
    work are O(trials x hand_size) whatever the deck size.

    Returns:
        Array of shape (trials, hand_size) holding unshuffled deck positions
    """
    hands = np.empty((trials, hand_size), dtype=np.int64)
    moved_from = np.full((trials, hand_size), -1, dtype=np.int64)
    moved_card = np.empty((trials, hand_size), dtype=np.int64)
    rows = np.arange(trials)

    for i in range(hand_size):
        j = rng.integers(i, deck_size, size=trials)

        found_j, slot_j = _find_moved(moved_from, i, j)
        card_j = np.where(found_j, moved_card[rows, slot_j], j)

        here = np.full(trials, i, dtype=np.int64)
        found_i, slot_i = _find_moved(moved_from, i, here)
        card_i = np.where(found_i, moved_card[rows, slot_i], here)

        hands[:, i] = card_j
        # Position i is never read again; only j needs to remember card_i.
        write = np.where(found_j, slot_j, i)
        moved_from[rows, write] = j
        moved_card[rows, write] = card_i

    return hands


def count_pools(hands: np.ndarray, pool_count: int) -> np.ndarray:
    """Copies of each pool per hand, shape (hands, pool_count)."""
    counts = np.zeros((hands.shape[0], pool_count), dtype=np.int32)
    for pool in range(pool_count):
        counts[:, pool] = np.count_nonzero(hands == pool, axis=1)
    return counts


class _Progress:
    def __init__(
        self,
        total: int,
        on_progress: ProgressCallback | None,
        cancel_event: threading.Event | None,
    ) -> None:
        self.total = total
        self.done = 0
        self.on_progress = on_progress
        self.cancel_event = cancel_event
        self._lock = threading.Lock()

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SimulationCancelledError(self.done, self.total)

    def advance(self, trials: int) -> None:
        with self._lock:
            self.done += trials
            done = self.done
        if self.on_progress is not None:
            self.on_progress(done, self.total)


def _run_share(
    rng: np.random.Generator,
    model: DeckModel,
    predicates: Sequence[ComboPredicate],
    plan: AggregatePlan,
    trials: int,
    progress: _Progress,
) -> SimulationCounts:
    result = SimulationCounts(
        trials=0,
        combo_successes=[0] * len(predicates),
        aggregates=plan.empty_counts(),
    )

    remaining = trials
    while remaining > 0:
        progress.check_cancelled()
        batch = min(BATCH_SIZE, remaining)

        positions = draw_positions(rng, model.deck_size, model.hand_size, batch)
        hands = model.pool_at(positions)
        counts = count_pools(hands, model.pool_count)

        combo_hits = np.zeros((batch, len(predicates)), dtype=bool)
        for column, predicate in enumerate(predicates):
            combo_hits[:, column] = predicate.evaluate(counts)

        result.trials += batch
        for column in range(len(predicates)):
            result.combo_successes[column] += int(np.count_nonzero(combo_hits[:, column]))
        result.aggregates.merge(plan.tally(counts, combo_hits))

        remaining -= batch
        progress.advance(batch)

    return result


def run_simulation(
    model: DeckModel,
    predicates: Sequence[ComboPredicate],
    plan: AggregatePlan,
    sim_count: int,
    seed: int | None = None,
    workers: int = 1,
    on_progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> SimulationCounts:
    """
    Simulate ``sim_count`` opening hands.

    Args:
        model: Deck model with pools and hand size
        predicates: Compiled combos, evaluated in order
        plan: Aggregate events to count
        sim_count: Number of trials
        seed: PRNG seed; None uses OS entropy
        workers: Worker threads; each gets its own PRNG stream
        on_progress: Called with (done, total) after every batch
        cancel_event: When set, the run stops at the next batch boundary

    Returns:
        SimulationCounts over all trials

    Raises:
        SimulationCancelledError: If cancel_event was set during the run
        InternalEngineError: If sim_count or workers is not positive
    """
    if sim_count < 1:
        raise InternalEngineError(f"Simulation count must be positive, got {sim_count}")

    workers = min(workers, sim_count)
    streams = make_streams(seed, workers)
    shares = split_trials(sim_count, workers)
    progress = _Progress(sim_count, on_progress, cancel_event)

    logger.info(
        "SIMULATION_STARTED",
        extra={
            "trials": sim_count,
            "pools": model.pool_count,
            "combos": len(predicates),
            "workers": workers,
        },
    )

    if workers == 1:
        result = _run_share(streams[0], model, predicates, plan, sim_count, progress)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(_run_share, rng, model, predicates, plan, share, progress)
                for rng, share in zip(streams, shares, strict=True)
            ]
            partials = [future.result() for future in futures]
        result = partials[0]
        for partial in partials[1:]:
            result.merge(partial)

    if result.trials != sim_count:
        raise InternalEngineError(f"Ran {result.trials} trials, expected {sim_count}")

    logger.info("SIMULATION_FINISHED", extra={"trials": result.trials})
    return result
