"""
Result cache.

Bounded LRU of simulation results keyed by query fingerprint. Any change
of deck size or hand size clears the whole cache. All access goes through a
lock so one cache can serve concurrent queries.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock

from openinghand.models.card import CardSlot

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 256


@dataclass(frozen=True)
class CachedResult:
    """
    Canonically ordered result of one query.

    Attributes:
        combo_probabilities: Per-combo probability in canonical combo order
        union_all: Union probability, if reported
        multi_starter: k+ distinct starters probabilities, if reported
        multi_hand_trap: k+ distinct hand-traps probabilities, if reported
        sample_hand: Sample hand generated with the query
        sim_count: Trials behind the estimates
        independent_starters: Distinct starters across combos
        unique_hand_traps: Distinct hand-traps in the deck
    """

    combo_probabilities: tuple[float, ...]
    union_all: float | None
    multi_starter: dict[int, float] | None
    multi_hand_trap: dict[int, float] | None
    sample_hand: tuple[CardSlot, ...]
    sim_count: int
    independent_starters: int = 0
    unique_hand_traps: int = 0


@dataclass
class ResultCache:
    """
    Thread-safe LRU cache of CachedResult by fingerprint key.

    Tracks the (deck_size, hand_size) shape of the last query; a different
    shape invalidates every entry.
    """

    max_size: int = DEFAULT_CACHE_SIZE

    _entries: OrderedDict[str, CachedResult] = field(default_factory=OrderedDict)
    _shape: tuple[int, int] | None = None
    _lock: Lock = field(default_factory=Lock)
    hits: int = 0
    misses: int = 0

    def observe_shape(self, deck_size: int, hand_size: int) -> None:
        """Clear the cache if deck or hand size changed since the last query."""
        shape = (deck_size, hand_size)
        with self._lock:
            if self._shape is not None and self._shape != shape and self._entries:
                logger.info(
                    "RESULT_CACHE_CLEARED",
                    extra={"reason": "shape_changed", "entries": len(self._entries)},
                )
                self._entries.clear()
            self._shape = shape

    def get(self, key: str) -> CachedResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug("RESULT_CACHE_HIT", extra={"key": key[:12]})
            return entry

    def put(self, key: str, result: CachedResult) -> None:
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._shape = None
            logger.info("RESULT_CACHE_CLEARED", extra={"reason": "explicit"})

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
