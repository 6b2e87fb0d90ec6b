"""
Canonical query fingerprints.

Two queries that ask the same question get the same key, whatever order
their combos or constraints were entered in and whatever the combos are
called. Combos are ordered by a hash of their constraint tuples. Inside a
combo, the cards after the starter are sorted when every join uses the same
operator (the fold is then order-independent); combos that mix AND and OR
keep their order. The starter is part of the question (multi-starter odds)
and is never moved.
"""

import hashlib
import json
from collections import Counter
from dataclasses import dataclass, replace

from openinghand.analysis.simulation import seed_entropy
from openinghand.models.combo import CardConstraint, Combo
from openinghand.models.deck import normalize_card_name
from openinghand.models.query import Query

ConstraintTuple = tuple[str, int, int, int, str]


@dataclass(frozen=True)
class QueryFingerprint:
    """
    Cache key plus the canonical combo order.

    Attributes:
        key: Hex digest identifying the query's semantics
        order: order[i] is the index in query.combos of canonical combo i
        combos: The query's combos in canonical order, constraints canonicalized
    """

    key: str
    order: tuple[int, ...]
    combos: tuple[Combo, ...]


def _is_order_independent(combo: Combo) -> bool:
    return len(set(combo.joins())) <= 1


def canonical_combo(combo: Combo) -> Combo:
    """
    Combo with constraints in canonical order.

    The first card is the combo's starter and stays in place. The remaining
    cards are sorted only when the combo is order-independent.
    """
    if len(combo.cards) < 3 or not _is_order_independent(combo):
        return combo
    starter, *rest = combo.cards
    rest.sort(key=CardConstraint.sort_key)
    return replace(combo, cards=(starter, *rest))


def constraint_tuples(combo: Combo) -> tuple[ConstraintTuple, ...]:
    """
    Name-independent description of a combo.

    The first constraint's logic is irrelevant and is blanked out.
    """
    tuples = [card.sort_key() for card in canonical_combo(combo).cards]
    if tuples:
        name, copies, low, high, _ = tuples[0]
        tuples[0] = (name, copies, low, high, "")
    return tuple(tuples)


def combo_hash(combo: Combo) -> str:
    payload = json.dumps(constraint_tuples(combo), separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def fingerprint_query(query: Query, sim_count: int | None = None) -> QueryFingerprint:
    """
    Fingerprint a query.

    Args:
        query: The query to fingerprint
        sim_count: Effective trial count; defaults to query.sim_count

    Returns:
        QueryFingerprint with the key and canonical combo order
    """
    hashes = [combo_hash(combo) for combo in query.combos]
    order = tuple(sorted(range(len(query.combos)), key=lambda i: hashes[i]))

    main: list[tuple[str, int]] | None = None
    if query.deck.main is not None:
        counts = Counter(normalize_card_name(name) for name in query.deck.main)
        main = sorted(counts.items())

    payload = {
        "deck_size": query.deck.deck_size,
        "hand_size": query.deck.hand_size,
        "sim_count": query.sim_count if sim_count is None else sim_count,
        "seed": seed_entropy(query.seed) if query.seed is not None else None,
        "main": main,
        "combos": [constraint_tuples(query.combos[i]) for i in order],
    }
    digest = hashlib.sha256(
        json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    ).hexdigest()

    return QueryFingerprint(
        key=digest,
        order=order,
        combos=tuple(canonical_combo(query.combos[i]) for i in order),
    )
