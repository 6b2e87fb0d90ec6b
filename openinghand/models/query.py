from dataclasses import dataclass, field
from typing import Any

from openinghand.config import DEFAULT_SIM_COUNT
from openinghand.models.card import CardSlot
from openinghand.models.combo import Combo
from openinghand.models.deck import DeckSpec


@dataclass(frozen=True)
class Query:
    """
    One probability question.

    Attributes:
        deck: Deck shape, abstract or concrete
        combos: Combos to evaluate
        sim_count: Number of simulated opening hands
        seed: PRNG seed; None draws from OS entropy
    """

    deck: DeckSpec
    combos: tuple[Combo, ...]
    sim_count: int = DEFAULT_SIM_COUNT
    seed: int | None = None


@dataclass(frozen=True)
class FormulaScenario:
    """One hypergeometric term P(X = k) of a formula breakdown."""

    probability: float
    copies_in_deck: int
    k: int
    remaining: int
    drawn: int
    percentage: str
    card_name: str | None = None


@dataclass(frozen=True)
class FormulaData:
    """
    Display breakdown of a combo's per-card hypergeometric terms.

    Attributes:
        combo_id: Combo this breakdown belongs to
        type: "exact", "range" or "multi-card"
        scenarios: Terms in display order
        total_percentage: Formatted total
        metadata: Deck size, hand size and card count
    """

    combo_id: str
    type: str
    scenarios: tuple[FormulaScenario, ...]
    total_percentage: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Report:
    """
    Result of evaluating a query.

    Probabilities are fractions in [0, 1].

    Attributes:
        per_combo: Probability per combo id
        union_all: Probability that any combo succeeds (2+ combos only)
        multi_starter: Probability of k+ distinct starters, keyed by k
        multi_hand_trap: Probability of k+ distinct hand-traps, keyed by k
        sample_hand: One representative opening hand
        formulas: Per-combo hypergeometric breakdowns
        sim_count: Trials behind the estimates
        independent_starters: Distinct starter names across combos
        unique_hand_traps: Distinct hand-trap names in the deck
    """

    per_combo: dict[str, float]
    union_all: float | None = None
    multi_starter: dict[int, float] | None = None
    multi_hand_trap: dict[int, float] | None = None
    sample_hand: list[CardSlot] = field(default_factory=list)
    formulas: list[FormulaData] = field(default_factory=list)
    sim_count: int = 0
    independent_starters: int = 0
    unique_hand_traps: int = 0


def format_percentage(probability: float) -> str:
    """Render a [0, 1] probability as a two-decimal percentage."""
    return f"{probability * 100:.2f}%"
