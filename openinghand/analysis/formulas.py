"""
Hypergeometric formula breakdowns for display.

For each constraint the breakdown lists P(X = k) for every k in
[min_in_hand, max_in_hand], where X is the number of copies of that card in
an H-card hand drawn from an N-card deck holding K copies. Single-card combos
get an exact total; multi-card combos are totalled by the Monte Carlo
estimate because their constraints are not independent.
"""

from math import comb

from openinghand.models.combo import CardConstraint, Combo
from openinghand.models.query import FormulaData, FormulaScenario, format_percentage


def hypergeometric_pmf(deck_size: int, copies: int, hand_size: int, k: int) -> float:
    """P(X = k) for X ~ Hypergeometric(N=deck_size, K=copies, n=hand_size)."""
    if k < 0 or k > copies or k > hand_size or hand_size - k > deck_size - copies:
        return 0.0
    return comb(copies, k) * comb(deck_size - copies, hand_size - k) / comb(deck_size, hand_size)


def hypergeometric_range(deck_size: int, copies: int, hand_size: int, low: int, high: int) -> float:
    """P(low <= X <= high)."""
    return sum(hypergeometric_pmf(deck_size, copies, hand_size, k) for k in range(low, high + 1))


def _scenarios(
    card: CardConstraint, deck_size: int, hand_size: int, with_name: bool
) -> list[FormulaScenario]:
    scenarios = []
    for k in range(card.min_in_hand, card.max_in_hand + 1):
        probability = hypergeometric_pmf(deck_size, card.copies_in_deck, hand_size, k)
        scenarios.append(
            FormulaScenario(
                probability=probability,
                copies_in_deck=card.copies_in_deck,
                k=k,
                remaining=deck_size - card.copies_in_deck,
                drawn=hand_size - k,
                percentage=format_percentage(probability),
                card_name=card.card_name if with_name else None,
            )
        )
    return scenarios


def build_formula(
    combo: Combo,
    deck_size: int,
    hand_size: int,
    estimate: float,
) -> FormulaData:
    """
    Formula breakdown for one combo.

    Args:
        combo: The combo to describe
        deck_size: N
        hand_size: H
        estimate: Monte Carlo probability, used as the multi-card total
    """
    metadata: dict[str, object] = {"total_cards": deck_size, "hand_size": hand_size}

    if len(combo.cards) == 1:
        card = combo.cards[0]
        scenarios = _scenarios(card, deck_size, hand_size, with_name=False)
        total = sum(s.probability for s in scenarios)
        return FormulaData(
            combo_id=combo.id,
            type="exact" if card.min_in_hand == card.max_in_hand else "range",
            scenarios=tuple(scenarios),
            total_percentage=format_percentage(total),
            metadata=metadata,
        )

    scenarios = []
    for card in combo.cards:
        scenarios.extend(_scenarios(card, deck_size, hand_size, with_name=True))

    joins = combo.joins()
    metadata["card_count"] = len(combo.cards)
    metadata["logic"] = [logic.value for logic in joins]

    return FormulaData(
        combo_id=combo.id,
        type="multi-card",
        scenarios=tuple(scenarios),
        total_percentage=f"{format_percentage(estimate)} (Monte Carlo)",
        metadata=metadata,
    )
