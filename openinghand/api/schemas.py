"""
Request and response models for the query/report boundary.

These are the JSON shapes shared by the HTTP API and the CLI. Requests
convert to the core's frozen dataclasses; responses render probabilities as
percentages with two decimals.
"""

from pydantic import BaseModel, Field

from openinghand.config import DEFAULT_DECK_SIZE, DEFAULT_HAND_SIZE, DEFAULT_SIM_COUNT
from openinghand.models.card import CardSlot, SlotKind
from openinghand.models.combo import CardConstraint, Combo, Logic
from openinghand.models.deck import DeckSpec, ParsedDeck
from openinghand.models.query import FormulaData, Query, Report


def to_percent(probability: float) -> float:
    return round(probability * 100, 2)


class CardConstraintRequest(BaseModel):
    """One card requirement of a combo."""

    card_name: str = Field(min_length=1)
    copies_in_deck: int = Field(default=3, ge=0)
    min_in_hand: int = Field(default=1, ge=0)
    max_in_hand: int = Field(default=3, ge=0)
    logic: Logic = Logic.AND

    def to_model(self) -> CardConstraint:
        return CardConstraint(
            card_name=self.card_name,
            copies_in_deck=self.copies_in_deck,
            min_in_hand=self.min_in_hand,
            max_in_hand=self.max_in_hand,
            logic=self.logic,
        )


class ComboRequest(BaseModel):
    """A combo; the id defaults to its position when omitted."""

    id: str | None = None
    name: str
    cards: list[CardConstraintRequest] = Field(min_length=1)

    def to_model(self, index: int) -> Combo:
        return Combo(
            id=self.id or f"combo-{index + 1}",
            name=self.name,
            cards=tuple(card.to_model() for card in self.cards),
        )


class DeckRequest(BaseModel):
    """Abstract deck (sizes only) or concrete deck (main deck list given)."""

    deck_size: int = Field(default=DEFAULT_DECK_SIZE, ge=1)
    hand_size: int = Field(default=DEFAULT_HAND_SIZE, ge=0)
    main: list[str] | None = None
    extra: list[str] = Field(default_factory=list)
    side: list[str] = Field(default_factory=list)

    def to_model(self) -> DeckSpec:
        return DeckSpec(
            deck_size=self.deck_size,
            hand_size=self.hand_size,
            main=tuple(self.main) if self.main is not None else None,
            extra=tuple(self.extra),
            side=tuple(self.side),
        )


class QueryRequest(BaseModel):
    """A probability question."""

    deck: DeckRequest
    combos: list[ComboRequest] = Field(default_factory=list)
    sim_count: int = Field(default=DEFAULT_SIM_COUNT, ge=1)
    seed: int | None = None

    def to_query(self) -> Query:
        return Query(
            deck=self.deck.to_model(),
            combos=tuple(combo.to_model(i) for i, combo in enumerate(self.combos)),
            sim_count=self.sim_count,
            seed=self.seed,
        )


class CardSlotResponse(BaseModel):
    kind: SlotKind
    name: str | None = None

    @classmethod
    def from_slot(cls, slot: CardSlot) -> "CardSlotResponse":
        return cls(kind=slot.kind, name=slot.name)


class FormulaScenarioResponse(BaseModel):
    probability: float
    copies_in_deck: int
    k: int
    remaining: int
    drawn: int
    percentage: str
    card_name: str | None = None


class FormulaResponse(BaseModel):
    combo_id: str
    type: str
    scenarios: list[FormulaScenarioResponse]
    total_percentage: str
    metadata: dict[str, object] = Field(default_factory=dict)

    @classmethod
    def from_formula(cls, formula: FormulaData) -> "FormulaResponse":
        return cls(
            combo_id=formula.combo_id,
            type=formula.type,
            scenarios=[
                FormulaScenarioResponse(
                    probability=to_percent(s.probability),
                    copies_in_deck=s.copies_in_deck,
                    k=s.k,
                    remaining=s.remaining,
                    drawn=s.drawn,
                    percentage=s.percentage,
                    card_name=s.card_name,
                )
                for s in formula.scenarios
            ],
            total_percentage=formula.total_percentage,
            metadata=dict(formula.metadata),
        )


class ReportResponse(BaseModel):
    """
    Evaluation result. All probabilities are percentages (0-100).
    """

    per_combo: dict[str, float]
    union_all: float | None = None
    multi_starter: dict[int, float] | None = None
    multi_hand_trap: dict[int, float] | None = None
    sample_hand: list[CardSlotResponse]
    formulas: list[FormulaResponse]
    sim_count: int
    independent_starters: int = 0
    unique_hand_traps: int = 0

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        return cls(
            per_combo={combo_id: to_percent(p) for combo_id, p in report.per_combo.items()},
            union_all=to_percent(report.union_all) if report.union_all is not None else None,
            multi_starter=(
                {k: to_percent(p) for k, p in report.multi_starter.items()}
                if report.multi_starter is not None
                else None
            ),
            multi_hand_trap=(
                {k: to_percent(p) for k, p in report.multi_hand_trap.items()}
                if report.multi_hand_trap is not None
                else None
            ),
            sample_hand=[CardSlotResponse.from_slot(slot) for slot in report.sample_hand],
            formulas=[FormulaResponse.from_formula(f) for f in report.formulas],
            sim_count=report.sim_count,
            independent_starters=report.independent_starters,
            unique_hand_traps=report.unique_hand_traps,
        )


class SampleHandResponse(BaseModel):
    sample_hand: list[CardSlotResponse]


class ParseDeckRequest(BaseModel):
    """Deck list text, as uploaded or pasted."""

    content: str
    filename: str | None = None


class ParsedDeckResponse(BaseModel):
    main: list[str]
    extra: list[str]
    side: list[str]
    unmatched_ids: list[int]
    counts: dict[str, int]
    rerouted: list[str]
    main_count: int

    @classmethod
    def from_parsed(cls, parsed: ParsedDeck) -> "ParsedDeckResponse":
        return cls(
            main=parsed.main,
            extra=parsed.extra,
            side=parsed.side,
            unmatched_ids=parsed.unmatched_ids,
            counts=parsed.counts,
            rerouted=parsed.rerouted,
            main_count=len(parsed.main),
        )
