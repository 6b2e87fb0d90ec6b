from openinghand.models.card import (
    Attribute,
    CardKind,
    CardMeta,
    CardSlot,
    SlotKind,
    is_extra_deck_type,
)
from openinghand.models.combo import CardConstraint, Combo, Logic, create_combo
from openinghand.models.deck import DeckSpec, ParsedDeck, normalize_card_name
from openinghand.models.failure import (
    FailureDetail,
    FailureKind,
    FailureResponse,
    FileTooLargeError,
    InternalEngineError,
    InvalidQueryError,
    KnownError,
    MalformedDeckListError,
    OutcomeType,
    SimulationCancelledError,
    UnsupportedExtensionError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
)
from openinghand.models.query import (
    FormulaData,
    FormulaScenario,
    Query,
    Report,
    format_percentage,
)

__all__ = [
    "Attribute",
    "CardConstraint",
    "CardKind",
    "CardMeta",
    "CardSlot",
    "Combo",
    "DeckSpec",
    "FailureDetail",
    "FailureKind",
    "FailureResponse",
    "FileTooLargeError",
    "FormulaData",
    "FormulaScenario",
    "InternalEngineError",
    "InvalidQueryError",
    "KnownError",
    "Logic",
    "MalformedDeckListError",
    "OutcomeType",
    "ParsedDeck",
    "Query",
    "Report",
    "SimulationCancelledError",
    "SlotKind",
    "UnsupportedExtensionError",
    "create_combo",
    "create_known_failure",
    "create_unknown_failure",
    "finalize_response",
    "format_percentage",
    "is_extra_deck_type",
    "normalize_card_name",
]
