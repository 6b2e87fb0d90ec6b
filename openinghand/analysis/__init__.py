"""
Opening-hand analysis.

Deck modelling, combo predicates, the Monte Carlo kernel, aggregate
statistics, closed-form formulas and query fingerprints.
"""

from openinghand.analysis.aggregates import AggregateCounts, AggregatePlan, build_aggregate_plan
from openinghand.analysis.deck_model import BLANK, DeckModel, build_deck_model
from openinghand.analysis.fingerprint import QueryFingerprint, fingerprint_query
from openinghand.analysis.formulas import build_formula, hypergeometric_pmf, hypergeometric_range
from openinghand.analysis.predicates import ComboPredicate, Term, compile_combo, compile_combos
from openinghand.analysis.simulation import SimulationCounts, run_simulation
from openinghand.analysis.validation import validate_combo, validate_deck, validate_query

__all__ = [
    "AggregateCounts",
    "AggregatePlan",
    "BLANK",
    "ComboPredicate",
    "DeckModel",
    "QueryFingerprint",
    "SimulationCounts",
    "Term",
    "build_aggregate_plan",
    "build_deck_model",
    "build_formula",
    "compile_combo",
    "compile_combos",
    "fingerprint_query",
    "hypergeometric_pmf",
    "hypergeometric_range",
    "run_simulation",
    "validate_combo",
    "validate_deck",
    "validate_query",
]
