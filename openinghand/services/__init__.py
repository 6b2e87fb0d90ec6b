"""
OpeningHand services.

Card metadata, deck list parsing, the result cache and the probability
engine façade.
"""

from openinghand.services.card_database import (
    CardMetadataStore,
    get_card_database,
    load_card_database,
)
from openinghand.services.hand_traps import HandTrapClassifier
from openinghand.services.probability import ProbabilityEngine
from openinghand.services.result_cache import CachedResult, ResultCache
from openinghand.services.sample_hand import generate_hand_from_deck, generate_sample_hand
from openinghand.services.ydk_parser import YdkParser, parse_ydk

__all__ = [
    "CachedResult",
    "CardMetadataStore",
    "HandTrapClassifier",
    "ProbabilityEngine",
    "ResultCache",
    "YdkParser",
    "generate_hand_from_deck",
    "generate_sample_hand",
    "get_card_database",
    "load_card_database",
    "parse_ydk",
]
