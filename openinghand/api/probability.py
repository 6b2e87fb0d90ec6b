"""
Probability API endpoints.

Evaluate combo queries, refresh sample hands and parse YDK deck lists.
Engine errors are KnownErrors; the application's exception handler turns
them into failure envelopes.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends

from openinghand.api.schemas import (
    CardSlotResponse,
    ParseDeckRequest,
    ParsedDeckResponse,
    QueryRequest,
    ReportResponse,
    SampleHandResponse,
)
from openinghand.config import settings
from openinghand.services.card_database import CardMetadataStore, get_card_database
from openinghand.services.hand_traps import HandTrapClassifier
from openinghand.services.probability import ProbabilityEngine
from openinghand.services.ydk_parser import parse_ydk

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/probability", tags=["probability"])


def get_card_store() -> CardMetadataStore:
    """Card metadata; an empty store when no database file is installed."""
    try:
        return get_card_database()
    except FileNotFoundError:
        logger.warning("Card database missing; deck lists will not resolve")
        return CardMetadataStore({})


@lru_cache(maxsize=1)
def get_engine() -> ProbabilityEngine:
    """Shared engine, so every request uses the same result cache."""
    return ProbabilityEngine(hand_traps=HandTrapClassifier(store=get_card_store()))


@router.post("/evaluate", response_model=ReportResponse)
def evaluate(
    request: QueryRequest,
    engine: Annotated[ProbabilityEngine, Depends(get_engine)],
) -> ReportResponse:
    """
    Estimate combo probabilities for an opening hand.

    Runs synchronously in FastAPI's thread pool; results are cached by the
    query's fingerprint.
    """
    report = engine.evaluate(request.to_query())
    return ReportResponse.from_report(report)


@router.post("/sample", response_model=SampleHandResponse)
def refresh_sample(
    request: QueryRequest,
    engine: Annotated[ProbabilityEngine, Depends(get_engine)],
) -> SampleHandResponse:
    """Draw a fresh sample opening hand without changing any estimate."""
    hand = engine.refresh_sample(request.to_query())
    return SampleHandResponse(sample_hand=[CardSlotResponse.from_slot(slot) for slot in hand])


@router.post("/parse-deck", response_model=ParsedDeckResponse)
def parse_deck(
    request: ParseDeckRequest,
    store: Annotated[CardMetadataStore, Depends(get_card_store)],
) -> ParsedDeckResponse:
    """Parse a YDK deck list into main, extra and side decks."""
    parsed = parse_ydk(
        request.content,
        store,
        filename=request.filename,
        max_bytes=settings.max_deck_list_bytes,
    )
    return ParsedDeckResponse.from_parsed(parsed)
