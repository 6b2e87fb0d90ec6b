"""
Health check endpoint.

Reports liveness plus how much card metadata is loaded.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from openinghand.api.probability import get_card_store
from openinghand.services.card_database import CardMetadataStore

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    cards_loaded: int = 0


@router.get("/health", response_model=HealthResponse)
async def health(
    store: Annotated[CardMetadataStore, Depends(get_card_store)],
) -> HealthResponse:
    """
    Liveness check.

    Returns healthy if the service is running. A missing card database is
    reported as zero cards, not as a failure.
    """
    return HealthResponse(status="healthy", cards_loaded=len(store))
