from openinghand.api.health import router as health_router
from openinghand.api.probability import router as probability_router

__all__ = [
    "health_router",
    "probability_router",
]
