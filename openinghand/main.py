import logging
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from openinghand.api import health_router, probability_router
from openinghand.config import settings
from openinghand.models.failure import KnownError, create_known_failure, create_unknown_failure

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("openinghand"),
    debug=settings.debug,
)

app.include_router(health_router)
app.include_router(probability_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render engine errors as known-failure envelopes."""
    logger.info(
        "KNOWN_FAILURE",
        extra={"kind": exc.kind.value, "status_code": exc.status_code},
    )
    response = create_known_failure(exc)
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render anything else as an unknown-failure envelope; internals stay in the log."""
    logger.exception("UNKNOWN_FAILURE", extra={"error_type": type(exc).__name__})
    response = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
