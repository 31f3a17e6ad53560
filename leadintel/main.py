"""
FastAPI application entry point for the Lead Intelligence API.

Configures logging, CORS and error rendering, registers the API routers, and
owns the lifecycle of every external client:

On startup the lifespan builds, in order, the asyncpg pool, the shared httpx
client, the google-genai client, and the QuotaLedger / IdentityVerifier /
GeminiBackend / AnalysisInvoker wired from them, storing the latter on
`app.state`. On shutdown it disposes of them in reverse order.

Every AnalysisError is rendered as {"error": <public message>, "kind": <kind>}
with the status code of its class.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from google import genai

from leadintel import __version__
from leadintel.api import api_router
from leadintel.core.config import get_settings
from leadintel.core.database import close_db_pool, create_db_pool
from leadintel.core.exceptions import AnalysisError
from leadintel.models.enums import ErrorKind
from leadintel.services.analysis import AnalysisInvoker
from leadintel.services.generative import GeminiBackend
from leadintel.services.identity import IdentityVerifier
from leadintel.services.quota_ledger import QuotaLedger

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Headers the browser client sends on the analysis call
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Create the external clients at startup and dispose of them at shutdown.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Lead Intelligence API starting")

    pool = await create_db_pool(settings)
    http_client = httpx.AsyncClient(timeout=settings.identity_timeout_seconds)
    backend = GeminiBackend(
        genai.Client(api_key=settings.google_api_key),
        model=settings.gemini_model,
        temperature=settings.model_temperature,
        timeout_seconds=settings.model_timeout_seconds,
    )

    app.state.quota_ledger = QuotaLedger(pool, timeout_seconds=settings.quota_timeout_seconds)
    app.state.identity_verifier = IdentityVerifier(
        http_client,
        base_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        timeout_seconds=settings.identity_timeout_seconds,
    )
    app.state.invoker = AnalysisInvoker(app.state.quota_ledger, backend)
    logger.info(f"Analysis invoker ready (model={settings.gemini_model})")

    yield

    logger.info("Lead Intelligence API shutting down")
    try:
        await backend.aclose()
    except Exception as e:
        logger.error(f"Error closing generative client: {e}")
    try:
        await http_client.aclose()
    except Exception as e:
        logger.error(f"Error closing HTTP client: {e}")
    try:
        await close_db_pool(pool)
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message, "kind": exc.kind.value},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "kind": ErrorKind.INVALID_INPUT.value},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "kind": ErrorKind.INTERNAL.value},
    )


async def catch_unhandled_errors(request: Request, call_next) -> Response:
    """
    Render unexpected exceptions as a generic 500 inside the middleware stack.

    Added before CORSMiddleware, so it sits inside it and the 500 carries the
    CORS headers.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return await unhandled_error_handler(request, exc)


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    Tests call this and place fakes on `app.state` instead of running the lifespan.
    """
    app = FastAPI(
        title="Lead Intelligence API",
        version=__version__,
        description=(
            "Quota-gated executive search intelligence: turns merged company "
            "content into Tier 1 triggers, Tier 2 opportunities and a pitch angle."
        ),
        lifespan=lifespan,
    )

    app.middleware("http")(catch_unhandled_errors)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    app.add_exception_handler(AnalysisError, analysis_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Liveness endpoint for load balancer checks; does not touch any upstream."""
        return {"status": "healthy"}

    return app


app = create_app()


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "leadintel.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
