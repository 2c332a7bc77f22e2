"""FastAPI application factory for the market feed HTTP surface."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketfeed.api.routes import api
from marketfeed.exceptions import AllProvidersExhausted, UnknownAssetError
from marketfeed.logging import get_logger

logger = get_logger(__name__)


async def _providers_exhausted_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("request_failed_all_providers", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"error": str(exc)})


async def _unknown_asset_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the API application.

    Args:
        lifespan: Optional async context manager for startup/shutdown.
                  main.py uses it to build and close the service components.
                  Tests set ``app.state.service`` directly instead.
    """
    app = FastAPI(title="Market Feed", lifespan=lifespan)

    # Reflect any origin, matching a browser-facing dashboard backend
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    app.state.service = None
    app.state.signal_engine = None

    app.add_exception_handler(AllProvidersExhausted, _providers_exhausted_handler)
    app.add_exception_handler(UnknownAssetError, _unknown_asset_handler)

    app.include_router(api.router, prefix="/api")

    return app
