"""
StockPick Gateway - FastAPI Application

Main entry point for the gateway process.
Serves the instrument catalog and proxies upstream market data under /api/v1.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from pydantic import BaseModel

from stockpick_gateway import __version__
from stockpick_gateway.api.catalog_routes import get_catalog_service
from stockpick_gateway.api.catalog_routes import router as catalog_router
from stockpick_gateway.api.market_routes import close_market_client, upstream_metrics
from stockpick_gateway.api.market_routes import router as market_router
from stockpick_gateway.catalog.errors import AggregateFailure
from stockpick_gateway.catalog.service import CatalogQueryService
from stockpick_gateway.config import get_settings
from stockpick_gateway.logging import get_logger, setup_logging

API_PREFIX = "/api/v1"

# Setup logging
_settings = get_settings()
setup_logging(level=_settings.log_level, json_output=_settings.log_json)
logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    time: str
    uptime_seconds: float
    catalog_cached: bool
    upstream: dict[str, Any] | None = None


class ApiIndexResponse(BaseModel):
    """API index response."""

    status: str = "ok"
    version: str = "v1"
    apis: list[str]


class AppState:
    """Global application state."""

    def __init__(self) -> None:
        self.start_time = datetime.now(UTC)


state = AppState()


# =============================================================================
# Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info("Starting StockPick Gateway v%s", __version__)
    logger.info("Config: %s", settings.get_redacted_config())
    logger.info("API available at http://%s:%d%s", settings.host, settings.port, API_PREFIX)

    if settings.warm_catalog_on_startup:
        service = get_catalog_service(settings)
        try:
            catalog = await service.get_catalog()
            logger.info("Catalog warmed: %d tickers", len(catalog))
        except AggregateFailure as e:
            # Requests retry the build; startup continues
            logger.error("Catalog warm-up failed: %s", e)

    yield

    logger.info("Shutting down StockPick Gateway")
    await close_market_client()


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="StockPick Gateway",
    description="Ticker catalog and market data gateway",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)

app.include_router(catalog_router)
app.include_router(market_router)


# =============================================================================
# REST Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse)
async def health(
    service: CatalogQueryService = Depends(get_catalog_service),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns current status, version, uptime, whether the catalog is built and,
    once the upstream client is in use, its latency and pacing counters.
    """
    now = datetime.now(UTC)
    uptime = (now - state.start_time).total_seconds()

    return HealthResponse(
        status="healthy",
        version=__version__,
        time=now.isoformat(),
        uptime_seconds=round(uptime, 2),
        catalog_cached=service.is_catalog_cached,
        upstream=upstream_metrics(),
    )


@app.get(API_PREFIX, response_model=ApiIndexResponse)
@app.get(f"{API_PREFIX}/", response_model=ApiIndexResponse, include_in_schema=False)
async def api_index() -> ApiIndexResponse:
    """List the available API routes."""
    paths = sorted(
        {
            route.path
            for route in app.routes
            if isinstance(route, APIRoute)
            and route.path.startswith(f"{API_PREFIX}/")
            and route.path != f"{API_PREFIX}/"
        }
    )
    return ApiIndexResponse(apis=paths)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API info."""
    return {
        "name": "StockPick Gateway",
        "version": __version__,
        "docs": "/docs",
        "api": API_PREFIX,
    }


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Run the server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "stockpick_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.env.value == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
