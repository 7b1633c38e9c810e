"""
Instrument catalog API routes.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from stockpick_gateway.catalog.builder import CatalogBuilder
from stockpick_gateway.catalog.errors import AggregateFailure
from stockpick_gateway.catalog.models import CatalogSummary, InstrumentRecord, SectorEntry
from stockpick_gateway.catalog.service import CatalogQueryService
from stockpick_gateway.config import Settings, get_settings_dep
from stockpick_gateway.logging import get_logger
from stockpick_gateway.runtime.cache import CacheStore

router = APIRouter(prefix="/api/v1", tags=["Catalog"])
logger = get_logger(__name__)

# Lazy-initialized, process-wide
_cache_store: CacheStore | None = None
_catalog_service: CatalogQueryService | None = None


def get_cache_store() -> CacheStore:
    """Get or create the process-wide cache store."""
    global _cache_store
    if _cache_store is None:
        _cache_store = CacheStore(name="catalog-cache")
    return _cache_store


def create_catalog_service(settings: Settings, store: CacheStore) -> CatalogQueryService:
    """Wire a query service for the configured ticker lists."""
    builder = CatalogBuilder(
        settings.source_paths,
        read_timeout_s=settings.source_read_timeout_s,
        chunk_size=settings.source_chunk_size,
    )
    return CatalogQueryService(
        store,
        builder,
        unknown_sector=settings.unknown_sector,
        default_start=settings.default_page_start,
        default_size=settings.default_page_size,
    )


def get_catalog_service(settings: Settings = Depends(get_settings_dep)) -> CatalogQueryService:
    """Get or create catalog query service singleton."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = create_catalog_service(settings, get_cache_store())
    return _catalog_service


def _build_failed(e: AggregateFailure) -> HTTPException:
    logger.error("Catalog unavailable: %s", e)
    return HTTPException(status_code=503, detail=e.to_detail())


# =============================================================================
# Response Models
# =============================================================================


class TickerListResponse(BaseModel):
    """A page of catalog records."""

    tickers: list[InstrumentRecord]


class SectorListResponse(BaseModel):
    """The sector index."""

    sectors: list[SectorEntry]


# =============================================================================
# Routes
# =============================================================================


@router.get("/tickers", response_model=TickerListResponse)
async def list_tickers(
    start: str | None = Query(default=None, description="Offset of the first ticker"),
    size: str | None = Query(default=None, description="Page size"),
    sector: str | None = Query(default=None, description="Only tickers in this sector"),
    service: CatalogQueryService = Depends(get_catalog_service),
) -> TickerListResponse:
    """
    Get one page of the ticker catalog.

    Missing or invalid paging parameters fall back to start=0, size=25.
    """
    try:
        tickers = await service.list_tickers(start, size, sector=sector or None)
    except AggregateFailure as e:
        raise _build_failed(e) from e

    return TickerListResponse(tickers=tickers)


@router.get("/tickers/{symbol}", response_model=TickerListResponse)
async def get_ticker(
    symbol: str,
    service: CatalogQueryService = Depends(get_catalog_service),
) -> TickerListResponse:
    """
    Get catalog records for a symbol (one per listing exchange).
    """
    try:
        tickers = await service.find_tickers(symbol)
    except AggregateFailure as e:
        raise _build_failed(e) from e

    if not tickers:
        raise HTTPException(status_code=404, detail=f"Ticker '{symbol}' not found")

    return TickerListResponse(tickers=tickers)


@router.get("/sectors", response_model=SectorListResponse)
async def list_sectors(
    service: CatalogQueryService = Depends(get_catalog_service),
) -> SectorListResponse:
    """
    Get the distinct sectors present in the catalog.
    """
    try:
        sectors = await service.list_sectors()
    except AggregateFailure as e:
        raise _build_failed(e) from e

    return SectorListResponse(sectors=list(sectors))


@router.get("/catalog/summary", response_model=CatalogSummary)
async def catalog_summary(
    service: CatalogQueryService = Depends(get_catalog_service),
) -> CatalogSummary:
    """
    Get catalog summary statistics.
    """
    try:
        return await service.summary()
    except AggregateFailure as e:
        raise _build_failed(e) from e
