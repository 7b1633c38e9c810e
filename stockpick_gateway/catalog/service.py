"""
Catalog query service.

Serves paginated, sector-filtered and derived views of the catalog. The
catalog is built on the first request that misses the cache and served from
the cache afterwards.
"""

from typing import Any

from stockpick_gateway.catalog.builder import CatalogBuilder
from stockpick_gateway.catalog.models import (
    Catalog,
    CatalogSummary,
    InstrumentRecord,
    SectorIndex,
)
from stockpick_gateway.catalog.sectors import UNKNOWN_SECTOR, build_sector_index
from stockpick_gateway.logging import get_logger
from stockpick_gateway.runtime.cache import CacheKey, CacheStore
from stockpick_gateway.runtime.single_flight import SingleFlight

logger = get_logger(__name__)

DEFAULT_START = 0
DEFAULT_SIZE = 25


def _coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize_page(
    start: Any,
    size: Any,
    default_start: int = DEFAULT_START,
    default_size: int = DEFAULT_SIZE,
) -> tuple[int, int]:
    """
    Resolve page parameters.

    Absent or non-integer values, a negative start and a non-positive size
    fall back to the defaults.
    """
    start_i = _coerce_int(start)
    size_i = _coerce_int(size)
    if start_i is None or start_i < 0:
        start_i = default_start
    if size_i is None or size_i <= 0:
        size_i = default_size
    return start_i, size_i


class CatalogQueryService:
    """
    Read access to the catalog and the sector index.

    The cache store and builder are injected; concurrent cache misses for the
    same key share a single build.
    """

    def __init__(
        self,
        store: CacheStore,
        builder: CatalogBuilder,
        single_flight: SingleFlight | None = None,
        unknown_sector: str = UNKNOWN_SECTOR,
        default_start: int = DEFAULT_START,
        default_size: int = DEFAULT_SIZE,
    ) -> None:
        self._store = store
        self._builder = builder
        self._flights = single_flight or SingleFlight()
        self._unknown_sector = unknown_sector
        self._default_start = default_start
        self._default_size = default_size

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def is_catalog_cached(self) -> bool:
        return self._store.contains(CacheKey.CATALOG)

    # =========================================================================
    # Cache population
    # =========================================================================

    async def get_catalog(self) -> Catalog:
        """
        Get the catalog, building and caching it on a miss.

        Raises:
            AggregateFailure: If the build fails (nothing is cached)
        """
        catalog = self._store.get(CacheKey.CATALOG)
        if catalog is not None:
            return catalog
        return await self._flights.run(CacheKey.CATALOG.value, self._build_catalog)

    async def _build_catalog(self) -> Catalog:
        # Another flight may have finished between the miss and taking the lead
        catalog = self._store.get(CacheKey.CATALOG)
        if catalog is not None:
            return catalog

        catalog = await self._builder.build()
        self._store.put(CacheKey.CATALOG, catalog)
        return catalog

    async def _build_sector_index(self) -> SectorIndex:
        sectors = self._store.get(CacheKey.SECTOR_INDEX)
        if sectors is not None:
            return sectors

        catalog = await self.get_catalog()
        sectors = build_sector_index(catalog, self._unknown_sector)
        self._store.put(CacheKey.SECTOR_INDEX, sectors)
        logger.info("Sector index built: %d sectors", len(sectors))
        return sectors

    # =========================================================================
    # Views
    # =========================================================================

    def normalize_page(self, start: Any, size: Any) -> tuple[int, int]:
        """Resolve page parameters against this service's defaults."""
        return normalize_page(start, size, self._default_start, self._default_size)

    async def list_tickers(
        self,
        start: Any = None,
        size: Any = None,
        sector: str | None = None,
    ) -> list[InstrumentRecord]:
        """
        Get one page of the catalog.

        Args:
            start: Offset of the first record (default 0)
            size: Maximum number of records (default 25)
            sector: Only page through records carrying this sector label

        Returns:
            Records `[start, start + size)`; empty when start is past the end
        """
        start_i, size_i = self.normalize_page(start, size)
        logger.debug("start: %d; size: %d; sector: %s", start_i, size_i, sector)

        catalog = await self.get_catalog()
        if sector:
            rows: Catalog | list[InstrumentRecord] = [r for r in catalog if r.sector == sector]
        else:
            rows = catalog
        return list(rows[start_i : start_i + size_i])

    async def list_sectors(self) -> SectorIndex:
        """
        Get the sector index, deriving and caching it on a miss.

        Raises:
            AggregateFailure: If the catalog has to be built and the build fails
        """
        sectors = self._store.get(CacheKey.SECTOR_INDEX)
        if sectors is not None:
            return sectors
        return await self._flights.run(CacheKey.SECTOR_INDEX.value, self._build_sector_index)

    async def find_tickers(self, symbol: str) -> list[InstrumentRecord]:
        """Get every record with this symbol (one per listing exchange)."""
        wanted = symbol.strip().upper()
        catalog = await self.get_catalog()
        return [r for r in catalog if r.id is not None and r.id.upper() == wanted]

    async def summary(self) -> CatalogSummary:
        """Get record counts by source and by sector."""
        catalog = await self.get_catalog()

        by_source: dict[str, int] = {}
        by_sector: dict[str, int] = {}
        for record in catalog:
            by_source[record.source] = by_source.get(record.source, 0) + 1
            by_sector[record.sector] = by_sector.get(record.sector, 0) + 1

        return CatalogSummary(
            total=len(catalog),
            by_source=by_source,
            by_sector=by_sector,
        )
