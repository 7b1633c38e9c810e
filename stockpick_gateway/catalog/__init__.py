"""
Instrument catalog.

Provides:
- Ticker list parsing per exchange
- Concurrent catalog build and merge
- Sector index derivation
- Cached, paginated catalog queries
"""

from stockpick_gateway.catalog.builder import CatalogBuilder
from stockpick_gateway.catalog.errors import AggregateFailure, CatalogError, ParseFailure
from stockpick_gateway.catalog.models import (
    Catalog,
    CatalogSummary,
    InstrumentRecord,
    SectorEntry,
    SectorIndex,
)
from stockpick_gateway.catalog.reader import read_source, read_source_async
from stockpick_gateway.catalog.sectors import build_sector_index
from stockpick_gateway.catalog.service import CatalogQueryService, normalize_page

__all__ = [
    "AggregateFailure",
    "Catalog",
    "CatalogBuilder",
    "CatalogError",
    "CatalogQueryService",
    "CatalogSummary",
    "InstrumentRecord",
    "ParseFailure",
    "SectorEntry",
    "SectorIndex",
    "build_sector_index",
    "normalize_page",
    "read_source",
    "read_source_async",
]
