"""
Runtime utilities for the StockPick gateway.

Provides:
- Process-lifetime cache store for derived catalog data
- Single-flight coordination for concurrent cache-miss builds
"""

from stockpick_gateway.runtime.cache import CacheKey, CacheStats, CacheStore
from stockpick_gateway.runtime.single_flight import SingleFlight

__all__ = [
    "CacheKey",
    "CacheStats",
    "CacheStore",
    "SingleFlight",
]
