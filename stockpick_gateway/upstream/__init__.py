"""
Upstream market data provider integration.
"""

from stockpick_gateway.upstream.client import AsyncMarketDataClient, UpstreamError

__all__ = ["AsyncMarketDataClient", "UpstreamError"]
