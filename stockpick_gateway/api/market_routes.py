"""
Upstream market data routes.

Thin pass-through endpoints: requests are forwarded to the upstream provider
and its JSON is returned as-is (chart history and company info are wrapped
with the requested ticker as `id`).
"""

from collections.abc import Awaitable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from stockpick_gateway.config import Settings, get_settings_dep
from stockpick_gateway.logging import get_logger
from stockpick_gateway.upstream.client import AsyncMarketDataClient, UpstreamError

router = APIRouter(prefix="/api/v1", tags=["Market Data"])
logger = get_logger(__name__)

# Lazy-initialized client
_market_client: AsyncMarketDataClient | None = None


def get_market_client(settings: Settings = Depends(get_settings_dep)) -> AsyncMarketDataClient:
    """Get or create upstream client singleton."""
    global _market_client
    if _market_client is None:
        _market_client = AsyncMarketDataClient(settings, logger)
    return _market_client


def upstream_metrics() -> dict[str, Any] | None:
    """Metrics of the upstream client, or None before its first use."""
    return _market_client.metrics if _market_client is not None else None


async def close_market_client() -> None:
    """Close the upstream client if one was created."""
    global _market_client
    if _market_client is not None:
        await _market_client.close()
        _market_client = None


async def _forward(call: Awaitable[Any], what: str) -> Any:
    try:
        return await call
    except UpstreamError as e:
        logger.warning("Upstream %s failed: %s", what, e)
        raise HTTPException(
            status_code=502,
            detail={"error": "upstream_error", "message": str(e), "status_code": e.status_code},
        ) from e


def _with_id(data: Any, key: str, ticker: str) -> dict[str, Any]:
    section = data.get(key) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        section = {"result": section}
    return {**section, "id": ticker}


# =============================================================================
# Quotes
# =============================================================================


@router.get("/quote/realtime/{tickers}")
async def realtime_quotes(
    tickers: str,
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Realtime quotes, e.g. /quote/realtime/aapl,msft."""
    return await _forward(client.get_realtime_quotes(tickers), "quotes")


@router.get("/forex/{pairs}")
async def forex(
    pairs: str,
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Currency pair quotes, e.g. /forex/eurusd,gbpusd."""
    return await _forward(client.get_forex_data(pairs), "forex")


@router.get("/markets/futures")
async def futures(
    market: str | None = Query(default=None, description="Futures symbol, e.g. NQ=F"),
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Futures quote (ES=F, NQ=F, YM=F ...)."""
    return await _forward(client.futures(market), "futures")


@router.get("/markets/commodities")
async def commodities(
    commodities: str | None = Query(default=None, description="Comma-separated symbols"),
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Commodity futures quotes, e.g. GC=F,SI=F."""
    return await _forward(client.commodities(commodities), "commodities")


# =============================================================================
# News & search
# =============================================================================


@router.get("/news/headlines/{ticker}")
async def headlines(
    ticker: str,
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """News headlines for a ticker."""
    return await _forward(client.get_headlines_by_ticker(ticker), "headlines")


@router.get("/ticker/search/{term}")
async def ticker_search(
    term: str,
    region: str | None = Query(default=None),
    lang: str | None = Query(default=None),
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Ticker search by name, e.g. /ticker/search/Apple%20Inc.?region=US&lang=en-US."""
    return await _forward(client.ticker_search(term, region, lang), "search")


# =============================================================================
# Charts
# =============================================================================


@router.get("/chart/intraday/{ticker}")
async def intraday_chart(
    ticker: str,
    interval: str | None = Query(default=None, description="Bar interval, e.g. 2m"),
    pre_post: bool = Query(default=False, alias="prePost"),
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Intraday chart data."""
    return await _forward(
        client.get_intraday_chart_data(ticker, interval, pre_post), "intraday chart"
    )


@router.get("/chart/historical/{ticker}")
async def historical_chart(
    ticker: str,
    interval: str | None = Query(default=None, description="Bar interval, e.g. 1d"),
    range_: str | None = Query(default=None, alias="range", description="e.g. 1y"),
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> dict[str, Any]:
    """Historical chart data, wrapped as {historicals: {..., id}}."""
    data = await _forward(
        client.get_historical_data(ticker, interval, range_), "historical chart"
    )
    return {"historicals": _with_id(data, "chart", ticker)}


# =============================================================================
# Company data
# =============================================================================


@router.get("/ticker/info/{ticker}")
async def ticker_info(
    ticker: str,
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> dict[str, Any]:
    """Company info, wrapped as {infos: {..., id}}."""
    data = await _forward(client.quote_summary(ticker), "company info")
    return {"infos": _with_id(data, "quoteSummary", ticker)}


@router.get("/ticker/options/{ticker}")
async def option_chain(
    ticker: str,
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Option chain."""
    return await _forward(client.option_chain(ticker), "option chain")


@router.get("/ticker/recommendations/{ticker}")
async def recommendations(
    ticker: str,
    client: AsyncMarketDataClient = Depends(get_market_client),
) -> Any:
    """Recommended related symbols."""
    return await _forward(client.recommendations(ticker), "recommendations")
