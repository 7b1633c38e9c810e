"""
Async client for the upstream market data provider.

Quotes, charts, news, search, company info and option chains are fetched on
demand and passed through unexamined. Handles request pacing and retries.
"""

import asyncio
import time
from logging import Logger
from typing import Any

import httpx

from stockpick_gateway.config import Settings
from stockpick_gateway.upstream.rate_limit import UpstreamThrottle

API_KEY_HEADER = "X-API-KEY"

DEFAULT_FUTURES = "ES=F"
DEFAULT_COMMODITIES = "GC=F,SI=F,PL=F,HG=F"
QUOTE_SUMMARY_MODULES = "assetProfile,summaryDetail,price,defaultKeyStatistics"


class UpstreamError(Exception):
    """Raised when the upstream provider cannot serve a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _symbols(value: str) -> str:
    return ",".join(s.strip() for s in value.split(",") if s.strip())


def _loggable(headers: dict[str, str]) -> dict[str, str]:
    return {k: ("[REDACTED]" if k == API_KEY_HEADER else v) for k, v in headers.items()}


class AsyncMarketDataClient:
    """
    Async client for the upstream market data API.

    Handles:
    - Optional API key header
    - Request pacing (burst, then a steady rate)
    - Retry/backoff for 429, 5xx and transport errors
    """

    def __init__(
        self,
        settings: Settings,
        logger: Logger,
        backoff_base_s: float = 1.0,
    ) -> None:
        """
        Initialize upstream client.

        Args:
            settings: Application settings
            logger: Logger instance
            backoff_base_s: Base delay for exponential retry backoff
        """
        self._settings = settings
        self._logger = logger
        self._base_url = settings.upstream_base_url.rstrip("/")
        self._timeout = settings.upstream_timeout_s
        self._max_retries = settings.upstream_max_retries
        self._backoff_base_s = backoff_base_s

        self._throttle = UpstreamThrottle(
            rate=settings.upstream_rate_limit_rps,
            burst=settings.upstream_rate_limit_burst,
        )
        self._client: httpx.AsyncClient | None = None
        self._last_latency_ms: int = 0

    @property
    def metrics(self) -> dict[str, Any]:
        """Latency of the last call and request pacing counters."""
        return {
            "last_request_latency_ms": self._last_latency_ms,
            "throttle": self._throttle.stats,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._settings.upstream_api_key:
            headers[API_KEY_HEADER] = self._settings.upstream_api_key.get_secret_value()
        return headers

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a JSON document from the upstream API.

        Raises:
            UpstreamError: Non-success status, undecodable body, or retries exhausted
        """
        url = f"{self._base_url}{path}"
        headers = self._headers()
        params = {k: v for k, v in (params or {}).items() if v is not None}

        self._logger.debug(
            "Upstream request: GET %s params=%s headers=%s",
            url,
            params,
            _loggable(headers),
        )

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            backoff = self._backoff_base_s * (2 ** attempt)
            try:
                delay = await self._throttle.wait()
                if delay > 0:
                    self._logger.debug("Throttled upstream request by %.2fs", delay)

                client = await self._get_client()
                start_time = time.perf_counter()
                response = await client.get(url, headers=headers, params=params)
                self._last_latency_ms = int((time.perf_counter() - start_time) * 1000)

            except httpx.TimeoutException as e:
                last_error = e
                self._logger.warning(
                    "Upstream timeout, backing off %.1fs (attempt %d/%d)",
                    backoff,
                    attempt + 1,
                    self._max_retries + 1,
                )
                await asyncio.sleep(backoff)
                continue

            except httpx.RequestError as e:
                last_error = e
                self._logger.warning(
                    "Upstream request error: %s, backing off %.1fs (attempt %d/%d)",
                    str(e),
                    backoff,
                    attempt + 1,
                    self._max_retries + 1,
                )
                await asyncio.sleep(backoff)
                continue

            if response.status_code == 429 or response.status_code >= 500:
                last_error = UpstreamError(
                    f"Upstream returned {response.status_code}", response.status_code
                )
                self._logger.warning(
                    "Upstream status %d, backing off %.1fs (attempt %d/%d)",
                    response.status_code,
                    backoff,
                    attempt + 1,
                    self._max_retries + 1,
                )
                await asyncio.sleep(backoff)
                continue

            if response.status_code >= 400:
                raise UpstreamError(
                    f"Upstream returned {response.status_code} for {path}",
                    response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError(f"Upstream returned invalid JSON for {path}") from e

        status = last_error.status_code if isinstance(last_error, UpstreamError) else None
        raise UpstreamError(
            f"Request failed after {self._max_retries + 1} attempts: {last_error}",
            status,
        )

    # =========================================================================
    # Quotes
    # =========================================================================

    async def get_realtime_quotes(self, tickers: str) -> Any:
        """Realtime quotes for a comma-separated list of tickers."""
        return await self._get("/v7/finance/quote", {"symbols": _symbols(tickers)})

    async def get_forex_data(self, pairs: str) -> Any:
        """Quotes for comma-separated currency pairs (e.g. "eurusd,gbpusd")."""
        symbols = ",".join(f"{p.upper()}=X" for p in _symbols(pairs).split(",") if p)
        return await self._get("/v7/finance/quote", {"symbols": symbols})

    async def futures(self, market: str | None = None) -> Any:
        """Quote for a futures market (e.g. "NQ=F"); S&P 500 futures by default."""
        return await self._get("/v7/finance/quote", {"symbols": market or DEFAULT_FUTURES})

    async def commodities(self, commodities: str | None = None) -> Any:
        """Quotes for comma-separated commodity futures."""
        return await self._get(
            "/v7/finance/quote",
            {"symbols": _symbols(commodities or DEFAULT_COMMODITIES)},
        )

    # =========================================================================
    # Charts
    # =========================================================================

    async def get_intraday_chart_data(
        self,
        ticker: str,
        interval: str | None = None,
        pre_post: bool = False,
    ) -> Any:
        """Intraday chart for the current session."""
        return await self._get(
            f"/v8/finance/chart/{ticker}",
            {
                "interval": interval or "2m",
                "range": "1d",
                "includePrePost": str(bool(pre_post)).lower(),
            },
        )

    async def get_historical_data(
        self,
        ticker: str,
        interval: str | None = None,
        range_: str | None = None,
    ) -> Any:
        """Historical chart (default: daily bars over one year)."""
        return await self._get(
            f"/v8/finance/chart/{ticker}",
            {"interval": interval or "1d", "range": range_ or "1y"},
        )

    # =========================================================================
    # News & search
    # =========================================================================

    async def get_headlines_by_ticker(self, ticker: str) -> Any:
        """Recent news headlines for a ticker."""
        return await self._get(
            "/v1/finance/search",
            {"q": ticker, "quotesCount": 0, "newsCount": 10},
        )

    async def ticker_search(
        self,
        term: str,
        region: str | None = None,
        lang: str | None = None,
    ) -> Any:
        """Search tickers by company name or symbol."""
        return await self._get(
            "/v1/finance/search",
            {"q": term, "region": region, "lang": lang},
        )

    # =========================================================================
    # Company data
    # =========================================================================

    async def quote_summary(self, ticker: str) -> Any:
        """Company profile, price and key statistics."""
        return await self._get(
            f"/v10/finance/quoteSummary/{ticker}",
            {"modules": QUOTE_SUMMARY_MODULES},
        )

    async def option_chain(self, ticker: str) -> Any:
        """Option chain for the nearest expiry."""
        return await self._get(f"/v7/finance/options/{ticker}")

    async def recommendations(self, ticker: str) -> Any:
        """Symbols recommended alongside a ticker."""
        return await self._get(f"/v6/finance/recommendationsbysymbol/{ticker}")
