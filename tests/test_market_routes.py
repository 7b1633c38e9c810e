"""
Tests for upstream market data routes.

Uses a mocked upstream client - NO REAL NETWORK CALLS.
"""

from unittest.mock import AsyncMock

from stockpick_gateway.upstream.client import UpstreamError

# =============================================================================
# Pass-through Tests
# =============================================================================


class TestPassThrough:
    """Upstream JSON is returned unchanged."""

    def test_realtime_quotes(self, api_client, mock_market_client: AsyncMock) -> None:
        mock_market_client.get_realtime_quotes.return_value = {
            "quoteResponse": {"result": [{"symbol": "AAPL"}], "error": None}
        }

        response = api_client.get("/api/v1/quote/realtime/aapl")

        assert response.status_code == 200
        assert response.json()["quoteResponse"]["result"][0]["symbol"] == "AAPL"
        mock_market_client.get_realtime_quotes.assert_awaited_once_with("aapl")

    def test_intraday_query_params(self, api_client, mock_market_client: AsyncMock) -> None:
        mock_market_client.get_intraday_chart_data.return_value = {"chart": {}}

        response = api_client.get(
            "/api/v1/chart/intraday/MSFT", params={"interval": "5m", "prePost": "true"}
        )

        assert response.status_code == 200
        mock_market_client.get_intraday_chart_data.assert_awaited_once_with("MSFT", "5m", True)

    def test_futures_default_market(self, api_client, mock_market_client: AsyncMock) -> None:
        mock_market_client.futures.return_value = {"quoteResponse": {"result": []}}

        api_client.get("/api/v1/markets/futures")

        mock_market_client.futures.assert_awaited_once_with(None)


# =============================================================================
# Wrapped Responses
# =============================================================================


class TestWrappedResponses:
    """Chart history and company info carry the requested ticker as id."""

    def test_historical_wrapped_with_id(self, api_client, mock_market_client: AsyncMock) -> None:
        mock_market_client.get_historical_data.return_value = {
            "chart": {"result": [{"meta": {"symbol": "AAPL"}}], "error": None}
        }

        response = api_client.get("/api/v1/chart/historical/AAPL", params={"range": "5y"})

        assert response.status_code == 200
        assert response.json() == {
            "historicals": {
                "result": [{"meta": {"symbol": "AAPL"}}],
                "error": None,
                "id": "AAPL",
            }
        }
        mock_market_client.get_historical_data.assert_awaited_once_with("AAPL", None, "5y")

    def test_info_wrapped_with_id(self, api_client, mock_market_client: AsyncMock) -> None:
        response = api_client.get("/api/v1/ticker/info/IBM")

        assert response.status_code == 200
        assert response.json() == {"infos": {"result": [], "error": None, "id": "IBM"}}


# =============================================================================
# Upstream Failures
# =============================================================================


class TestUpstreamFailures:
    """Upstream failures surface as 502."""

    def test_upstream_error_returns_502(self, api_client, mock_market_client: AsyncMock) -> None:
        mock_market_client.get_headlines_by_ticker.side_effect = UpstreamError(
            "Upstream returned 404 for /v1/finance/search", 404
        )

        response = api_client.get("/api/v1/news/headlines/ZZZZ")

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["error"] == "upstream_error"
        assert detail["status_code"] == 404

    def test_catalog_unaffected_by_upstream(
        self, api_client, mock_market_client: AsyncMock, scenario_sources
    ) -> None:
        mock_market_client.get_realtime_quotes.side_effect = UpstreamError("down")

        assert api_client.get("/api/v1/quote/realtime/AA").status_code == 502
        assert api_client.get("/api/v1/sectors").status_code == 200
