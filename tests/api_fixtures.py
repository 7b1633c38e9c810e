"""
Shared API fixtures and dependency override helpers for testing.
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from stockpick_gateway.api.market_routes import get_market_client
from stockpick_gateway.config import Settings, get_settings_dep
from stockpick_gateway.main import app


class DependencyOverrider:
    """Helper to manage FastAPI dependency overrides in tests."""

    def __init__(self, app):
        self.app = app
        self.overrides = {}

    def override(self, dependency, value):
        """Register an override."""
        self.app.dependency_overrides[dependency] = value
        self.overrides[dependency] = value

    def clear(self):
        """Clear all overrides."""
        self.app.dependency_overrides.clear()
        self.overrides.clear()


@pytest.fixture
def overrider():
    """Fixture that provides a DependencyOverrider and clears it after the test."""
    overrider = DependencyOverrider(app)
    yield overrider
    overrider.clear()


@pytest.fixture
def gateway_settings(tickers_dir: Path) -> Settings:
    """Settings reading the three scenario ticker lists from a temp directory."""
    return Settings(
        tickers_dir=tickers_dir,
        source_files=[
            "companylist-nasdaq.csv",
            "companylist-nyse.csv",
            "companylist-amex.csv",
        ],
        source_read_timeout_s=10.0,
        upstream_base_url="https://upstream.test",
        upstream_api_key=None,
    )


@pytest.fixture
def mock_market_client() -> AsyncMock:
    """Default mock upstream client for tests."""
    client = AsyncMock()
    client.get_realtime_quotes = AsyncMock(return_value={"quoteResponse": {"result": []}})
    client.get_historical_data = AsyncMock(return_value={"chart": {"result": [], "error": None}})
    client.quote_summary = AsyncMock(return_value={"quoteSummary": {"result": [], "error": None}})
    return client


def create_test_client(
    overrider: DependencyOverrider,
    settings: Settings,
    market_client: AsyncMock,
) -> TestClient:
    """Create a TestClient with common overrides applied."""
    overrider.override(get_settings_dep, lambda: settings)
    overrider.override(get_market_client, lambda: market_client)
    return TestClient(app)


@pytest.fixture
def api_client(overrider, gateway_settings, mock_market_client):
    """TestClient with common overrides."""
    with create_test_client(overrider, gateway_settings, mock_market_client) as client:
        yield client
