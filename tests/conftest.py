"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("STOCKPICK_ENV", "development")

# Import shared fixtures from api_fixtures
from tests.api_fixtures import *  # noqa: E402, F403
from tests.source_fixtures import (  # noqa: E402
    SCENARIO_ROWS,
    TICKER_HEADER,
    csv_line,
    ticker_rows,
)


@pytest.fixture
def tickers_dir(tmp_path: Path) -> Path:
    """Directory for ticker list files."""
    path = tmp_path / "tickers"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def write_ticker_list(tickers_dir: Path) -> Callable[..., Path]:
    """
    Factory writing a ticker list in the exchange download format.

    Values are quoted and every line ends with a trailing comma.
    """

    def _write(
        exchange: str,
        rows: list[list[str]],
        header: list[str] | None = None,
    ) -> Path:
        path = tickers_dir / f"companylist-{exchange}.csv"
        lines = [csv_line(header or TICKER_HEADER)]
        lines.extend(csv_line(row) for row in rows)
        path.write_text("".join(lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scenario_sources(write_ticker_list: Callable[..., Path]) -> list[Path]:
    """Three ticker lists: nasdaq {AA,BB}, nyse {CC,DD,EE}, amex {FF}."""
    return [
        write_ticker_list(exchange, ticker_rows(pairs))
        for exchange, pairs in SCENARIO_ROWS.items()
    ]


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset module-level singletons between tests."""
    yield

    from stockpick_gateway.api import catalog_routes, market_routes

    catalog_routes._cache_store = None
    catalog_routes._catalog_service = None
    market_routes._market_client = None
