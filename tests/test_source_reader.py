"""
Tests for the ticker list reader.
"""

import time
from pathlib import Path

import pytest

from stockpick_gateway.catalog import reader
from stockpick_gateway.catalog.errors import ParseFailure
from stockpick_gateway.catalog.reader import (
    exchange_from_path,
    read_source,
    read_source_async,
)
from tests.source_fixtures import ticker_rows

NASDAQ_DOWNLOAD = (
    '"Symbol","Name","LastSale","MarketCap","IPOyear","Sector","industry","Summary Quote",\n'
    '"PIH","1347 Property Insurance Holdings, Inc.","7.2","$43.46M","2014","Finance",'
    '"Property-Casualty Insurers","https://www.nasdaq.com/symbol/pih",\n'
    '"TURN","180 Degree Capital Corp.","2.05","$63.8M","n/a","n/a","n/a",'
    '"https://www.nasdaq.com/symbol/turn",\n'
)


class TestExchangeFromPath:
    """Tests for exchange tag extraction."""

    def test_companylist_names(self) -> None:
        assert exchange_from_path("/data/tickers/companylist-nasdaq.csv") == "nasdaq"
        assert exchange_from_path(Path("companylist-NYSE.csv")) == "nyse"

    def test_name_without_dash(self) -> None:
        assert exchange_from_path("amex.csv") == "amex"


class TestReadSource:
    """Tests for read_source."""

    def test_reads_exchange_download_format(self, tickers_dir: Path) -> None:
        """Quoted values, embedded commas and trailing commas should parse."""
        path = tickers_dir / "companylist-nasdaq.csv"
        path.write_text(NASDAQ_DOWNLOAD, encoding="utf-8")

        records = read_source(path)

        assert [r.symbol for r in records] == ["PIH", "TURN"]
        pih = records[0]
        assert pih.name == "1347 Property Insurance Holdings, Inc."
        assert pih.sector == "Finance"
        assert pih.industry == "Property-Casualty Insurers"
        assert pih.source == "nasdaq"
        assert pih.id is None
        assert pih.fields["MarketCap"] == "$43.46M"
        assert pih.fields["Summary Quote"] == "https://www.nasdaq.com/symbol/pih"
        # Trailing-comma column is dropped
        assert not any(key.startswith("Unnamed") for key in pih.fields)

    def test_unknown_sector_kept_verbatim(self, tickers_dir: Path) -> None:
        """The 'n/a' sentinel must not be converted to a missing value."""
        path = tickers_dir / "companylist-nasdaq.csv"
        path.write_text(NASDAQ_DOWNLOAD, encoding="utf-8")

        records = read_source(path)

        assert records[1].sector == "n/a"
        assert records[1].fields["IPOyear"] == "n/a"

    def test_every_record_tagged_with_source(self, write_ticker_list) -> None:
        path = write_ticker_list("nyse", ticker_rows([("CC", "Finance"), ("DD", "n/a")]))

        records = read_source(path)

        assert {r.source for r in records} == {"nyse"}

    def test_chunked_read_matches_single_chunk(self, write_ticker_list) -> None:
        """Streaming in small chunks should not change the result."""
        pairs = [(f"S{i:03d}", "Tech" if i % 2 else "Energy") for i in range(25)]
        path = write_ticker_list("nasdaq", ticker_rows(pairs))

        assert read_source(path, chunk_size=1) == read_source(path, chunk_size=1000)
        assert len(read_source(path, chunk_size=4)) == 25

    def test_header_only_file(self, write_ticker_list) -> None:
        path = write_ticker_list("amex", [])

        assert read_source(path) == []

    def test_case_insensitive_headers(self, tickers_dir: Path) -> None:
        path = tickers_dir / "companylist-amex.csv"
        path.write_text("ticker,COMPANY NAME,sector\nXYZ,Xyz Inc.,Energy\n", encoding="utf-8")

        records = read_source(path)

        assert records[0].symbol == "XYZ"
        assert records[0].name == "Xyz Inc."
        assert records[0].sector == "Energy"


class TestReadSourceFailures:
    """Failures must raise ParseFailure and never return partial results."""

    def test_missing_sector_column(self, write_ticker_list) -> None:
        path = write_ticker_list(
            "nyse",
            [["CC", "CC Corp."]],
            header=["Symbol", "Name"],
        )

        with pytest.raises(ParseFailure, match="Sector") as exc_info:
            read_source(path)

        assert exc_info.value.source == "nyse"
        assert exc_info.value.path == path

    def test_missing_symbol_column(self, tickers_dir: Path) -> None:
        path = tickers_dir / "companylist-nyse.csv"
        path.write_text("Name,Sector\nAcme,Tech\n", encoding="utf-8")

        with pytest.raises(ParseFailure, match="Symbol"):
            read_source(path)

    def test_ragged_row_fails_whole_file(self, tickers_dir: Path) -> None:
        """A malformed row after valid rows fails the whole file."""
        path = tickers_dir / "companylist-nyse.csv"
        path.write_text(
            "Symbol,Name,Sector\n"
            "CC,Cc Corp.,Finance\n"
            "DD,Dd Corp.,Tech,extra,extra,extra\n",
            encoding="utf-8",
        )

        with pytest.raises(ParseFailure) as exc_info:
            read_source(path)

        assert exc_info.value.source == "nyse"

    def test_blank_symbol(self, tickers_dir: Path) -> None:
        path = tickers_dir / "companylist-nyse.csv"
        path.write_text("Symbol,Name,Sector\nCC,Cc Corp.,Finance\n,Nameless,Tech\n", encoding="utf-8")

        with pytest.raises(ParseFailure, match="line 3: missing symbol"):
            read_source(path)

    def test_missing_file(self, tickers_dir: Path) -> None:
        with pytest.raises(ParseFailure) as exc_info:
            read_source(tickers_dir / "companylist-otc.csv")

        assert exc_info.value.source == "otc"

    def test_empty_file(self, tickers_dir: Path) -> None:
        path = tickers_dir / "companylist-amex.csv"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ParseFailure):
            read_source(path)


class TestReadSourceAsync:
    """Tests for the threaded async reader."""

    @pytest.mark.asyncio
    async def test_reads_in_thread(self, write_ticker_list) -> None:
        path = write_ticker_list("nasdaq", ticker_rows([("AA", "Tech")]))

        records = await read_source_async(path, timeout_s=5)

        assert [r.symbol for r in records] == ["AA"]

    @pytest.mark.asyncio
    async def test_timeout_is_parse_failure(
        self, write_ticker_list, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_ticker_list("nasdaq", ticker_rows([("AA", "Tech")]))

        def slow_read(path, chunk_size):
            time.sleep(0.3)
            return []

        monkeypatch.setattr(reader, "read_source", slow_read)

        with pytest.raises(ParseFailure, match="timed out") as exc_info:
            await read_source_async(path, timeout_s=0.05)

        assert exc_info.value.source == "nasdaq"
