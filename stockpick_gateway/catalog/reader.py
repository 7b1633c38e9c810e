"""
Ticker list reader.

Parses one exchange ticker list (delimited text with a header row) into
instrument records tagged with the exchange the list belongs to.
"""

import asyncio
from pathlib import Path

import pandas as pd

from stockpick_gateway.catalog.errors import ParseFailure
from stockpick_gateway.catalog.models import InstrumentRecord
from stockpick_gateway.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1000

# Accepted header names (lower-cased) per well-known column
SYMBOL_COLUMNS = ("symbol", "ticker")
SECTOR_COLUMNS = ("sector",)
NAME_COLUMNS = ("name", "company name", "company")
INDUSTRY_COLUMNS = ("industry",)


def exchange_from_path(path: Path | str) -> str:
    """
    Derive the exchange tag from a ticker list file name.

    `companylist-nasdaq.csv` -> `nasdaq`; a name without a dash is used whole.
    """
    stem = Path(path).stem
    return stem.rsplit("-", 1)[-1].strip().lower() or stem.lower()


def _find_column(columns: list[str], candidates: tuple[str, ...]) -> str | None:
    lookup = {col.strip().lower(): col for col in columns}
    for candidate in candidates:
        if candidate in lookup:
            return lookup[candidate]
    return None


def _read_header(path: Path) -> list[str]:
    header = pd.read_csv(path, nrows=0, dtype=str, skipinitialspace=True)
    columns = [str(col).strip() for col in header.columns]
    return [col for col in columns if not col.startswith("Unnamed:")]


def read_source(path: Path | str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[InstrumentRecord]:
    """
    Read a ticker list into instrument records.

    The file is streamed in chunks. Either every row parses or nothing is
    returned: any failure raises ParseFailure and drops the rows read so far.

    Args:
        path: Path to the ticker list
        chunk_size: Rows parsed per chunk

    Returns:
        Records in file order, stamped with the exchange tag

    Raises:
        ParseFailure: File missing/unreadable, malformed, or lacking a
            required column
    """
    path = Path(path)
    source = exchange_from_path(path)

    try:
        columns = _read_header(path)
        symbol_col = _find_column(columns, SYMBOL_COLUMNS)
        sector_col = _find_column(columns, SECTOR_COLUMNS)
        if symbol_col is None:
            raise ParseFailure(source, path, "missing required column 'Symbol'")
        if sector_col is None:
            raise ParseFailure(source, path, "missing required column 'Sector'")
        name_col = _find_column(columns, NAME_COLUMNS)
        industry_col = _find_column(columns, INDUSTRY_COLUMNS)

        records: list[InstrumentRecord] = []
        line_no = 1
        reader = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            chunksize=chunk_size,
        )
        with reader:
            for chunk in reader:
                chunk.columns = [str(col).strip() for col in chunk.columns]
                for row in chunk.to_dict(orient="records"):
                    line_no += 1
                    fields = {col: str(row.get(col, "")).strip() for col in columns}
                    symbol = fields[symbol_col]
                    if not symbol:
                        raise ParseFailure(source, path, f"line {line_no}: missing symbol")
                    records.append(
                        InstrumentRecord(
                            symbol=symbol,
                            name=fields[name_col] if name_col else "",
                            sector=fields[sector_col],
                            industry=fields[industry_col] if industry_col else "",
                            source=source,
                            fields=fields,
                        )
                    )

    except ParseFailure:
        raise
    except (OSError, ValueError) as e:
        # pandas parser/empty-data/decode errors are ValueError subclasses
        raise ParseFailure(source, path, str(e)) from e

    logger.info("Parsing done for %s ticker list: %d records", source, len(records))
    return records


async def read_source_async(
    path: Path | str,
    timeout_s: float | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[InstrumentRecord]:
    """
    Read a ticker list in a worker thread without blocking the event loop.

    Exceeding `timeout_s` is reported as a ParseFailure.
    """
    path = Path(path)
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(read_source, path, chunk_size),
            timeout=timeout_s,
        )
    except TimeoutError as e:
        raise ParseFailure(
            exchange_from_path(path), path, f"read timed out after {timeout_s}s"
        ) from e
