"""
Catalog builder.

Reads every configured ticker list concurrently and merges the results into
one ordered catalog.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from uuid import uuid4

from stockpick_gateway.catalog.errors import AggregateFailure, ParseFailure
from stockpick_gateway.catalog.models import Catalog, InstrumentRecord
from stockpick_gateway.catalog.reader import (
    DEFAULT_CHUNK_SIZE,
    exchange_from_path,
    read_source_async,
)
from stockpick_gateway.logging import build_context, get_logger

logger = get_logger(__name__)

# (path) -> records; raises ParseFailure
SourceReader = Callable[[Path], Awaitable[list[InstrumentRecord]]]


class CatalogBuilder:
    """
    Builds the catalog from a fixed list of ticker lists.

    Every call to `build` re-reads all sources; caching the result is the
    caller's job.
    """

    def __init__(
        self,
        source_paths: Sequence[Path | str],
        read_timeout_s: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        reader: SourceReader | None = None,
    ) -> None:
        """
        Initialize builder.

        Args:
            source_paths: Ticker lists in catalog order
            read_timeout_s: Per-source read timeout (None = unbounded)
            chunk_size: Rows parsed per chunk
            reader: Override for the per-source reader (defaults to the
                threaded pandas reader)
        """
        self._source_paths = [Path(p) for p in source_paths]
        self._read_timeout_s = read_timeout_s
        self._chunk_size = chunk_size
        self._reader = reader or self._default_reader

    @property
    def source_paths(self) -> list[Path]:
        """Configured ticker lists in catalog order."""
        return list(self._source_paths)

    async def _default_reader(self, path: Path) -> list[InstrumentRecord]:
        return await read_source_async(path, self._read_timeout_s, self._chunk_size)

    async def _read_one(self, path: Path) -> list[InstrumentRecord]:
        try:
            return await self._reader(path)
        except ParseFailure:
            raise
        except Exception as e:
            raise ParseFailure(exchange_from_path(path), path, str(e)) from e

    async def build(self) -> Catalog:
        """
        Read all sources and merge them.

        Output order is configured source order, then file order, regardless
        of which read finishes first.

        Returns:
            The merged catalog with identifiers assigned

        Raises:
            AggregateFailure: If any source fails; nothing partial is returned
        """
        with build_context(uuid4().hex[:8]):
            logger.info("Building catalog from %d source(s)", len(self._source_paths))

            results = await asyncio.gather(
                *(self._read_one(path) for path in self._source_paths),
                return_exceptions=True,
            )

            failures: list[ParseFailure] = []
            for result in results:
                if isinstance(result, ParseFailure):
                    failures.append(result)
                elif isinstance(result, BaseException):
                    raise result

            if failures:
                error = AggregateFailure(failures[0], failures)
                logger.error("%s", error)
                raise error

            catalog: list[InstrumentRecord] = []
            for records in results:
                catalog.extend(
                    record.model_copy(update={"id": record.symbol}) for record in records
                )

            logger.info("Catalog built: %d records", len(catalog))
            return tuple(catalog)
