"""
Catalog build errors.
"""

from pathlib import Path


class CatalogError(Exception):
    """Base class for catalog errors."""

    pass


class ParseFailure(CatalogError):
    """Raised when a ticker list cannot be read or parsed."""

    def __init__(self, source: str, path: Path | str, reason: str):
        super().__init__(f"Failed to parse {source} ticker list ({path}): {reason}")
        self.source = source
        self.path = Path(path)
        self.reason = reason


class AggregateFailure(CatalogError):
    """
    Raised when a catalog build fails.

    `cause` is the first failing source in configured order; `failures` holds
    every source that failed during the same build.
    """

    def __init__(self, cause: ParseFailure, failures: list[ParseFailure] | None = None):
        self.cause = cause
        self.failures = failures or [cause]
        super().__init__(
            f"Catalog build failed ({len(self.failures)} source(s) failed): {cause}"
        )

    def to_detail(self) -> dict[str, str | list[str]]:
        """Serializable description for API error responses."""
        return {
            "error": "catalog_build_failed",
            "source": self.cause.source,
            "reason": self.cause.reason,
            "failed_sources": [f.source for f in self.failures],
        }
