"""
Pydantic models for the instrument catalog.
"""

from pydantic import BaseModel, ConfigDict, Field


class InstrumentRecord(BaseModel):
    """
    One row of an exchange ticker list.

    The well-known columns are lifted into typed attributes; every column of
    the row is also kept verbatim in `fields`.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(
        default=None,
        description="Stable identifier, equal to the symbol once the catalog is built",
    )
    symbol: str = Field(
        ...,
        description="Ticker symbol (e.g., AAPL)",
        min_length=1,
    )
    name: str = Field(default="", description="Company name")
    sector: str = Field(default="", description="Sector label as found in the list")
    industry: str = Field(default="", description="Industry label as found in the list")
    source: str = Field(
        ...,
        description="Exchange tag of the originating list (e.g., nasdaq)",
    )
    fields: dict[str, str] = Field(
        default_factory=dict,
        description="All columns of the source row, keyed by header name",
    )


class SectorEntry(BaseModel):
    """A sector label with its ordinal within one sector index build."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0)
    name: str


class CatalogSummary(BaseModel):
    """Counts over the built catalog."""

    total: int
    by_source: dict[str, int]
    by_sector: dict[str, int]


Catalog = tuple[InstrumentRecord, ...]
SectorIndex = tuple[SectorEntry, ...]
