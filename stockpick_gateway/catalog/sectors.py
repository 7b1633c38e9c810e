"""
Sector index derivation.
"""

from stockpick_gateway.catalog.models import Catalog, SectorEntry, SectorIndex

UNKNOWN_SECTOR = "n/a"


def build_sector_index(catalog: Catalog, unknown_sector: str = UNKNOWN_SECTOR) -> SectorIndex:
    """
    Distinct sector labels of a catalog in first-seen order.

    The "unknown" label (and blank labels) are left out. Ordinals are assigned
    0..N-1 in enumeration order, so they are only stable for a given catalog.
    """
    seen: dict[str, None] = {}
    for record in catalog:
        label = record.sector
        if label and label != unknown_sector:
            seen.setdefault(label, None)

    return tuple(SectorEntry(id=idx, name=name) for idx, name in enumerate(seen))
