"""
import_engine.report - Structured results of import runs.

Both result types are frozen: an importer builds one at the very end of
a successful run and hands it to the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

EAV_COUNT_KEYS = ("varchar", "int", "decimal", "text", "datetime")
SATELLITE_COUNT_KEYS = ("stock", "gallery", "price_index")


@dataclass(frozen=True)
class ImportResult:
    total_rows: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    warnings: tuple[str, ...] = ()
    eav_counts: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    process_time: float = 0.0       # seconds
    db_time: float = 0.0
    total_time: float = 0.0

    def __post_init__(self):
        counts = {k: 0 for k in EAV_COUNT_KEYS + SATELLITE_COUNT_KEYS}
        counts.update(self.eav_counts)
        object.__setattr__(self, "eav_counts", MappingProxyType(counts))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @property
    def eav_total(self) -> int:
        return sum(self.eav_counts[k] for k in EAV_COUNT_KEYS)

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "warnings": list(self.warnings),
            "eav_counts": dict(self.eav_counts),
            "process_time_ms": round(self.process_time * 1000, 3),
            "db_time_ms": round(self.db_time * 1000, 3),
            "total_time_ms": round(self.total_time * 1000, 3),
        }


@dataclass(frozen=True)
class StockImportResult:
    imported: int = 0
    skipped: int = 0
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "imported": self.imported,
            "skipped": self.skipped,
            "warnings": list(self.warnings),
        }


def format_report(result: ImportResult, raw_sql: bool = False) -> str:
    """Human-readable summary printed by the products-import command."""
    c = result.eav_counts
    lines = [
        "=== Import Report ===",
        f"CSV rows:       {result.total_rows}",
        f"Created:        {result.created}",
        f"Updated:        {result.updated}",
        f"Skipped:        {result.skipped}",
        f"EAV values:     {result.eav_total} ("
        + " ".join(f"{k}={c[k]}" for k in EAV_COUNT_KEYS) + ")",
        f"Stock rows:     {c['stock']}",
        f"Gallery rows:   {c['gallery']}",
        f"Price rows:     {c['price_index']}",
        f"Mode:           {'Raw SQL' if raw_sql else 'SQLAlchemy native'}",
        f"Total time:     {result.total_time * 1000:.0f}ms",
        f"  - Processing: {result.process_time * 1000:.0f}ms",
        f"  - DB upsert:  {result.db_time * 1000:.0f}ms",
        "=====================",
    ]
    return "\n".join(lines)
