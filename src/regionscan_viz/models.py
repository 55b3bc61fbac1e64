"""Canonical in-memory data models used by the visualizations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union

from regionscan_viz.config import VARIANT_PVALUE_FIELD
from regionscan_viz.formats import LOCATION_FIELDS, STRING_FIELDS


def _as_int(value: Any) -> int:
    return int(value)


@dataclass(frozen=True)
class RegionRecord:
    """Aggregate statistics for one scored genomic region.

    ``pvalues`` holds every p-value field of the upload, with ``None`` for
    absent or rejected values. Remaining numeric columns live in ``stats``.
    """

    id: int
    chr: int
    start_bp: int
    end_bp: int
    region: int
    gene: str | None = None
    pvalues: Mapping[str, float | None] = field(default_factory=dict)
    stats: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], pvalue_fields: Iterable[str]) -> "RegionRecord":
        """Build a record from a normalized row that passed validation."""

        pvalue_names = list(pvalue_fields)
        return cls(
            id=_as_int(row["id"]),
            chr=_as_int(row["chr"]),
            start_bp=_as_int(row["start_bp"]),
            end_bp=_as_int(row["end_bp"]),
            region=_as_int(row["region"]),
            gene=row.get("gene"),
            pvalues={name: row.get(name) for name in pvalue_names},
            stats={
                key: value
                for key, value in row.items()
                if key not in LOCATION_FIELDS
                and key not in STRING_FIELDS
                and key not in pvalue_names
            },
        )

    @property
    def location(self) -> float:
        """Plotting position: the region midpoint."""

        return (self.start_bp + self.end_bp) / 2

    def value(self, field_name: str) -> Any:
        if field_name in self.pvalues:
            return self.pvalues[field_name]
        return self.stats.get(field_name)

    def has_field(self, field_name: str) -> bool:
        return field_name in self.pvalues or field_name in self.stats

    def to_row(self) -> dict[str, Any]:
        """Serialize into a flat dict for tables."""

        row: dict[str, Any] = {
            "id": self.id,
            "chr": self.chr,
            "region": self.region,
            "start_bp": self.start_bp,
            "end_bp": self.end_bp,
            "gene": self.gene,
        }
        row.update(self.pvalues)
        row.update(self.stats)
        return row


@dataclass(frozen=True)
class VariantRecord:
    """Association statistics for a single variant inside a region."""

    chr: int
    bp: int
    start_bp: int
    end_bp: int
    region: int
    variant: str | None = None
    maf: float | None = None
    pvalue: float | None = None
    stats: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "VariantRecord":
        return cls(
            chr=_as_int(row["chr"]),
            bp=_as_int(row["bp"]),
            start_bp=_as_int(row["start_bp"]),
            end_bp=_as_int(row["end_bp"]),
            region=_as_int(row["region"]),
            variant=row.get("variant"),
            maf=row.get("maf"),
            pvalue=row.get(VARIANT_PVALUE_FIELD),
            stats={
                key: value
                for key, value in row.items()
                if key not in LOCATION_FIELDS
                and key not in STRING_FIELDS
                and key not in {"maf", VARIANT_PVALUE_FIELD}
            },
        )

    @property
    def location(self) -> float:
        return float(self.bp)

    def value(self, field_name: str) -> Any:
        if field_name == VARIANT_PVALUE_FIELD:
            return self.pvalue
        if field_name == "maf":
            return self.maf
        return self.stats.get(field_name)

    def has_field(self, field_name: str) -> bool:
        return field_name in {VARIANT_PVALUE_FIELD, "maf"} or field_name in self.stats

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "chr": self.chr,
            "region": self.region,
            "bp": self.bp,
            "start_bp": self.start_bp,
            "end_bp": self.end_bp,
            "variant": self.variant,
            "maf": self.maf,
            VARIANT_PVALUE_FIELD: self.pvalue,
        }
        row.update(self.stats)
        return row


GenomicRecord = Union[RegionRecord, VariantRecord]
