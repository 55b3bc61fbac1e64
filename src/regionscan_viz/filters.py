"""Brush zoom history and the record filters it implies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence, TypeVar

from regionscan_viz.models import GenomicRecord, RegionRecord, VariantRecord

if TYPE_CHECKING:
    from regionscan_viz.selection import SelectedRegionDetail

RecordT = TypeVar("RecordT", bound=GenomicRecord)


@dataclass(frozen=True)
class GenomicPosition:
    """A base-pair position on one chromosome."""

    chr: int
    pos: float


@dataclass(frozen=True)
class BrushFilter:
    """One zoom step: a genomic interval that may span several chromosomes."""

    x0_lim: GenomicPosition
    x1_lim: GenomicPosition

    def passes_lower(self, record: GenomicRecord) -> bool:
        lower = self.x0_lim
        return record.chr > lower.chr or (
            record.chr == lower.chr and record.start_bp >= lower.pos
        )

    def passes_upper(self, record: GenomicRecord) -> bool:
        upper = self.x1_lim
        return record.chr < upper.chr or (
            record.chr == upper.chr and record.end_bp <= upper.pos
        )

    def passes(self, record: GenomicRecord) -> bool:
        return self.passes_lower(record) and self.passes_upper(record)

    @property
    def single_chromosome(self) -> int | None:
        if self.x0_lim.chr == self.x1_lim.chr:
            return self.x0_lim.chr
        return None


class BrushFilterHistory:
    """Ordered zoom history; only the most recent filter is active."""

    def __init__(self, filters: Iterable[BrushFilter] = ()) -> None:
        self._filters: list[BrushFilter] = list(filters)

    def push(self, brush: BrushFilter) -> None:
        self._filters.append(brush)

    def pop(self) -> BrushFilter | None:
        """Remove and return the most recent filter, if any."""

        if not self._filters:
            return None
        return self._filters.pop()

    def clear(self) -> None:
        self._filters.clear()

    @property
    def active(self) -> BrushFilter | None:
        return self._filters[-1] if self._filters else None

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[BrushFilter]:
        return iter(self._filters)

    def __repr__(self) -> str:
        return f"BrushFilterHistory({self._filters!r})"


def apply_brush(records: Iterable[RecordT], brush: BrushFilter | None) -> list[RecordT]:
    """Return records inside ``brush``; every record passes when it is ``None``."""

    if brush is None:
        return list(records)
    return [record for record in records if brush.passes(record)]


def visible_records(
    records: Iterable[RecordT],
    history: BrushFilterHistory,
) -> list[RecordT]:
    """Apply the active filter of ``history`` to ``records``."""

    return apply_brush(records, history.active)


def detail_is_stale(detail: "SelectedRegionDetail", brush: BrushFilter | None) -> bool:
    """Whether a selected detail window no longer fits the zoomed main view."""

    if brush is None:
        return False

    chromosome = detail.region.chr
    if brush.x0_lim.chr > chromosome or brush.x1_lim.chr < chromosome:
        return True

    if brush.single_chromosome == chromosome:
        window_start = detail.bp_range[0]
        return brush.x0_lim.pos > window_start or brush.x1_lim.pos < window_start

    return False


def prefilter_variants(
    variants: Iterable[VariantRecord],
    regions: Sequence[RegionRecord],
) -> list[VariantRecord]:
    """Keep variants on a loaded chromosome and inside the loaded position range."""

    if not regions:
        return []

    chromosomes = {region.chr for region in regions}
    min_bp = min(region.start_bp for region in regions)
    max_bp = max(region.end_bp for region in regions)

    return [
        variant
        for variant in variants
        if variant.chr in chromosomes and min_bp <= variant.bp <= max_bp
    ]
