"""Resolve the detail window around a selected region."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from regionscan_viz.config import DETAIL_HALF_SPAN_BP
from regionscan_viz.models import GenomicRecord, RegionRecord
from regionscan_viz.scales import extent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedRegionDetail:
    """Region records around a selection, with their observed bp range."""

    region: GenomicRecord
    data: list[RegionRecord] = field(default_factory=list)
    regions: list[int] = field(default_factory=list)
    bp_range: tuple[int, int] = (0, 0)

    @property
    def chr(self) -> int:
        return self.region.chr


def restart_points(regions: Iterable[RegionRecord]) -> dict[int, int]:
    """Per chromosome, where region numbering starts over (roughly the centromere).

    The restart is the ``start_bp`` of the first ``region == 1`` record seen
    after a record with ``region > 1``, walking records in ``start_bp`` order.
    Chromosomes whose numbering never restarts are absent.
    """

    by_chromosome: dict[int, list[RegionRecord]] = defaultdict(list)
    for record in regions:
        by_chromosome[record.chr].append(record)

    mapping: dict[int, int] = {}
    for chromosome, records in by_chromosome.items():
        seen_later_region = False
        for record in sorted(records, key=lambda item: (item.start_bp, item.end_bp)):
            if record.region > 1:
                seen_later_region = True
            elif record.region == 1 and seen_later_region:
                mapping[chromosome] = record.start_bp
                break
    return mapping


def detail_window(
    selected: GenomicRecord,
    restarts: Mapping[int, int],
    visible: Sequence[GenomicRecord],
    *,
    half_span: int = DETAIL_HALF_SPAN_BP,
) -> tuple[float, float]:
    """Compute the inclusive ``(min_bp, max_bp)`` window for ``selected``."""

    min_bp: float = 0
    max_bp: float = math.inf

    restart = restarts.get(selected.chr)
    if restart is not None:
        if selected.end_bp < restart:
            max_bp = restart
        else:
            min_bp = restart

    if selected.start_bp - min_bp > half_span:
        min_bp = selected.start_bp - half_span
    if max_bp - selected.start_bp > half_span:
        max_bp = selected.start_bp + half_span

    if visible and len({record.chr for record in visible}) == 1:
        low, high = extent([bp for record in visible for bp in (record.start_bp, record.end_bp)])
        min_bp = max(min_bp, low)
        max_bp = min(max_bp, high)

    return min_bp, max_bp


def resolve_detail(
    selected: GenomicRecord | None,
    restarts: Mapping[int, int],
    visible: Sequence[GenomicRecord],
) -> SelectedRegionDetail | None:
    """Slice the visible region records around ``selected``.

    Returns ``None`` when nothing is selected or no region record falls in
    the window.
    """

    if selected is None:
        return None

    min_bp, max_bp = detail_window(selected, restarts, visible)
    data = [
        record
        for record in visible
        if isinstance(record, RegionRecord)
        and record.chr == selected.chr
        and record.start_bp >= min_bp
        and record.end_bp <= max_bp
    ]
    if not data:
        logger.debug("No regions on chr %s within [%s, %s]", selected.chr, min_bp, max_bp)
        return None

    return SelectedRegionDetail(
        region=selected,
        data=data,
        regions=sorted({record.region for record in data}),
        bp_range=extent([bp for record in data for bp in (record.start_bp, record.end_bp)]),
    )
