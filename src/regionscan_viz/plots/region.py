"""Region detail plot: stacked p-value bars per region around a selection."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from regionscan_viz.config import VARIANT_PVALUE_FIELD, PlotThresholds, PValueTransform
from regionscan_viz.formats import ScoredField
from regionscan_viz.models import RegionRecord, VariantRecord
from regionscan_viz.plots.scene import (
    Axis,
    Circle,
    OrdinalPalette,
    Polyline,
    Rect,
    Scene,
    Text,
    dashed_segments,
)
from regionscan_viz.scales import LinearScale
from regionscan_viz.selection import SelectedRegionDetail

logger = logging.getLogger(__name__)

LEGEND_WIDTH = 180
REGION_RECT_HEIGHT = 5
MIN_RECT_WIDTH = 4
MARGIN_TOP = 30
MARGIN_BOTTOM = 35
MARGIN_LEFT = 48
MARGIN_RIGHT = 15
GENE_RECT_HEIGHT = 3
GENE_ROW_HEIGHT = GENE_RECT_HEIGHT + 12
VARIANT_RADIUS = 2.0
DIMMED_OPACITY = 0.2
# Recombination axis never tops out below this rate (cM/Mb).
RECOMBINATION_MIN_MAX = 120


@dataclass(frozen=True)
class RegionHighlight:
    """Legend highlight state, independent of zoom and selection."""

    highlighted: frozenset[str] = frozenset()

    def toggle(self, field_name: str) -> "RegionHighlight":
        if field_name in self.highlighted:
            return RegionHighlight(self.highlighted - {field_name})
        return RegionHighlight(self.highlighted | {field_name})

    def opacity(self, field_name: str) -> float:
        if not self.highlighted or field_name in self.highlighted:
            return 1.0
        return DIMMED_OPACITY


@dataclass(frozen=True)
class RegionBar:
    region: int
    start: int
    end: int
    field: str
    pvalue: float
    record: RegionRecord


def ordered_fields(pvalue_fields: Sequence[str], active: Sequence[str]) -> list[str]:
    """P-value fields with the active Miami variables first."""

    available = list(dict.fromkeys(pvalue_fields))
    leading = [name for name in dict.fromkeys(active) if name in available]
    return leading + [name for name in available if name not in leading]


def region_bars(
    records: Iterable[RegionRecord],
    fields: Sequence[str],
) -> list[RegionBar]:
    """One bar per region and p-value field, spanning the region's members."""

    grouped: dict[int, list[RegionRecord]] = defaultdict(list)
    for record in records:
        grouped[record.region].append(record)

    bars = []
    for region in sorted(grouped):
        members = grouped[region]
        start = min(min(member.start_bp, member.end_bp) for member in members)
        end = max(max(member.start_bp, member.end_bp) for member in members)
        head = members[0]
        for field_name in fields:
            pvalue = head.pvalues.get(field_name)
            if pvalue:
                bars.append(RegionBar(region, start, end, field_name, pvalue, head))
    return bars


def projected(items: Iterable[Any], transform: PValueTransform) -> list[tuple[Any, float]]:
    """Pair each item with its transformed ``pvalue``, dropping items the transform cannot place."""

    plotted = []
    for item in items:
        y = transform.project(item.pvalue)
        if y is not None:
            plotted.append((item, y))
    return plotted


def pack_gene_rows(genes: Sequence[Mapping[str, Any]]) -> list[int]:
    """Assign each gene a 1-based row so no two genes in a row overlap."""

    order = sorted(range(len(genes)), key=lambda index: (genes[index]["start"], genes[index]["end"]))
    row_ends: list[float] = []
    rows = [0] * len(genes)
    for index in order:
        gene = genes[index]
        for row, last_end in enumerate(row_ends):
            if last_end < gene["start"]:
                row_ends[row] = gene["end"]
                rows[index] = row + 1
                break
        else:
            row_ends.append(gene["end"])
            rows[index] = len(row_ends)
    return rows


def build_region_plot(
    detail: SelectedRegionDetail,
    scored_fields: Sequence[ScoredField],
    active_fields: Sequence[str],
    width: float,
    *,
    palette: OrdinalPalette | None = None,
    highlight: RegionHighlight = RegionHighlight(),
    transform: PValueTransform = PValueTransform.NEG_LOG10,
    thresholds: PlotThresholds = PlotThresholds(),
    variants: Sequence[VariantRecord] = (),
    genes: Sequence[Mapping[str, Any]] | None = None,
    recombination: Sequence[Mapping[str, Any]] | None = None,
) -> Scene:
    """Lay out the region plot for a resolved detail window."""

    fields = ordered_fields([item.name for item in scored_fields if item.is_pvalue], active_fields)
    palette = palette or OrdinalPalette(fields)
    main_width = width - LEGEND_WIDTH
    height = 0.4 * width
    chromosome = detail.chr

    scene = Scene(width=width, height=height, title=f"Region Plot Chr {chromosome}")
    scene.add(Text(main_width / 2, 14, scene.title, group="title"))

    bars = projected(region_bars(detail.data, fields), transform)
    if not bars:
        logger.debug("Region plot has no p-values for chr %s", chromosome)
        return scene

    x_scale = LinearScale(
        (min(bar.start for bar, _ in bars), max(bar.end for bar, _ in bars)),
        (MARGIN_LEFT, main_width - MARGIN_RIGHT),
        clamp=True,
    )
    x_lo, x_hi = x_scale.domain

    visible_genes = [
        gene for gene in (genes or []) if gene["end"] >= x_lo and gene["start"] <= x_hi
    ]
    gene_rows = pack_gene_rows(visible_genes)
    gene_space = max(gene_rows, default=0) * GENE_ROW_HEIGHT

    window_variants = projected(
        (
            variant
            for variant in variants
            if variant.chr == chromosome
            and variant.start_bp >= x_lo
            and variant.end_bp <= x_hi
            and variant.pvalue
        ),
        transform,
    )

    # Thresholds outside the transform's domain are not drawn.
    region_threshold = transform.project(thresholds.region_region)
    variant_threshold = transform.project(thresholds.region_variant) if window_variants else None
    y_values = [y for _, y in bars] + [y for _, y in window_variants]
    y_values += [value for value in (region_threshold, variant_threshold) if value is not None]
    y_scale = LinearScale(
        (max(y_values), min(y_values)),
        (MARGIN_TOP, height - MARGIN_BOTTOM - gene_space - 0.5 * REGION_RECT_HEIGHT),
    )

    scene.add(
        Axis(
            "bottom",
            position=height - MARGIN_BOTTOM,
            start=MARGIN_LEFT,
            end=main_width - MARGIN_RIGHT,
            ticks=tuple((x_scale(value), f"{value:,.0f}") for value in x_scale.ticks(5)),
            label=f"Chr {chromosome} position",
            group="x-axis",
        )
    )
    scene.add(
        Axis(
            "left",
            position=MARGIN_LEFT,
            start=y_scale.range[0],
            end=y_scale.range[1],
            ticks=tuple((y_scale(value), f"{value:g}") for value in y_scale.ticks(7)),
            label=transform.axis_label,
            group="y-axis",
        )
    )

    for bar, y in bars:
        x0 = x_scale(bar.start)
        scene.add(
            Rect(
                x=x0,
                y=y_scale(y) - REGION_RECT_HEIGHT / 2,
                width=max(MIN_RECT_WIDTH, x_scale(bar.end) - x0),
                height=REGION_RECT_HEIGHT,
                fill=palette(bar.field),
                opacity=highlight.opacity(bar.field),
                group=bar.field,
                datum=bar.record,
            )
        )

    variant_color = palette(VARIANT_PVALUE_FIELD)
    for variant, y in window_variants:
        scene.add(
            Circle(
                x_scale(variant.bp),
                y_scale(y),
                VARIANT_RADIUS,
                fill=variant_color,
                opacity=highlight.opacity(VARIANT_PVALUE_FIELD),
                group="variants",
                datum=variant,
            )
        )

    plot_left, plot_right = x_scale.range
    if region_threshold is not None:
        scene.extend(
            dashed_segments(
                plot_left, y_scale(region_threshold), plot_right, y_scale(region_threshold), group="region-threshold"
            )
        )
    if variant_threshold is not None:
        scene.extend(
            dashed_segments(
                plot_left,
                y_scale(variant_threshold),
                plot_right,
                y_scale(variant_threshold),
                stroke=variant_color,
                group="variant-threshold",
            )
        )

    gene_base = height - MARGIN_BOTTOM - gene_space
    for gene, row in zip(visible_genes, gene_rows):
        x0 = x_scale(gene["start"])
        x1 = x_scale(gene["end"])
        y = gene_base + (row - 1) * GENE_ROW_HEIGHT + 12
        scene.add(Rect(x=x0, y=y, width=max(x1 - x0, 1), height=GENE_RECT_HEIGHT, fill="#555555", group="genes", datum=gene))
        label = gene.get("external_name") or gene.get("id")
        if label:
            scene.add(Text((x0 + x1) / 2, y - 2, str(label), size=9, group="genes"))

    if recombination:
        points = [
            point for point in recombination if x_lo <= point["pos"] <= x_hi
        ]
        if points:
            top = max(RECOMBINATION_MIN_MAX, max(point["recomb_rate"] for point in points))
            recomb_scale = LinearScale((top, 0), y_scale.range)
            scene.add(
                Polyline(
                    tuple((x_scale(point["pos"]), recomb_scale(point["recomb_rate"])) for point in points),
                    stroke="#1f77b4",
                    stroke_width=1,
                    opacity=0.7,
                    group="recombination",
                )
            )
            scene.add(
                Axis(
                    "right",
                    position=main_width - MARGIN_RIGHT,
                    start=recomb_scale.range[0],
                    end=recomb_scale.range[1],
                    ticks=tuple((recomb_scale(value), f"{value:g}") for value in recomb_scale.ticks(5)),
                    label="Recombination rate (cM/Mb)",
                    group="recombination-axis",
                )
            )

    legend_fields = fields + ([VARIANT_PVALUE_FIELD] if window_variants else [])
    for index, field_name in enumerate(legend_fields):
        y = MARGIN_TOP + 18 * index
        scene.add(
            Rect(
                x=main_width + 10,
                y=y - 8,
                width=10,
                height=10,
                fill=palette(field_name),
                opacity=highlight.opacity(field_name),
                group="legend",
                datum=field_name,
            )
        )
        scene.add(Text(main_width + 26, y, field_name, anchor="start", group="legend"))

    logger.debug(
        "Region plot chr %s: %d bars, %d variants, %d genes",
        chromosome,
        len(bars),
        len(window_variants),
        len(visible_genes),
    )
    return scene
