"""Miami plot scene builder: two mirrored p-value panels on a genomic axis."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from regionscan_viz.config import AssemblyInfo, PlotThresholds, PValueTransform
from regionscan_viz.coordinates import GenomicCoordinateMapper
from regionscan_viz.filters import BrushFilter
from regionscan_viz.models import GenomicRecord, RegionRecord
from regionscan_viz.plots.scene import (
    Axis,
    Circle,
    Diamond,
    OrdinalPalette,
    Rect,
    Scene,
    Text,
    dashed_segments,
    hit_test,
)
from regionscan_viz.scales import LinearScale
from regionscan_viz.selection import SelectedRegionDetail

logger = logging.getLogger(__name__)

MARGIN_TOP = 25
MARGIN_BOTTOM = 25
MARGIN_RIGHT = 20
MARGIN_MIDDLE = 20
LEGEND_SPACE = 20
MARGIN_LEFT = 48

POINT_OPACITY = 0.5

# Denser plots get smaller points.
RADIUS_SCALE = LinearScale((20000, 1), (3, 5), clamp=True)


def panel_value(record: GenomicRecord, field_name: str, transform: PValueTransform) -> float | None:
    """Transformed p-value of ``field_name``; ``None`` when absent or unplottable."""

    if not record.has_field(field_name):
        return None
    pvalue = record.value(field_name)
    if not pvalue:
        return None
    return transform.project(float(pvalue))


@dataclass(frozen=True)
class MiamiPoint:
    record: GenomicRecord
    value: float
    significant: bool


@dataclass(frozen=True)
class MiamiPanel:
    """One half of the plot: which field it shows and where its points land."""

    name: str
    field: str
    threshold: float
    threshold_value: float
    y_scale: LinearScale
    points: tuple[MiamiPoint, ...] = ()


@dataclass
class MiamiPlot:
    scene: Scene
    mapper: GenomicCoordinateMapper | None
    upper: MiamiPanel | None = None
    lower: MiamiPanel | None = None
    radius: float = RADIUS_SCALE(1)
    records: list[GenomicRecord] = field(default_factory=list)

    def hit_test(self, x: float, y: float) -> GenomicRecord | None:
        return hit_test(self.scene, x, y)

    def brush_to_filter(self, x0: float, x1: float) -> BrushFilter:
        if self.mapper is None:
            raise ValueError("Cannot brush an empty Miami plot")
        return brush_to_filter(self.mapper, x0, x1)


def brush_to_filter(mapper: GenomicCoordinateMapper, x0: float, x1: float) -> BrushFilter:
    """Invert a horizontal brush selection into a genomic ``BrushFilter``."""

    left, right = sorted((x0, x1))
    return BrushFilter(x0_lim=mapper.invert(left), x1_lim=mapper.invert(right))


def tooltip(record: GenomicRecord) -> list[str]:
    """Hover text lines for a plotted record."""

    lines = [f"Region: {record.region}", f"Chr: {record.chr}"]
    if isinstance(record, RegionRecord):
        lines.extend([f"Start: {record.start_bp:,}", f"End: {record.end_bp:,}"])
        if record.gene:
            lines.append(f"Gene: {record.gene}")
        return lines

    pvalue = "n/a" if record.pvalue is None else f"{record.pvalue:.5g}"
    lines.extend(
        [
            f"Pos: {record.bp:,}",
            f"Sglm_p: {pvalue}",
            f"Variant: {record.variant or ''}",
        ]
    )
    return lines


def _panel_points(
    records: Sequence[GenomicRecord],
    field_name: str,
    transform: PValueTransform,
    sign: float,
    threshold_value: float,
) -> list[MiamiPoint]:
    points = []
    for record in records:
        value = panel_value(record, field_name, transform)
        if value is None:
            continue
        value *= sign
        significant = value >= threshold_value if sign > 0 else value <= threshold_value
        points.append(MiamiPoint(record=record, value=value, significant=significant))
    return points


def _domain(values: list[float], threshold_value: float) -> tuple[float, float]:
    lo = min(values + [threshold_value])
    hi = max(values + [threshold_value])
    return lo, hi


def build_miami_plot(
    records: Sequence[GenomicRecord],
    upper_field: str,
    lower_field: str,
    assembly: AssemblyInfo,
    width: float,
    *,
    thresholds: PlotThresholds = PlotThresholds(),
    palette: OrdinalPalette | None = None,
    selected: SelectedRegionDetail | None = None,
    transform: PValueTransform = PValueTransform.NEG_LOG10,
) -> MiamiPlot:
    """Lay out the Miami plot for ``records``.

    The upper panel plots ``transform(p)`` for ``upper_field``; the lower panel
    plots its negation for ``lower_field`` so that, with the default
    transform, it shows ``log10(p)`` mirrored below the shared axis.
    """

    palette = palette or OrdinalPalette([upper_field, lower_field])
    height = width / 2
    single_chromosome = len({record.chr for record in records}) == 1
    title = "Miami Plot"
    if single_chromosome:
        title += f" Chr {records[0].chr}"

    scene = Scene(width=width, height=height, title=title)
    scene.add(Text(width / 2, 12, title, group="title"))

    upper_threshold = transform(thresholds.miami_upper)
    lower_threshold = -transform(thresholds.miami_lower)
    upper_points = _panel_points(records, upper_field, transform, 1.0, upper_threshold)
    lower_points = _panel_points(records, lower_field, transform, -1.0, lower_threshold)

    plotted = [point.record for point in upper_points] + [point.record for point in lower_points]
    if not plotted:
        logger.debug("Miami plot has no plottable records for %s/%s", upper_field, lower_field)
        return MiamiPlot(scene=scene, mapper=None)

    radius = RADIUS_SCALE(len(plotted))
    mapper = GenomicCoordinateMapper.from_records(
        plotted,
        assembly,
        (MARGIN_LEFT, width - MARGIN_RIGHT),
        inset=radius * 1.5,
    )
    plot_left, plot_right = mapper.pixel_range

    upper_lo, upper_hi = _domain([point.value for point in upper_points] or [upper_threshold], upper_threshold)
    upper_scale = LinearScale((upper_hi, upper_lo), (MARGIN_TOP, height / 2 - MARGIN_MIDDLE))
    lower_lo, lower_hi = _domain([point.value for point in lower_points] or [lower_threshold], lower_threshold)
    lower_scale = LinearScale(
        (lower_hi, lower_lo),
        (MARGIN_TOP + height / 2 + MARGIN_MIDDLE, height - MARGIN_BOTTOM - LEGEND_SPACE),
    )

    scene.add(
        Axis(
            "bottom",
            position=height / 2,
            start=plot_left,
            end=plot_right,
            ticks=tuple(mapper.ticks()),
            group="x-axis",
        )
    )
    for name, scale in (("upper", upper_scale), ("lower", lower_scale)):
        scene.add(
            Axis(
                "left",
                position=MARGIN_LEFT,
                start=scale.range[0],
                end=scale.range[1],
                ticks=tuple((scale(value), f"{value:g}") for value in scale.ticks(7)),
                label=transform.axis_label,
                group=f"y-axis-{name}",
            )
        )

    if selected is not None and selected.chr in mapper.chromosomes:
        x0 = mapper.to_pixel(selected.chr, selected.bp_range[0])
        x1 = mapper.to_pixel(selected.chr, selected.bp_range[1])
        scene.add(
            Rect(
                x=x0,
                y=MARGIN_TOP,
                width=x1 - x0,
                height=height - MARGIN_BOTTOM - MARGIN_TOP - LEGEND_SPACE,
                stroke="gold",
                stroke_width=3,
                opacity=0.5,
                group="selected",
            )
        )

    diamond_size = radius * 15
    half_height = math.sqrt(diamond_size / (2 * math.tan(math.pi / 6)))
    half_width = half_height * math.tan(math.pi / 6)

    for name, points, scale, field_name in (
        ("upper", upper_points, upper_scale, upper_field),
        ("lower", lower_points, lower_scale, lower_field),
    ):
        color = palette(field_name)
        for point in points:
            cx = mapper.to_pixel(point.record.chr, point.record.location)
            cy = scale(point.value)
            if point.significant:
                scene.add(
                    Diamond(cx, cy, half_width, half_height, fill=color, opacity=POINT_OPACITY, group=name, datum=point.record)
                )
            else:
                scene.add(Circle(cx, cy, radius, fill=color, opacity=POINT_OPACITY, group=name, datum=point.record))

    for offset, field_name in ((-100, upper_field), (100, lower_field)):
        x = width / 2 + offset
        y = height - LEGEND_SPACE
        scene.add(Circle(x - 7, y - 5, 5, fill=palette(field_name), group="legend"))
        scene.add(Text(x, y, field_name, anchor="start", group="legend"))

    scene.extend(
        dashed_segments(plot_left, upper_scale(upper_threshold), plot_right, upper_scale(upper_threshold), group="upper-threshold")
    )
    scene.extend(
        dashed_segments(plot_left, lower_scale(lower_threshold), plot_right, lower_scale(lower_threshold), group="lower-threshold")
    )

    logger.debug(
        "Miami plot: %d upper and %d lower points on %d chromosome(s)",
        len(upper_points),
        len(lower_points),
        len(mapper.chromosomes),
    )
    return MiamiPlot(
        scene=scene,
        mapper=mapper,
        upper=MiamiPanel("upper", upper_field, thresholds.miami_upper, upper_threshold, upper_scale, tuple(upper_points)),
        lower=MiamiPanel("lower", lower_field, thresholds.miami_lower, lower_threshold, lower_scale, tuple(lower_points)),
        radius=radius,
        records=list(records),
    )
