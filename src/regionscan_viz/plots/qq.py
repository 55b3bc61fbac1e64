"""QQ plot scene builder comparing observed p-values with a uniform reference."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from regionscan_viz.config import QQ_MAX_QUANTILES, QQ_REFERENCE_DRAWS, PValueTransform
from regionscan_viz.models import GenomicRecord
from regionscan_viz.plots.scene import Axis, Circle, OrdinalPalette, Polyline, Scene, Text, dashed_segments
from regionscan_viz.scales import LinearScale

logger = logging.getLogger(__name__)

MARGIN_TOP = 25
MARGIN_BOTTOM = 40
MARGIN_LEFT = 48


def cut_points(values: np.ndarray, count: int) -> np.ndarray:
    """Quantiles of sorted ``values`` at probabilities ``k / count`` for ``k = 1..count-1``."""

    if count < 2 or values.size == 0:
        return np.empty(0)
    probabilities = np.arange(1, count) / count
    return np.quantile(values, probabilities)


@dataclass(frozen=True)
class QQSeries:
    field: str
    observed: np.ndarray
    reference: np.ndarray

    def __len__(self) -> int:
        return int(self.observed.size)


def qq_series(
    field_name: str,
    pvalues: Iterable[float | None],
    rng: np.random.Generator,
    *,
    max_quantiles: int = QQ_MAX_QUANTILES,
    reference_draws: int = QQ_REFERENCE_DRAWS,
) -> QQSeries:
    """Observed and reference quantile cut points for one variable."""

    observed = np.sort(np.asarray([value for value in pvalues if value], dtype=float))
    count = min(max_quantiles, observed.size)
    if observed.size == 0:
        return QQSeries(field_name, np.empty(0), np.empty(0))

    reference = np.sort(rng.uniform(0.0, observed.max(), reference_draws))
    return QQSeries(
        field=field_name,
        observed=cut_points(observed, count),
        reference=cut_points(reference, count),
    )


def field_values(records: Iterable[GenomicRecord], field_name: str) -> list[float | None]:
    return [record.value(field_name) for record in records if record.has_field(field_name)]


def build_qq_plot(
    records: Sequence[GenomicRecord],
    fields: Sequence[str],
    width: float,
    *,
    palette: OrdinalPalette | None = None,
    transform: PValueTransform = PValueTransform.NEG_LOG10,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> Scene:
    """One polyline per variable of transformed (reference, observed) quantiles."""

    rng = rng or np.random.default_rng(seed)
    palette = palette or OrdinalPalette(fields)
    main_width = width * 0.7
    height = 0.75 * main_width

    scene = Scene(width=width, height=height, title="QQ Plot")
    scene.add(Text(main_width / 2, 12, "QQ Plot", group="title"))

    lines: list[tuple[str, list[tuple[float, float]]]] = []
    for field_name in dict.fromkeys(fields):
        series = qq_series(field_name, field_values(records, field_name), rng)
        pairs = [
            (transform(float(ref)), transform(float(obs)))
            for ref, obs in zip(series.reference, series.observed)
            if 0 < ref < 1 and 0 < obs < 1
        ]
        if pairs:
            lines.append((field_name, pairs))

    if not lines:
        logger.debug("QQ plot has no plottable series for %s", list(fields))
        return scene

    xs = [x for _, pairs in lines for x, _ in pairs]
    ys = [y for _, pairs in lines for _, y in pairs]
    x_scale = LinearScale((min(xs), max(xs)), (MARGIN_LEFT, main_width))
    y_scale = LinearScale((max(ys), min(ys)), (MARGIN_TOP, height - MARGIN_BOTTOM), clamp=True)

    for field_name, pairs in lines:
        scene.add(
            Polyline(
                tuple((x_scale(x), y_scale(y)) for x, y in pairs),
                stroke=palette(field_name),
                stroke_width=3,
                opacity=0.6,
                group=field_name,
            )
        )

    low = max(min(xs), min(ys))
    high = min(max(xs), max(ys))
    if high > low:
        scene.extend(
            dashed_segments(x_scale(low), y_scale(low), x_scale(high), y_scale(high), group="reference")
        )

    scene.add(
        Axis(
            "bottom",
            position=height - MARGIN_BOTTOM,
            start=MARGIN_LEFT,
            end=main_width,
            ticks=tuple((x_scale(value), f"{value:g}") for value in x_scale.ticks()),
            label=f"Uniform dist ({transform.axis_label})",
            group="x-axis",
        )
    )
    scene.add(
        Axis(
            "left",
            position=MARGIN_LEFT,
            start=MARGIN_TOP,
            end=height - MARGIN_BOTTOM,
            ticks=tuple((y_scale(value), f"{value:g}") for value in y_scale.ticks()),
            label=transform.axis_label,
            group="y-axis",
        )
    )

    for index, (field_name, _) in enumerate(lines):
        y = MARGIN_TOP + 20 * index
        scene.add(Circle(main_width + 20, y - 4, 5, fill=palette(field_name), group="legend"))
        scene.add(Text(main_width + 30, y, field_name, anchor="start", group="legend"))

    return scene
