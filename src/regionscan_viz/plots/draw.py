"""Render scenes to SVG or PNG with matplotlib."""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib import patches  # noqa: E402

from regionscan_viz.plots.scene import (  # noqa: E402
    Axis,
    Circle,
    Diamond,
    Line,
    Polyline,
    Rect,
    Scene,
    Text,
)

logger = logging.getLogger(__name__)

DPI = 100
SUPPORTED_SUFFIXES = (".svg", ".png")
TICK_LENGTH = 3
_ANCHORS = {"start": "left", "middle": "center", "end": "right"}


def _color(value: str | None) -> str:
    return "none" if value in (None, "none") else value


def _draw_axis(ax, axis: Axis) -> None:
    if axis.orientation == "bottom":
        ax.plot([axis.start, axis.end], [axis.position, axis.position], color="black", linewidth=1)
        for pixel, label in axis.ticks:
            ax.plot([pixel, pixel], [axis.position, axis.position + TICK_LENGTH], color="black", linewidth=1)
            ax.text(pixel, axis.position + TICK_LENGTH + 2, label, ha="center", va="top", fontsize=8)
        if axis.label:
            ax.text((axis.start + axis.end) / 2, axis.position + 24, axis.label, ha="center", va="top", fontsize=9)
        return

    direction = -1 if axis.orientation == "left" else 1
    ax.plot([axis.position, axis.position], [axis.start, axis.end], color="black", linewidth=1)
    for pixel, label in axis.ticks:
        tip = axis.position + direction * TICK_LENGTH
        ax.plot([axis.position, tip], [pixel, pixel], color="black", linewidth=1)
        ax.text(
            tip + direction * 2,
            pixel,
            label,
            ha="right" if direction < 0 else "left",
            va="center",
            fontsize=8,
        )
    if axis.label:
        ax.text(
            axis.position + direction * 36,
            (axis.start + axis.end) / 2,
            axis.label,
            ha="center",
            va="center",
            rotation=90,
            fontsize=9,
        )


def render_scene(scene: Scene):
    """Build a matplotlib figure for ``scene``; the caller closes it."""

    fig = plt.figure(figsize=(scene.width / DPI, scene.height / DPI), dpi=DPI)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_xlim(0, scene.width)
    ax.set_ylim(scene.height, 0)
    ax.set_axis_off()

    for primitive in scene.primitives:
        if isinstance(primitive, Circle):
            ax.add_patch(
                patches.Circle(
                    (primitive.cx, primitive.cy),
                    primitive.r,
                    facecolor=primitive.fill,
                    alpha=primitive.opacity,
                    linewidth=0,
                )
            )
        elif isinstance(primitive, Diamond):
            ax.add_patch(
                patches.Polygon(
                    primitive.points,
                    closed=True,
                    facecolor=primitive.fill,
                    alpha=primitive.opacity,
                    linewidth=0,
                )
            )
        elif isinstance(primitive, Rect):
            ax.add_patch(
                patches.Rectangle(
                    (primitive.x, primitive.y),
                    primitive.width,
                    primitive.height,
                    facecolor=_color(primitive.fill),
                    edgecolor=_color(primitive.stroke),
                    linewidth=primitive.stroke_width if primitive.stroke else 0,
                    alpha=primitive.opacity,
                )
            )
        elif isinstance(primitive, Line):
            ax.plot(
                [primitive.x1, primitive.x2],
                [primitive.y1, primitive.y2],
                color=primitive.stroke,
                linewidth=primitive.stroke_width,
                alpha=primitive.opacity,
            )
        elif isinstance(primitive, Polyline):
            if primitive.points:
                xs, ys = zip(*primitive.points)
                ax.plot(xs, ys, color=primitive.stroke, linewidth=primitive.stroke_width, alpha=primitive.opacity)
        elif isinstance(primitive, Text):
            ax.text(
                primitive.x,
                primitive.y,
                primitive.text,
                ha=_ANCHORS.get(primitive.anchor, "center"),
                va="baseline",
                fontsize=primitive.size,
                rotation=-primitive.rotation,
                color=primitive.fill,
            )
        elif isinstance(primitive, Axis):
            _draw_axis(ax, primitive)
    return fig


def draw_scene(scene: Scene, path: str | Path) -> Path:
    """Write ``scene`` to ``path``; the suffix picks SVG or PNG."""

    output = Path(path)
    if output.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported output format: {output.suffix or '(none)'}. Use .svg or .png")

    output.parent.mkdir(parents=True, exist_ok=True)
    fig = render_scene(scene)
    try:
        fig.savefig(output, format=output.suffix.lower().lstrip("."))
    finally:
        plt.close(fig)
    logger.info("Wrote %s (%d primitives) to %s", scene.title or "scene", len(scene), output)
    return output
