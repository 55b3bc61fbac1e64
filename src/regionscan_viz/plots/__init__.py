"""Scene builders for the Miami, QQ and region plots."""

from .draw import draw_scene, render_scene
from .miami import MiamiPlot, brush_to_filter, build_miami_plot, tooltip
from .qq import build_qq_plot, qq_series
from .region import RegionHighlight, build_region_plot, pack_gene_rows
from .scene import (
    TABLEAU10,
    Axis,
    Circle,
    Diamond,
    Line,
    OrdinalPalette,
    Polyline,
    Rect,
    Scene,
    Text,
    dashed_segments,
    hit_test,
)

__all__ = [
    "draw_scene",
    "render_scene",
    "MiamiPlot",
    "brush_to_filter",
    "build_miami_plot",
    "tooltip",
    "build_qq_plot",
    "qq_series",
    "RegionHighlight",
    "build_region_plot",
    "pack_gene_rows",
    "TABLEAU10",
    "Axis",
    "Circle",
    "Diamond",
    "Line",
    "OrdinalPalette",
    "Polyline",
    "Rect",
    "Scene",
    "Text",
    "dashed_segments",
    "hit_test",
]
