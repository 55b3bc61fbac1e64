"""Render RegionScan plots and tables from a JSON run config."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from regionscan_viz.adapters import load_tables
from regionscan_viz.config import PlotThresholds, PValueTransform
from regionscan_viz.controller import DEFAULT_WIDTH, VisualizationController
from regionscan_viz.example_data import load_recombination
from regionscan_viz.filters import BrushFilter, GenomicPosition
from regionscan_viz.lookups import fetch_genes, fetch_recombination
from regionscan_viz.models import RegionRecord
from regionscan_viz.plots import draw_scene

logger = logging.getLogger(__name__)


class UploadError(ValueError):
    """An upload was rejected by validation."""


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render RegionScan visualizations from JSON config")
    parser.add_argument("--config", required=True, help="Path to run JSON config")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def load_json(path: str | Path) -> dict[str, Any]:
    return json.loads(Path(path).read_text())


def _position(raw: dict[str, Any]) -> GenomicPosition:
    return GenomicPosition(chr=int(raw["chr"]), pos=float(raw["pos"]))


def build_brushes(config: dict[str, Any]) -> list[BrushFilter]:
    return [
        BrushFilter(x0_lim=_position(item["x0"]), x1_lim=_position(item["x1"]))
        for item in config.get("brushes", [])
    ]


def build_thresholds(config: dict[str, Any]) -> PlotThresholds:
    return PlotThresholds(**{key: float(value) for key, value in config.get("thresholds", {}).items()})


def find_selection(controller: VisualizationController, raw: dict[str, Any]) -> RegionRecord:
    """First visible region record matching every key of ``raw``."""

    for record in controller.visible:
        if not isinstance(record, RegionRecord):
            continue
        if all(record.to_row().get(key) == value for key, value in raw.items()):
            return record
    raise ValueError(f"No visible region matches selection {raw}")


def load_uploads(controller: VisualizationController, config: dict[str, Any]) -> None:
    if config.get("example"):
        error = controller.load_example()
    else:
        if "regions" not in config:
            raise ValueError("Config needs 'regions' (or 'example': true)")
        error = controller.load_regions(load_tables(config["regions"]))
        if not error and config.get("variants"):
            error = controller.load_variants(load_tables(config["variants"]))
    if error:
        raise UploadError(error)


def region_tracks(controller: VisualizationController, config: dict[str, Any]) -> dict[str, Any]:
    """Optional gene and recombination tracks for the region plot."""

    detail = controller.detail
    tracks: dict[str, Any] = {}
    if detail is None:
        return tracks

    start, end = detail.bp_range
    assembly = controller.state.assembly.assembly
    if config.get("genes"):
        tracks["genes"] = fetch_genes(detail.chr, start, end, assembly) or []

    source = config.get("recombination")
    if source == "local":
        tracks["recombination"] = load_recombination(detail.chr)
    elif source == "remote":
        items = fetch_recombination(detail.chr, start, end, assembly) or []
        tracks["recombination"] = [
            {"pos": (item["start"] + item["end"]) / 2, "recomb_rate": item["value"]}
            for item in items
        ]
    elif source:
        raise ValueError(f"Unknown recombination source: {source}")
    return tracks


def write_outputs(controller: VisualizationController, config: dict[str, Any]) -> dict[str, str]:
    outputs = config.get("outputs", {})
    written: dict[str, str] = {}

    if "miami" in outputs:
        written["miami"] = str(draw_scene(controller.miami_plot().scene, outputs["miami"]))
    if "qq" in outputs:
        scene = controller.qq_plot(seed=config.get("qq_seed"))
        written["qq"] = str(draw_scene(scene, outputs["qq"]))
    if "region" in outputs:
        scene = controller.region_plot(**region_tracks(controller, config.get("region_tracks", {})))
        if scene is None:
            logger.warning("No region detail selected; skipping region plot")
        else:
            written["region"] = str(draw_scene(scene, outputs["region"]))
    if "table" in outputs:
        written["table"] = str(controller.results_table().to_tsv(outputs["table"]))
    return written


def run(config: dict[str, Any]) -> dict[str, Any]:
    controller = VisualizationController(
        config.get("assembly", "GRCh38"),
        width=float(config.get("width", DEFAULT_WIDTH)),
        thresholds=build_thresholds(config),
        transform=PValueTransform(config.get("transform", PValueTransform.NEG_LOG10.value)),
    )
    load_uploads(controller, config)
    logger.info(
        "Loaded %d regions and %d variants",
        len(controller.state.regions),
        len(controller.state.variants),
    )

    upper = config.get("upper", "")
    lower = config.get("lower", "")
    if upper or lower:
        controller.set_variables(upper, lower)

    for brush in build_brushes(config):
        controller.push_brush(brush)

    if "select" in config:
        controller.select(find_selection(controller, config["select"]))

    written = write_outputs(controller, config)
    detail = controller.detail
    return {
        "assembly": controller.state.assembly.assembly.value,
        "regions": len(controller.state.regions),
        "variants": len(controller.state.variants),
        "visible": len(controller.visible),
        "filters": len(controller.state.history),
        "detail_regions": detail.regions if detail else [],
        "outputs": written,
    }


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        payload = run(load_json(args.config))
    except (FileNotFoundError, KeyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
