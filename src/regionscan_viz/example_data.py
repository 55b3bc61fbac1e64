"""Readers for the bundled example upload and per-chromosome recombination files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from regionscan_viz.config import RECOMBINATION_CHROMOSOMES

DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def load_example_data(data_dir: str | Path | None = None) -> dict[str, str]:
    """Return the example region and variant TSV text."""

    root = Path(data_dir) if data_dir is not None else DATA_DIR
    example_dir = root / "example"
    return {
        "region": (example_dir / "regionout.tsv").read_text(),
        "variant": (example_dir / "snpout.tsv").read_text(),
    }


def load_recombination(chromosome: str | int, data_dir: str | Path | None = None) -> list[dict[str, Any]]:
    """Return the pre-generated recombination rates for ``chr1`` .. ``chr22``."""

    label = str(chromosome)
    if not label.startswith("chr"):
        label = f"chr{label}"
    if label not in RECOMBINATION_CHROMOSOMES:
        raise ValueError(
            f"No recombination data for {chromosome!r}; expected one of chr1..chr22"
        )

    root = Path(data_dir) if data_dir is not None else DATA_DIR
    return json.loads((root / "recomb" / f"{label}.json").read_text())
