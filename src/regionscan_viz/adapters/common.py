"""Shared utilities for tab-separated upload adapters."""

from __future__ import annotations

import glob
import io
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import pandas as pd


def _is_tsv_like(path: Path) -> bool:
    """Return True if the file looks like a TSV or compressed TSV."""

    name = path.name.lower()
    return name.endswith((".tsv", ".tsv.gz", ".txt", ".txt.gz"))


def expand_input_paths(input_paths: str | Path | Iterable[str | Path]) -> list[Path]:
    """Expand file, directory, or glob inputs into concrete TSV paths."""

    if isinstance(input_paths, (str, Path)):
        items: list[str | Path] = [input_paths]
    else:
        items = list(input_paths)

    resolved: list[Path] = []
    for item in items:
        expanded_item = os.path.expandvars(os.path.expanduser(str(item)))
        item_path = Path(expanded_item)

        if item_path.is_dir():
            resolved.extend(
                sorted(
                    path
                    for path in item_path.iterdir()
                    if path.is_file() and _is_tsv_like(path)
                )
            )
            continue

        if item_path.exists():
            resolved.append(item_path)
            continue

        matches = [Path(path) for path in glob.glob(expanded_item)]
        resolved.extend(sorted(match for match in matches if _is_tsv_like(match)))

    return resolved


@dataclass
class TsvTable:
    """Header-keyed rows parsed from one tab-separated file."""

    columns: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    origin: str = "<memory>"

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, origin: str) -> "TsvTable":
        return cls(
            columns=[str(column) for column in frame.columns],
            rows=frame.to_dict(orient="records"),
            origin=origin,
        )

    @classmethod
    def from_path(cls, path: str | Path) -> "TsvTable":
        source = Path(path)
        return cls.from_frame(_read_tsv(source), origin=str(source))

    @classmethod
    def from_text(cls, text: str, origin: str = "<memory>") -> "TsvTable":
        if not text.strip():
            return cls(columns=[], rows=[], origin=origin)
        return cls.from_frame(_read_tsv(io.StringIO(text)), origin=origin)


def _read_tsv(source: Any) -> pd.DataFrame:
    return pd.read_csv(
        source,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )


def load_tables(input_paths: str | Path | Iterable[str | Path]) -> list[TsvTable]:
    """Parse every TSV resolved from ``input_paths``, in sorted order."""

    paths = expand_input_paths(input_paths)
    if not paths:
        raise FileNotFoundError(f"No TSV files found for: {input_paths}")
    return [TsvTable.from_path(path) for path in paths]
