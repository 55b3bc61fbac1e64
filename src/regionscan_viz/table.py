"""Sortable, filterable results table over region records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import pandas as pd

from regionscan_viz.formats import ScoredField
from regionscan_viz.models import GenomicRecord, RegionRecord
from regionscan_viz.selection import SelectedRegionDetail

logger = logging.getLogger(__name__)

LOCATION_COLUMNS = ("chr", "region", "start_bp", "end_bp", "gene")
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class TableColumn:
    field: str
    header: str
    kind: str = "int"

    def format(self, value) -> str:
        if value is None or (isinstance(value, float) and pd.isna(value)):
            return ""
        if self.kind == "pvalue":
            return f"{float(value):.3e}"
        if self.kind == "float":
            return f"{float(value):.3f}"
        if self.kind == "int":
            return f"{int(value)}"
        return str(value)


def table_columns(scored_fields: Sequence[ScoredField]) -> list[TableColumn]:
    """Location columns first, then every scored field of the upload."""

    columns = [TableColumn(name, name, "text" if name == "gene" else "int") for name in LOCATION_COLUMNS]
    for item in scored_fields:
        columns.append(TableColumn(item.name, item.name, "pvalue" if item.is_pvalue else "float"))
    return columns


def table_records(
    regions: Sequence[RegionRecord],
    visible: Sequence[GenomicRecord],
    detail: SelectedRegionDetail | None,
) -> list[RegionRecord]:
    """Rows the table shows: the detail window, else visible regions, else all regions."""

    if detail is not None and detail.data:
        return list(detail.data)
    visible_regions = [record for record in visible if isinstance(record, RegionRecord)]
    if visible_regions:
        return visible_regions
    return list(regions)


class ResultsTable:
    """Immutable view over a ``pandas.DataFrame`` of region rows."""

    def __init__(self, frame: pd.DataFrame, columns: Sequence[TableColumn]) -> None:
        self.frame = frame
        self.columns = list(columns)

    @classmethod
    def from_records(
        cls,
        records: Sequence[RegionRecord],
        scored_fields: Sequence[ScoredField],
    ) -> "ResultsTable":
        columns = table_columns(scored_fields)
        names = ["id"] + [column.field for column in columns]
        frame = pd.DataFrame([record.to_row() for record in records])
        frame = frame.reindex(columns=names)
        if not frame.empty:
            frame = frame.set_index("id", drop=False)
        return cls(frame, columns)

    def __len__(self) -> int:
        return len(self.frame)

    def _column(self, name: str) -> TableColumn:
        for column in self.columns:
            if column.field == name:
                return column
        raise KeyError(f"Unknown table column: {name}")

    def sort(self, column: str, ascending: bool = True) -> "ResultsTable":
        """Sort by ``column``; ``region`` sorts by chromosome first."""

        self._column(column)
        keys = ["chr", "region"] if column == "region" else [column]
        frame = self.frame.sort_values(keys, ascending=ascending, na_position="last", kind="mergesort")
        return ResultsTable(frame, self.columns)

    def between(self, column: str, start: float, end: float) -> "ResultsTable":
        """Keep rows whose ``column`` lies in ``[start, end]``."""

        self._column(column)
        if start > end:
            raise ValueError(f"Invalid range for {column}: {start} > {end}")
        values = pd.to_numeric(self.frame[column], errors="coerce")
        return ResultsTable(self.frame[values.between(start, end)], self.columns)

    def page(self, number: int, size: int = DEFAULT_PAGE_SIZE) -> pd.DataFrame:
        """Zero-based page of formatted rows."""

        if number < 0 or size <= 0:
            raise ValueError("Page number must be >= 0 and size > 0")
        return self.formatted().iloc[number * size : (number + 1) * size]

    def formatted(self) -> pd.DataFrame:
        data = {
            column.header: [column.format(value) for value in self.frame[column.field]]
            for column in self.columns
        }
        return pd.DataFrame(data, index=self.frame.index)

    def to_tsv(self, path: str | Path) -> Path:
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        self.frame[[column.field for column in self.columns]].to_csv(output, sep="\t", index=False)
        logger.info("Wrote %d table rows to %s", len(self.frame), output)
        return output
