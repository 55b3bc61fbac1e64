"""Normalization of raw RegionScan rows into the canonical row schema."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from regionscan_viz.config import ROW_ID_DIGITS
from regionscan_viz.formats import (
    DROPPED_FIELDS,
    STRING_FIELDS,
    ScoredField,
    UploadFormat,
    build_scored_fields,
    classify_header,
)

logger = logging.getLogger(__name__)


@dataclass
class NormalizationReport:
    """Summary of one normalization run."""

    input_rows: int
    output_rows: int
    rejected_pvalues: int
    upload_format: UploadFormat


@dataclass
class NormalizationResult:
    """Canonical rows plus the catalogue of scored fields they carry."""

    rows: list[dict[str, Any]]
    scored_fields: tuple[ScoredField, ...]
    report: NormalizationReport
    columns: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class _ColumnPlan:
    canonical: str
    is_pvalue: bool
    is_string: bool


class SchemaNormalizer:
    """Convert header-keyed raw rows into canonical rows.

    Keys are renamed through the detected format's table, dots become
    underscores, deprecated statistics are dropped and values are coerced to
    numbers. Non-positive p-values are treated as data errors and nulled.
    """

    def __init__(self, *, row_id_digits: int = ROW_ID_DIGITS) -> None:
        self.row_id_digits = row_id_digits

    def normalize(
        self,
        rows: Iterable[Mapping[str, Any]],
        *,
        columns: Sequence[str] | None = None,
        batch: int | None = None,
    ) -> NormalizationResult:
        """Normalize one parsed file.

        When ``batch`` is given every row receives an ``id`` built from the
        batch number followed by the zero-padded row index.
        """

        raw_rows = list(rows)
        header = [str(column) for column in (columns if columns is not None else self._header(raw_rows))]
        upload_format = classify_header(header)
        plan = self._plan(header, upload_format)

        normalized: list[dict[str, Any]] = []
        rejected = 0
        for index, row in enumerate(raw_rows):
            canonical, row_rejected = self._normalize_row(row, plan)
            rejected += row_rejected
            if batch is not None:
                canonical["id"] = self.row_id(batch, index)
            normalized.append(canonical)

        canonical_columns = tuple(item.canonical for item in plan.values())
        report = NormalizationReport(
            input_rows=len(raw_rows),
            output_rows=len(normalized),
            rejected_pvalues=rejected,
            upload_format=upload_format,
        )
        logger.debug(
            "Normalized %d rows (%s format, %d p-values rejected)",
            report.output_rows,
            upload_format.value,
            rejected,
        )
        return NormalizationResult(
            rows=normalized,
            scored_fields=build_scored_fields(canonical_columns),
            report=report,
            columns=canonical_columns,
        )

    def row_id(self, batch: int, index: int) -> int:
        """Concatenate a batch number with a fixed-width row index."""

        if index >= 10**self.row_id_digits:
            raise ValueError(f"Row index {index} exceeds {self.row_id_digits} digits")
        return int(f"{batch}{index:0{self.row_id_digits}d}")

    @staticmethod
    def _header(rows: list[Mapping[str, Any]]) -> list[str]:
        return list(rows[0].keys()) if rows else []

    @staticmethod
    def _plan(header: Sequence[str], upload_format: UploadFormat) -> dict[str, _ColumnPlan]:
        plan: dict[str, _ColumnPlan] = {}
        for column in header:
            canonical = upload_format.canonical_name(column)
            if canonical in DROPPED_FIELDS:
                continue
            scored = ScoredField.from_name(canonical)
            plan[column] = _ColumnPlan(
                canonical=canonical,
                is_pvalue=scored.is_pvalue,
                is_string=canonical in STRING_FIELDS,
            )
        return plan

    def _normalize_row(
        self,
        row: Mapping[str, Any],
        plan: Mapping[str, _ColumnPlan],
    ) -> tuple[dict[str, Any], int]:
        canonical: dict[str, Any] = {}
        rejected = 0
        for column, column_plan in plan.items():
            value = row.get(column)
            if column_plan.is_string:
                canonical[column_plan.canonical] = self._clean_text(value)
                continue

            number = self._to_number(value)
            if column_plan.is_pvalue and number is not None and not number > 0:
                number = None
                rejected += 1
            canonical[column_plan.canonical] = number
        return canonical, rejected

    @staticmethod
    def _clean_text(value: Any) -> str | None:
        if value is None or (isinstance(value, float) and pd.isna(value)):
            return None
        cleaned = str(value).strip()
        if not cleaned or cleaned.lower() in {"nan", "none", "null", "na"}:
            return None
        return cleaned

    @staticmethod
    def _to_number(value: Any) -> int | float | None:
        text = SchemaNormalizer._clean_text(value)
        if text is None:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
