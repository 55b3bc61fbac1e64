"""Adapter that turns uploaded region TSV files into region records."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from regionscan_viz.adapters.base import UploadAdapter, UploadResult
from regionscan_viz.adapters.common import TsvTable
from regionscan_viz.config import REGION_REQUIRED_FIELDS
from regionscan_viz.formats import ScoredField, pvalue_field_names
from regionscan_viz.models import RegionRecord
from regionscan_viz.prep import NormalizationReport, SchemaNormalizer
from regionscan_viz.quality import validate_region_upload

logger = logging.getLogger(__name__)


def merge_scored_fields(
    current: tuple[ScoredField, ...],
    extra: Sequence[ScoredField],
) -> tuple[ScoredField, ...]:
    """Union of two catalogues, keeping first-seen order."""

    names = {item.name for item in current}
    merged = list(current)
    for item in extra:
        if item.name not in names:
            merged.append(item)
            names.add(item.name)
    return tuple(merged)


def has_location(row: Mapping[str, Any], required: Sequence[str]) -> bool:
    return all(row.get(field_name) is not None for field_name in required)


class RegionUploadAdapter(UploadAdapter[RegionRecord]):
    """Normalize region files sequentially, one id batch per file."""

    name = "region_upload"

    def __init__(
        self,
        *,
        tables: Sequence[TsvTable],
        normalizer: SchemaNormalizer | None = None,
        first_batch: int = 1,
    ) -> None:
        self.tables = list(tables)
        self.normalizer = normalizer or SchemaNormalizer()
        self.first_batch = first_batch

    def read(self) -> UploadResult[RegionRecord]:
        rows: list[dict[str, Any]] = []
        scored_fields: tuple[ScoredField, ...] = ()
        reports: list[NormalizationReport] = []

        for batch, table in enumerate(self.tables, start=self.first_batch):
            try:
                result = self.normalizer.normalize(table.rows, columns=table.columns, batch=batch)
            except ValueError as exc:
                return UploadResult(error=f"{table.origin}: {exc}")
            rows.extend(result.rows)
            scored_fields = merge_scored_fields(scored_fields, result.scored_fields)
            reports.append(result.report)

        error = validate_region_upload(rows)
        if error:
            return UploadResult(error=error, reports=reports)

        pvalue_fields = pvalue_field_names(scored_fields)
        records = [
            RegionRecord.from_row(row, pvalue_fields)
            for row in rows
            if has_location(row, REGION_REQUIRED_FIELDS)
        ]
        if not records:
            return UploadResult(error=validate_region_upload(records), reports=reports)

        dropped = len(rows) - len(records)
        if dropped:
            logger.warning("Dropped %d region rows without a location", dropped)
        logger.info(
            "Loaded %d region records from %d file(s)",
            len(records),
            len(self.tables),
        )
        return UploadResult(
            records=records,
            scored_fields=scored_fields,
            reports=reports,
        )
