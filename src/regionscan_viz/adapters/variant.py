"""Adapter that turns uploaded variant TSV files into variant records."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from regionscan_viz.adapters.base import UploadAdapter, UploadResult
from regionscan_viz.adapters.common import TsvTable
from regionscan_viz.adapters.region import has_location, merge_scored_fields
from regionscan_viz.config import VARIANT_LOCATION_FIELDS
from regionscan_viz.filters import prefilter_variants
from regionscan_viz.formats import ScoredField
from regionscan_viz.models import RegionRecord, VariantRecord
from regionscan_viz.prep import NormalizationReport, SchemaNormalizer
from regionscan_viz.quality import VARIANT_CONTRACT, validate_variant_upload

logger = logging.getLogger(__name__)


class VariantUploadAdapter(UploadAdapter[VariantRecord]):
    """Normalize variant files and keep those covered by the loaded regions."""

    name = "variant_upload"

    def __init__(
        self,
        *,
        tables: Sequence[TsvTable],
        regions: Sequence[RegionRecord],
        normalizer: SchemaNormalizer | None = None,
    ) -> None:
        self.tables = list(tables)
        self.regions = list(regions)
        self.normalizer = normalizer or SchemaNormalizer()

    def read(self) -> UploadResult[VariantRecord]:
        rows: list[dict[str, Any]] = []
        scored_fields: tuple[ScoredField, ...] = ()
        reports: list[NormalizationReport] = []

        for table in self.tables:
            try:
                result = self.normalizer.normalize(table.rows, columns=table.columns)
            except ValueError as exc:
                return UploadResult(error=f"{table.origin}: {exc}")
            rows.extend(result.rows)
            scored_fields = merge_scored_fields(scored_fields, result.scored_fields)
            reports.append(result.report)

        error = validate_variant_upload(rows)
        if error:
            return UploadResult(error=error, reports=reports)

        parsed = [
            VariantRecord.from_row(row)
            for row in rows
            if has_location(row, VARIANT_LOCATION_FIELDS)
        ]
        records = prefilter_variants(parsed, self.regions)
        if not records:
            return UploadResult(error=VARIANT_CONTRACT.empty_message, reports=reports)

        logger.info(
            "Loaded %d of %d variants covered by %d regions",
            len(records),
            len(rows),
            len(self.regions),
        )
        return UploadResult(
            records=records,
            scored_fields=scored_fields,
            reports=reports,
        )
