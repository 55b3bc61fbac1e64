"""Configuration contracts and constants for RegionScan visualizations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class Assembly(str, Enum):
    """Reference genome builds supported by the dashboard."""

    GRCH37 = "GRCh37"
    GRCH38 = "GRCh38"

    @property
    def ucsc_genome(self) -> str:
        """UCSC genome identifier used by the recombination track API."""

        return "hg19" if self is Assembly.GRCH37 else "hg38"

    @property
    def ensembl_host(self) -> str:
        """Ensembl REST host serving this build."""

        return "grch37.rest.ensembl.org" if self is Assembly.GRCH37 else "rest.ensembl.org"


class PValueTransform(str, Enum):
    """How p-values are projected onto plot axes."""

    NEG_LOG10 = "-log10"
    LOG10_NEG_LOG10 = "log10(-log10)"

    def __call__(self, pvalue: float) -> float:
        if self is PValueTransform.NEG_LOG10:
            return -math.log10(pvalue)
        return math.log10(-math.log10(pvalue))

    def project(self, pvalue: float) -> float | None:
        """Transformed value, or ``None`` where the transform is undefined or infinite."""

        try:
            value = self(pvalue)
        except (ValueError, ZeroDivisionError):
            return None
        return value if math.isfinite(value) else None

    @property
    def axis_label(self) -> str:
        return "-log10 (p)" if self is PValueTransform.NEG_LOG10 else "log10(-log10 (p))"


@dataclass(frozen=True)
class AssemblyInfo:
    """Reference build plus chromosome lengths in base pairs."""

    assembly: Assembly
    lengths: Mapping[str, int] = field(default_factory=dict)

    def length_of(self, chromosome: int | str) -> int:
        """Return the length of ``chromosome`` or raise ``KeyError``."""

        key = str(chromosome)
        if key not in self.lengths:
            raise KeyError(
                f"Chromosome {key} is not defined for assembly {self.assembly.value}"
            )
        return int(self.lengths[key])


@dataclass(frozen=True)
class PlotThresholds:
    """Significance thresholds drawn as dashed lines."""

    miami_upper: float = 5e-6
    miami_lower: float = 5e-6
    region_region: float = 5e-6
    region_variant: float = 5e-7


VARIANT_PVALUE_FIELD = "sglm_pvalue"

REGION_REQUIRED_FIELDS: tuple[str, ...] = ("chr", "end_bp", "start_bp", "region")

VARIANT_REQUIRED_FIELDS: tuple[str, ...] = (
    "chr",
    "end_bp",
    "start_bp",
    "bp",
    "region",
    VARIANT_PVALUE_FIELD,
)

# Half-width of the detail window around a selected region.
DETAIL_HALF_SPAN_BP = 2_500_000

GENE_LOOKUP_MAX_SPAN_BP = 10_000_000

QQ_MAX_QUANTILES = 250
QQ_REFERENCE_DRAWS = 2000

# Row indices are packed into this many decimal digits when building region ids.
ROW_ID_DIGITS = 9

RECOMBINATION_CHROMOSOMES: tuple[str, ...] = tuple(f"chr{index}" for index in range(1, 23))

VARIANT_LOCATION_FIELDS: tuple[str, ...] = ("chr", "bp", "start_bp", "end_bp", "region")
