"""Upload format vocabularies and the scored-field catalogue.

RegionScan has shipped two header conventions. Older releases wrote
dot-separated column names (``GATES.p``, ``max.VIF``, ``sg.pval``); newer
releases write the canonical underscore names directly. Each convention is an
``UploadFormat`` member carrying its own rename table, and every header is
classified once, as a whole, before any row is normalized.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from regionscan_viz.config import VARIANT_PVALUE_FIELD


OLD_FORMAT_RENAMES: Mapping[str, str] = {
    "max.VIF": "maxVIF",
    "SKAT.pDavies": "SKAT.p",
    "sg.beta": "sglm.beta",
    "sg.pval": "sglm.pvalue",
    "sg.se": "sglm.se",
    "glm.beta": "mglm.beta",
    "glm.pval": "mglm.pvalue",
    "glm.se": "mglm.se",
}

# Deprecated or redundant statistics, by canonical name.
DROPPED_FIELDS: frozenset[str] = frozenset(
    {"GATES_df", "SKAT_pLiu", "SKAT", "MLCZ_p", "LCZ_p"}
)

STRING_FIELDS: frozenset[str] = frozenset(
    {"variant", "major_allele", "minor_allele", "gene", "ref", "alt"}
)

# Columns describing location rather than a statistic.
LOCATION_FIELDS: frozenset[str] = frozenset(
    {"id", "chr", "start_bp", "end_bp", "bp", "pos", "region", "bin"}
)

PVALUE_SUFFIX = "_p"


class UploadFormat(str, Enum):
    """Header convention of an uploaded RegionScan file."""

    OLD = "old"
    NEW = "new"

    @property
    def renames(self) -> Mapping[str, str]:
        return OLD_FORMAT_RENAMES if self is UploadFormat.OLD else {}

    def canonical_name(self, column: str) -> str:
        """Map a raw header name onto its canonical underscore name."""

        renamed = self.renames.get(column, column)
        return renamed.replace(".", "_")


def _new_only_columns() -> frozenset[str]:
    return frozenset(target.replace(".", "_") for target in OLD_FORMAT_RENAMES.values())


def classify_header(columns: Iterable[str]) -> UploadFormat:
    """Classify a complete header as one upload format.

    Raises ``ValueError`` when the header mixes both conventions or when two
    raw columns collapse onto the same canonical name.
    """

    names = [str(column) for column in columns]
    fmt = UploadFormat.OLD if any("." in name for name in names) else UploadFormat.NEW

    if fmt is UploadFormat.OLD:
        foreign = sorted(set(names) & _new_only_columns())
        if foreign:
            raise ValueError(
                "Header mixes old and new column names: " + ", ".join(foreign)
            )

    seen: dict[str, str] = {}
    for name in names:
        canonical = fmt.canonical_name(name)
        if canonical in seen:
            raise ValueError(
                f"Columns '{seen[canonical]}' and '{name}' both map to '{canonical}'"
            )
        seen[canonical] = name

    return fmt


@dataclass(frozen=True)
class ScoredField:
    """A statistic column, tagged with whether it holds a p-value."""

    name: str
    is_pvalue: bool

    @classmethod
    def from_name(cls, name: str) -> "ScoredField":
        # The single-variant GLM column is the only p-value without the suffix.
        is_pvalue = name.lower().endswith(PVALUE_SUFFIX) or name == VARIANT_PVALUE_FIELD
        return cls(name=name, is_pvalue=is_pvalue)


def build_scored_fields(canonical_columns: Iterable[str]) -> tuple[ScoredField, ...]:
    """Build the scored-field catalogue for one canonical header."""

    fields: list[ScoredField] = []
    for name in canonical_columns:
        if name in LOCATION_FIELDS or name in STRING_FIELDS or name in DROPPED_FIELDS:
            continue
        fields.append(ScoredField.from_name(name))
    return tuple(fields)


def pvalue_field_names(fields: Iterable[ScoredField]) -> list[str]:
    """Return the names of p-value fields, preserving catalogue order."""

    return [item.name for item in fields if item.is_pvalue]
