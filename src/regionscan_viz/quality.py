"""Upload validation for normalized RegionScan rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from regionscan_viz.config import REGION_REQUIRED_FIELDS, VARIANT_REQUIRED_FIELDS


@dataclass(frozen=True)
class UploadContract:
    """Fields an upload must provide before it may replace the loaded data."""

    name: str
    required_fields: tuple[str, ...]
    empty_message: str

    def missing_fields(self, present: Sequence[str]) -> list[str]:
        """Return required fields absent from ``present``, in contract order."""

        present_set = set(present)
        return [field_name for field_name in self.required_fields if field_name not in present_set]


REGION_CONTRACT = UploadContract(
    name="region",
    required_fields=REGION_REQUIRED_FIELDS,
    empty_message="Region file is empty",
)

VARIANT_CONTRACT = UploadContract(
    name="variant",
    required_fields=VARIANT_REQUIRED_FIELDS,
    empty_message="Variant file is empty or has no variants that match the current regions.",
)


def validate_upload(rows: Sequence[Mapping[str, Any]], contract: UploadContract) -> str:
    """Return a user-facing error message, or ``""`` when the upload is usable.

    All rows of a parsed file share one header, so presence is checked
    against the first row.
    """

    if not rows:
        return contract.empty_message

    missing = contract.missing_fields(list(rows[0].keys()))
    if missing:
        return f"The following fields are missing: {', '.join(missing)}"
    return ""


def validate_region_upload(rows: Sequence[Mapping[str, Any]]) -> str:
    return validate_upload(rows, REGION_CONTRACT)


def validate_variant_upload(rows: Sequence[Mapping[str, Any]]) -> str:
    return validate_upload(rows, VARIANT_CONTRACT)
