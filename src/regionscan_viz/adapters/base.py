"""Base interface for RegionScan upload adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from regionscan_viz.formats import ScoredField
from regionscan_viz.prep import NormalizationReport

RecordT = TypeVar("RecordT")


@dataclass
class UploadResult(Generic[RecordT]):
    """Records from one upload, or the message explaining why it was rejected."""

    records: list[RecordT] = field(default_factory=list)
    error: str = ""
    scored_fields: tuple[ScoredField, ...] = ()
    reports: list[NormalizationReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.error


class UploadAdapter(ABC, Generic[RecordT]):
    """Adapter that converts parsed upload files into canonical records."""

    name: str

    @abstractmethod
    def read(self) -> UploadResult[RecordT]:
        """Normalize, validate and convert every file of the upload."""
