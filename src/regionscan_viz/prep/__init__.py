"""Normalization of raw uploads into canonical rows."""

from .normalize import NormalizationReport, NormalizationResult, SchemaNormalizer

__all__ = [
    "NormalizationReport",
    "NormalizationResult",
    "SchemaNormalizer",
]
