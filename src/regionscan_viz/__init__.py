"""Core package for RegionScan result visualization."""

from .adapters import RegionUploadAdapter, TsvTable, VariantUploadAdapter, load_tables
from .assemblies import AssemblyLoader, load_assembly
from .config import Assembly, AssemblyInfo, PlotThresholds, PValueTransform
from .controller import ViewState, VisualizationController
from .coordinates import ChromosomeSpan, GenomicCoordinateMapper
from .example_data import load_example_data, load_recombination
from .filters import (
    BrushFilter,
    BrushFilterHistory,
    GenomicPosition,
    apply_brush,
    detail_is_stale,
    prefilter_variants,
    visible_records,
)
from .formats import ScoredField, UploadFormat, build_scored_fields, classify_header
from .lookups import fetch_genes, fetch_recombination
from .models import GenomicRecord, RegionRecord, VariantRecord
from .prep import NormalizationReport, NormalizationResult, SchemaNormalizer
from .quality import validate_region_upload, validate_variant_upload
from .scales import LinearScale, ThresholdScale
from .selection import SelectedRegionDetail, resolve_detail, restart_points
from .table import ResultsTable

__all__ = [
    "RegionUploadAdapter",
    "TsvTable",
    "VariantUploadAdapter",
    "load_tables",
    "AssemblyLoader",
    "load_assembly",
    "Assembly",
    "AssemblyInfo",
    "PlotThresholds",
    "PValueTransform",
    "ViewState",
    "VisualizationController",
    "ChromosomeSpan",
    "GenomicCoordinateMapper",
    "load_example_data",
    "load_recombination",
    "BrushFilter",
    "BrushFilterHistory",
    "GenomicPosition",
    "apply_brush",
    "detail_is_stale",
    "prefilter_variants",
    "visible_records",
    "ScoredField",
    "UploadFormat",
    "build_scored_fields",
    "classify_header",
    "fetch_genes",
    "fetch_recombination",
    "GenomicRecord",
    "RegionRecord",
    "VariantRecord",
    "NormalizationReport",
    "NormalizationResult",
    "SchemaNormalizer",
    "validate_region_upload",
    "validate_variant_upload",
    "LinearScale",
    "ThresholdScale",
    "SelectedRegionDetail",
    "resolve_detail",
    "restart_points",
    "ResultsTable",
]
