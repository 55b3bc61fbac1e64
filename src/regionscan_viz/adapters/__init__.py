"""Upload adapters for RegionScan output files."""

from .base import UploadAdapter, UploadResult
from .common import TsvTable, expand_input_paths, load_tables
from .region import RegionUploadAdapter
from .variant import VariantUploadAdapter

__all__ = [
    "UploadAdapter",
    "UploadResult",
    "TsvTable",
    "expand_input_paths",
    "load_tables",
    "RegionUploadAdapter",
    "VariantUploadAdapter",
]
