import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.adapters import (  # noqa: E402
    RegionUploadAdapter,
    TsvTable,
    VariantUploadAdapter,
    load_tables,
)
from regionscan_viz.models import RegionRecord  # noqa: E402
from regionscan_viz.quality import VARIANT_CONTRACT  # noqa: E402

REGION_TSV = (
    "chr\tregion\tstart.bp\tend.bp\tgene\tGATES.p\tWald\n"
    "1\t1\t100\t200\tMYH7\t0.01\t2.5\n"
    "1\t2\t300\t400\tTTN\t-0.5\t1.0\n"
)

VARIANT_TSV = (
    "chr\tregion\tstart.bp\tend.bp\tbp\tvariant\tmaf\tsg.pval\n"
    "1\t1\t100\t200\t150\trs1\t0.2\t0.001\n"
    "1\t2\t300\t400\t900\trs2\t0.1\t0.5\n"
    "2\t1\t100\t200\t150\trs3\t0.3\t0.02\n"
)


def _regions() -> list[RegionRecord]:
    result = RegionUploadAdapter(tables=[TsvTable.from_text(REGION_TSV)]).read()
    assert result.ok
    return result.records


def test_region_adapter_builds_records_with_pvalues_and_stats() -> None:
    result = RegionUploadAdapter(tables=[TsvTable.from_text(REGION_TSV, origin="a.tsv")]).read()

    assert result.ok
    assert [item.name for item in result.scored_fields] == ["GATES_p", "Wald"]
    first, second = result.records
    assert first.gene == "MYH7"
    assert first.pvalues == {"GATES_p": 0.01}
    assert first.stats == {"Wald": 2.5}
    assert second.pvalues == {"GATES_p": None}
    assert result.reports[0].rejected_pvalues == 1


def test_region_ids_stay_unique_across_files() -> None:
    tables = [TsvTable.from_text(REGION_TSV), TsvTable.from_text(REGION_TSV)]

    records = RegionUploadAdapter(tables=tables, first_batch=4).read().records

    assert [record.id for record in records] == [
        4_000_000_000,
        4_000_000_001,
        5_000_000_000,
        5_000_000_001,
    ]


def test_region_adapter_reports_missing_fields() -> None:
    table = TsvTable.from_text("chr\tstart_bp\tGATES_p\n1\t100\t0.1\n")

    result = RegionUploadAdapter(tables=[table]).read()

    assert not result.ok
    assert result.error == "The following fields are missing: end_bp, region"
    assert result.records == []


def test_region_adapter_rejects_mixed_headers_with_origin() -> None:
    table = TsvTable.from_text(
        "chr\tstart.bp\tend.bp\tregion\tsglm_pvalue\n1\t1\t2\t1\t0.1\n",
        origin="mixed.tsv",
    )

    result = RegionUploadAdapter(tables=[table]).read()

    assert result.error.startswith("mixed.tsv: ")
    assert "mixes" in result.error


def test_empty_region_upload_is_rejected() -> None:
    result = RegionUploadAdapter(tables=[TsvTable.from_text("")]).read()

    assert result.error == "Region file is empty"


def test_region_rows_without_location_are_skipped() -> None:
    text = "chr\tregion\tstart_bp\tend_bp\tGATES_p\n1\t1\t100\t200\t0.1\n1\t\t300\t400\t0.2\n"

    result = RegionUploadAdapter(tables=[TsvTable.from_text(text)]).read()

    assert [record.start_bp for record in result.records] == [100]


def test_variant_adapter_keeps_variants_inside_loaded_regions() -> None:
    adapter = VariantUploadAdapter(tables=[TsvTable.from_text(VARIANT_TSV)], regions=_regions())

    result = adapter.read()

    assert result.ok
    assert [record.variant for record in result.records] == ["rs1"]
    assert result.records[0].pvalue == 0.001
    assert result.records[0].maf == 0.2


def test_variant_adapter_without_matching_variants_returns_empty_message() -> None:
    text = "chr\tregion\tstart_bp\tend_bp\tbp\tsglm_pvalue\n5\t1\t1\t2\t1\t0.1\n"

    result = VariantUploadAdapter(tables=[TsvTable.from_text(text)], regions=_regions()).read()

    assert result.error == VARIANT_CONTRACT.empty_message


def test_variant_adapter_reports_missing_pvalue_column() -> None:
    text = "chr\tregion\tstart_bp\tend_bp\tbp\n1\t1\t100\t200\t150\n"

    result = VariantUploadAdapter(tables=[TsvTable.from_text(text)], regions=_regions()).read()

    assert result.error == "The following fields are missing: sglm_pvalue"


def test_load_tables_reads_directory_in_sorted_order(tmp_path: Path) -> None:
    (tmp_path / "b.tsv").write_text("chr\n2\n")
    (tmp_path / "a.tsv").write_text("chr\n1\n")
    (tmp_path / "notes.md").write_text("ignored")

    tables = load_tables(tmp_path)

    assert [Path(table.origin).name for table in tables] == ["a.tsv", "b.tsv"]
    assert tables[0].rows == [{"chr": "1"}]


def test_load_tables_without_matches_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_tables(tmp_path / "*.tsv")
