import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.adapters import RegionUploadAdapter, TsvTable  # noqa: E402
from regionscan_viz.example_data import load_example_data, load_recombination  # noqa: E402
from regionscan_viz.selection import restart_points  # noqa: E402


def test_example_data_uses_the_old_header_format() -> None:
    example = load_example_data()

    assert set(example) == {"region", "variant"}
    assert example["region"].startswith("chr\tregion\tstart.bp\tend.bp")
    assert "sg.pval" in example["variant"].splitlines()[0]


def test_example_regions_load_with_a_restart_on_chr1() -> None:
    table = TsvTable.from_text(load_example_data()["region"])

    result = RegionUploadAdapter(tables=[table]).read()

    assert result.ok
    assert len(result.records) == 22
    assert restart_points(result.records) == {1: 125_000_000}
    assert "GATES_p" in [item.name for item in result.scored_fields]


def test_recombination_accepts_bare_and_prefixed_names() -> None:
    chr1 = load_recombination("chr1")

    assert chr1 == load_recombination(1)
    assert {"pos", "recomb_rate"} <= set(chr1[0])
    assert load_recombination(22)


@pytest.mark.parametrize("chromosome", ["chrX", 23, "chr0"])
def test_recombination_outside_autosomes_is_rejected(chromosome) -> None:
    with pytest.raises(ValueError, match="chr1..chr22"):
        load_recombination(chromosome)


def test_recombination_from_custom_directory(tmp_path: Path) -> None:
    (tmp_path / "recomb").mkdir()
    (tmp_path / "recomb" / "chr3.json").write_text(json.dumps([{"pos": 1, "recomb_rate": 2.0}]))

    assert load_recombination(3, data_dir=tmp_path) == [{"pos": 1, "recomb_rate": 2.0}]
