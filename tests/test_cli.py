import json
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.cli import main  # noqa: E402

REGION_TSV = (
    "chr\tregion\tstart.bp\tend.bp\tgene\tGATES.p\tSKAT.pDavies\n"
    "1\t1\t100\t200\tG1\t0.01\t0.2\n"
    "1\t2\t150\t250\tG2\t0.02\t0.3\n"
    "1\t3\t300\t350\tG3\t0.03\t0.4\n"
    "1\t4\t300\t400\tG4\t0.04\t0.5\n"
    "2\t1\t100\t200\tG5\t0.05\t0.6\n"
)

VARIANT_TSV = (
    "chr\tregion\tstart.bp\tend.bp\tbp\tvariant\tmaf\tsg.pval\n"
    "1\t1\t100\t200\t150\trs1\t0.2\t0.001\n"
)


def _write_uploads(tmp_path: Path) -> tuple[Path, Path]:
    regions = tmp_path / "regionout.tsv"
    variants = tmp_path / "snpout.tsv"
    regions.write_text(REGION_TSV)
    variants.write_text(VARIANT_TSV)
    return regions, variants


def _write_config(tmp_path: Path, config: dict) -> Path:
    path = tmp_path / "run.json"
    path.write_text(json.dumps(config))
    return path


def test_main_renders_every_output(tmp_path: Path, capsys) -> None:
    regions, variants = _write_uploads(tmp_path)
    out = tmp_path / "out"
    config_path = _write_config(
        tmp_path,
        {
            "regions": [str(regions)],
            "variants": [str(variants)],
            "upper": "GATES_p",
            "lower": "sglm_pvalue",
            "brushes": [{"x0": {"chr": 1, "pos": 0}, "x1": {"chr": 1, "pos": 1_000_000}}],
            "select": {"chr": 1, "region": 2},
            "qq_seed": 7,
            "region_tracks": {"recombination": "local"},
            "outputs": {
                "miami": str(out / "miami.svg"),
                "qq": str(out / "qq.png"),
                "region": str(out / "region.svg"),
                "table": str(out / "table.tsv"),
            },
        },
    )

    assert main(["--config", str(config_path)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["assembly"] == "GRCh38"
    assert payload["regions"] == 5
    assert payload["variants"] == 1
    assert payload["visible"] == 5
    assert payload["filters"] == 1
    assert payload["detail_regions"] == [1, 2, 3, 4]
    assert set(payload["outputs"]) == {"miami", "qq", "region", "table"}
    for name in ("miami.svg", "qq.png", "region.svg", "table.tsv"):
        assert (out / name).exists()
    assert len((out / "table.tsv").read_text().splitlines()) == 5


def test_main_reports_rejected_upload(tmp_path: Path, capsys) -> None:
    regions = tmp_path / "bad.tsv"
    regions.write_text("chr\tstart_bp\n1\t100\n")
    config_path = _write_config(tmp_path, {"regions": [str(regions)]})

    assert main(["--config", str(config_path)]) == 1

    assert "The following fields are missing: end_bp, region" in capsys.readouterr().err


def test_main_requires_regions_or_example(tmp_path: Path, capsys) -> None:
    config_path = _write_config(tmp_path, {"assembly": "GRCh37"})

    assert main(["--config", str(config_path)]) == 1
    assert "regions" in capsys.readouterr().err


def test_run_visualization_script_uses_example_data(tmp_path: Path) -> None:
    table = tmp_path / "table.tsv"
    config_path = _write_config(
        tmp_path,
        {
            "example": True,
            "upper": "GATES_p",
            "lower": "sglm_pvalue",
            "outputs": {"table": str(table)},
        },
    )

    result = subprocess.run(
        [sys.executable, "scripts/run_visualization.py", "--config", str(config_path)],
        cwd=ROOT,
        text=True,
        capture_output=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["regions"] == 22
    assert payload["variants"] == 66
    assert payload["outputs"] == {"table": str(table)}
    assert table.exists()
