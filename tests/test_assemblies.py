import json
import shutil
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.assemblies import SCHEMA_FILENAME, AssemblyLoader, load_assembly  # noqa: E402
from regionscan_viz.config import Assembly  # noqa: E402


def _custom_dir(tmp_path: Path) -> Path:
    target = tmp_path / "assemblies"
    target.mkdir()
    shutil.copy(ROOT / "config" / "assemblies" / SCHEMA_FILENAME, target / SCHEMA_FILENAME)
    return target


def test_list_assemblies_excludes_schema() -> None:
    assert AssemblyLoader().list_assemblies() == ["GRCh37", "GRCh38"]


def test_load_bundled_assemblies() -> None:
    grch38 = load_assembly("GRCh38")
    grch37 = AssemblyLoader().load(Assembly.GRCH37)

    assert grch38.assembly is Assembly.GRCH38
    assert grch38.length_of(1) == 248_956_422
    assert grch37.length_of("1") == 249_250_621
    assert sorted(int(key) for key in grch38.lengths) == list(range(1, 23))


def test_unknown_chromosome_raises_key_error() -> None:
    with pytest.raises(KeyError, match="Chromosome 23"):
        load_assembly(Assembly.GRCH38).length_of(23)


def test_missing_assembly_lists_available(tmp_path: Path) -> None:
    loader = AssemblyLoader(_custom_dir(tmp_path))
    (loader.assemblies_dir / "Custom.json").write_text("{}")

    with pytest.raises(FileNotFoundError, match="Available: Custom"):
        loader.load("GRCh99")


def test_invalid_assembly_payload_is_rejected(tmp_path: Path) -> None:
    path = _custom_dir(tmp_path) / "GRCh38.json"
    path.write_text(json.dumps({"assembly": "GRCh38", "lengths": {"1": -5, "X": 10}}))

    with pytest.raises(ValueError, match="Invalid assembly file"):
        AssemblyLoader(path.parent).load("GRCh38")


def test_load_from_explicit_path(tmp_path: Path) -> None:
    path = _custom_dir(tmp_path) / "tiny.json"
    path.write_text(json.dumps({"assembly": "GRCh37", "lengths": {"1": 1000, "2": 2000}}))

    info = AssemblyLoader(path.parent).load(path)

    assert info.assembly is Assembly.GRCH37
    assert info.lengths == {"1": 1000, "2": 2000}
