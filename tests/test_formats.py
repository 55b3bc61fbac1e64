import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.formats import (  # noqa: E402
    ScoredField,
    UploadFormat,
    build_scored_fields,
    classify_header,
    pvalue_field_names,
)


def test_dotted_header_is_classified_as_old_format() -> None:
    assert classify_header(["chr", "start.bp", "end.bp", "GATES.p"]) is UploadFormat.OLD


def test_underscore_header_is_classified_as_new_format() -> None:
    assert classify_header(["chr", "start_bp", "end_bp", "GATES_p"]) is UploadFormat.NEW


def test_header_mixing_both_conventions_is_rejected() -> None:
    with pytest.raises(ValueError, match="mixes"):
        classify_header(["chr", "start.bp", "sg.beta", "sglm_pvalue"])


def test_header_with_colliding_canonical_names_is_rejected() -> None:
    with pytest.raises(ValueError, match="both map to 'GATES_p'"):
        classify_header(["chr", "GATES.p", "GATES_p"])


def test_old_format_renames_then_replaces_dots() -> None:
    fmt = UploadFormat.OLD

    assert fmt.canonical_name("max.VIF") == "maxVIF"
    assert fmt.canonical_name("SKAT.pDavies") == "SKAT_p"
    assert fmt.canonical_name("sg.pval") == "sglm_pvalue"
    assert fmt.canonical_name("glm.se") == "mglm_se"
    assert fmt.canonical_name("simpleM.df") == "simpleM_df"


def test_renaming_canonical_names_is_idempotent() -> None:
    canonical = ["chr", "start_bp", "maxVIF", "SKAT_p", "sglm_pvalue", "mglm_beta", "Wald_df"]

    for fmt in UploadFormat:
        renamed = [fmt.canonical_name(name) for name in canonical]
        assert renamed == canonical
        assert [fmt.canonical_name(name) for name in renamed] == canonical


def test_scored_field_flags_pvalue_suffixes() -> None:
    assert ScoredField.from_name("GATES_p").is_pvalue is True
    assert ScoredField.from_name("sglm_pvalue").is_pvalue is True
    assert ScoredField.from_name("Wald_df").is_pvalue is False
    assert ScoredField.from_name("maxVIF").is_pvalue is False


def test_catalogue_skips_location_string_and_dropped_fields() -> None:
    fields = build_scored_fields(
        ["chr", "start_bp", "end_bp", "region", "gene", "GATES_p", "Wald", "SKAT", "LCZ_p"]
    )

    assert [item.name for item in fields] == ["GATES_p", "Wald"]
    assert pvalue_field_names(fields) == ["GATES_p"]


def test_only_the_variant_glm_column_is_a_pvalue_without_the_suffix() -> None:
    fields = build_scored_fields(["chr", "start_bp", "GATES_p", "burden_pvalue", "sglm_pvalue"])

    assert [item.name for item in fields] == ["GATES_p", "burden_pvalue", "sglm_pvalue"]
    assert pvalue_field_names(fields) == ["GATES_p", "sglm_pvalue"]
