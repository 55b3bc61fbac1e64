import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.adapters import TsvTable  # noqa: E402
from regionscan_viz.config import Assembly, PlotThresholds  # noqa: E402
from regionscan_viz.controller import VisualizationController  # noqa: E402
from regionscan_viz.filters import BrushFilter, GenomicPosition  # noqa: E402
from regionscan_viz.plots import Circle  # noqa: E402

REGION_TSV = (
    "chr\tregion\tstart_bp\tend_bp\tGATES_p\tSKAT_p\n"
    "1\t1\t100\t200\t0.01\t0.2\n"
    "1\t2\t150\t250\t0.02\t0.3\n"
    "1\t3\t300\t350\t0.03\t0.4\n"
    "1\t4\t300\t400\t0.04\t0.5\n"
    "2\t1\t100\t200\t0.05\t0.6\n"
)

VARIANT_TSV = (
    "chr\tregion\tstart_bp\tend_bp\tbp\tvariant\tsglm_pvalue\n"
    "1\t1\t100\t200\t150\trs1\t0.001\n"
)


def _controller() -> VisualizationController:
    controller = VisualizationController(Assembly.GRCH38, width=800)
    assert controller.load_regions([TsvTable.from_text(REGION_TSV)]) == ""
    return controller


def _brush(chr0: int, pos0: float, chr1: int, pos1: float) -> BrushFilter:
    return BrushFilter(GenomicPosition(chr0, pos0), GenomicPosition(chr1, pos1))


def test_brush_then_undo_updates_visible_records_and_plot() -> None:
    controller = _controller()
    controller.set_variables("GATES_p", "GATES_p")

    controller.push_brush(_brush(1, 150, 1, 350))

    visible = controller.visible
    assert [(record.chr, record.region) for record in visible] == [(1, 2), (1, 3)]
    assert controller.miami_plot().scene.data("upper") == visible

    assert controller.pop_brush() == _brush(1, 150, 1, 350)
    assert len(controller.visible) == 5
    assert len(controller.miami_plot().scene.data("upper")) == 5


def test_rejected_upload_keeps_current_data() -> None:
    controller = _controller()

    error = controller.load_regions([TsvTable.from_text("chr\tstart_bp\n1\t2\n")])

    assert error == "The following fields are missing: end_bp, region"
    assert len(controller.state.regions) == 5


def test_region_ids_stay_unique_across_uploads() -> None:
    controller = _controller()
    first_ids = {record.id for record in controller.state.regions}

    controller.load_regions([TsvTable.from_text(REGION_TSV)])

    second_ids = {record.id for record in controller.state.regions}
    assert {record_id // 10**9 for record_id in first_ids} == {1}
    assert {record_id // 10**9 for record_id in second_ids} == {2}
    assert first_ids.isdisjoint(second_ids)


def test_variables_must_be_known_pvalue_fields() -> None:
    controller = _controller()

    assert controller.derived.pvalue_variables == ["GATES_p", "SKAT_p"]
    with pytest.raises(ValueError, match="Unknown p-value variable"):
        controller.set_variables("GATES_p", "Wald")
    with pytest.raises(ValueError):
        controller.miami_plot()


def test_variants_add_their_pvalue_variable_and_reset_on_region_upload() -> None:
    controller = _controller()

    assert controller.load_variants([TsvTable.from_text(VARIANT_TSV)]) == ""

    assert "sglm_pvalue" in controller.derived.pvalue_variables
    assert len(controller.state.variants) == 1

    controller.load_regions([TsvTable.from_text(REGION_TSV)])
    assert controller.state.variants == []
    assert "sglm_pvalue" not in controller.derived.pvalue_variables


def test_selection_resolves_detail_and_zooming_away_clears_it() -> None:
    controller = _controller()
    selected = controller.state.regions[4]

    controller.select(selected)

    assert controller.detail is not None
    assert controller.detail.chr == 2
    assert len(controller.results_table()) == 1
    assert controller.region_plot().title == "Region Plot Chr 2"

    controller.push_brush(_brush(1, 0, 1, 1000))

    assert controller.detail is None
    assert controller.state.selected is None
    assert controller.region_plot() is None


def test_changing_variables_clears_selection() -> None:
    controller = _controller()
    controller.select(controller.state.regions[0])

    controller.set_variables("GATES_p", "SKAT_p")

    assert controller.state.selected is None
    assert controller.detail is None


def test_click_selects_point_under_cursor() -> None:
    controller = _controller()
    controller.set_variables("GATES_p", "SKAT_p")
    target = controller.state.regions[4]
    circle = next(
        circle
        for circle in controller.miami_plot().scene.of_type(Circle)
        if circle.datum is target and circle.group == "upper"
    )

    assert controller.click(circle.cx, circle.cy) is target
    assert controller.detail is not None and controller.detail.chr == 2
    assert controller.click(0, 0) is None
    assert controller.state.selected is target


def test_brush_pixels_zooms_to_chromosome() -> None:
    controller = _controller()
    controller.set_variables("GATES_p", "SKAT_p")
    mapper = controller.miami_plot().mapper
    length = controller.state.assembly.length_of(1)

    brush = controller.brush_pixels(mapper.to_pixel(1, 0), mapper.to_pixel(1, length))

    assert brush.single_chromosome == 1
    assert len(controller.state.history) == 1
    assert {record.chr for record in controller.visible} == {1}
    assert len(controller.visible) == 4


def test_miami_plot_is_cached_until_state_changes() -> None:
    controller = _controller()
    controller.set_variables("GATES_p", "SKAT_p")
    first = controller.miami_plot()

    assert controller.miami_plot() is first

    controller.set_thresholds(PlotThresholds(miami_upper=0.05))
    assert controller.miami_plot() is not first


def test_settings_validation_and_assembly_switch() -> None:
    controller = _controller()

    with pytest.raises(ValueError):
        controller.set_width(0)

    controller.set_assembly("GRCh37")
    controller.toggle_highlight("GATES_p")

    assert controller.state.assembly.assembly is Assembly.GRCH37
    assert controller.state.highlight.highlighted == frozenset({"GATES_p"})


def test_qq_plot_uses_selected_variables() -> None:
    controller = _controller()
    controller.set_variables("GATES_p", "SKAT_p")

    scene = controller.qq_plot(seed=1)

    assert scene.title == "QQ Plot"
    assert scene.in_group("GATES_p")
    assert scene.in_group("SKAT_p")


def test_load_example() -> None:
    controller = VisualizationController()

    assert controller.load_example() == ""
    assert len(controller.state.regions) == 22
    assert len(controller.state.variants) == 66
    assert controller.derived.pvalue_variables == [
        "Wald_p",
        "GATES_p",
        "SKAT_p",
        "simpleM_p",
        "sglm_pvalue",
    ]
    assert controller.derived.restart_points == {1: 125_000_000}
