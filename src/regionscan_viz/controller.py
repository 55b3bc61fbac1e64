"""Single owner of the visualization state and everything derived from it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from regionscan_viz.adapters import RegionUploadAdapter, TsvTable, VariantUploadAdapter
from regionscan_viz.assemblies import AssemblyLoader
from regionscan_viz.config import (
    VARIANT_PVALUE_FIELD,
    Assembly,
    AssemblyInfo,
    PlotThresholds,
    PValueTransform,
)
from regionscan_viz.example_data import load_example_data
from regionscan_viz.filters import BrushFilter, BrushFilterHistory, detail_is_stale, visible_records
from regionscan_viz.formats import ScoredField, pvalue_field_names
from regionscan_viz.models import GenomicRecord, RegionRecord, VariantRecord
from regionscan_viz.plots import (
    MiamiPlot,
    OrdinalPalette,
    RegionHighlight,
    Scene,
    build_miami_plot,
    build_qq_plot,
    build_region_plot,
)
from regionscan_viz.selection import SelectedRegionDetail, resolve_detail, restart_points
from regionscan_viz.table import ResultsTable, table_records

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 1000


@dataclass
class ViewState:
    """Everything the user controls; all other views derive from it."""

    assembly: AssemblyInfo
    regions: list[RegionRecord] = field(default_factory=list)
    variants: list[VariantRecord] = field(default_factory=list)
    scored_fields: tuple[ScoredField, ...] = ()
    upper_variable: str = ""
    lower_variable: str = ""
    thresholds: PlotThresholds = field(default_factory=PlotThresholds)
    transform: PValueTransform = PValueTransform.NEG_LOG10
    width: float = DEFAULT_WIDTH
    history: BrushFilterHistory = field(default_factory=BrushFilterHistory)
    selected: GenomicRecord | None = None
    highlight: RegionHighlight = field(default_factory=RegionHighlight)


@dataclass
class DerivedView:
    visible: list[GenomicRecord] = field(default_factory=list)
    restart_points: dict[int, int] = field(default_factory=dict)
    detail: SelectedRegionDetail | None = None
    pvalue_variables: list[str] = field(default_factory=list)
    palette: OrdinalPalette = field(default_factory=OrdinalPalette)


class VisualizationController:
    """Apply user actions to ``ViewState`` and recompute every derived view.

    Each mutator changes state and then runs a full recompute; nothing is
    updated incrementally.
    """

    def __init__(
        self,
        assembly: Assembly | str | AssemblyInfo = Assembly.GRCH38,
        *,
        loader: AssemblyLoader | None = None,
        width: float = DEFAULT_WIDTH,
        thresholds: PlotThresholds | None = None,
        transform: PValueTransform = PValueTransform.NEG_LOG10,
    ) -> None:
        self.loader = loader or AssemblyLoader()
        self.state = ViewState(
            assembly=self._assembly_info(assembly),
            thresholds=thresholds or PlotThresholds(),
            transform=transform,
            width=width,
        )
        self.derived = DerivedView()
        self._next_batch = 1
        self._miami: MiamiPlot | None = None
        self._recompute()

    def _assembly_info(self, assembly: Assembly | str | AssemblyInfo) -> AssemblyInfo:
        if isinstance(assembly, AssemblyInfo):
            return assembly
        return self.loader.load(assembly)

    def _recompute(self) -> None:
        state = self.state
        combined: list[GenomicRecord] = [*state.regions, *state.variants]
        visible = visible_records(combined, state.history)
        restarts = restart_points(state.regions)

        variables = pvalue_field_names(state.scored_fields)
        if state.variants:
            variables.append(VARIANT_PVALUE_FIELD)

        detail = resolve_detail(state.selected, restarts, visible)
        self.derived = DerivedView(
            visible=visible,
            restart_points=restarts,
            detail=detail,
            pvalue_variables=variables,
            palette=OrdinalPalette(variables),
        )
        self._miami = None
        logger.debug(
            "Recomputed view: %d visible, %d filters, detail=%s",
            len(visible),
            len(state.history),
            "yes" if detail else "no",
        )

    def _reset_visualization(self) -> None:
        self.state.variants = []
        self.state.selected = None
        self.state.history = BrushFilterHistory()
        self.state.upper_variable = ""
        self.state.lower_variable = ""
        self.state.highlight = RegionHighlight()

    def load_regions(self, tables: Sequence[TsvTable]) -> str:
        """Replace the region data; returns an error message or ``""``.

        A rejected upload leaves the current state untouched.
        """

        result = RegionUploadAdapter(tables=tables, first_batch=self._next_batch).read()
        if not result.ok:
            logger.warning("Region upload rejected: %s", result.error)
            return result.error

        self._next_batch += len(tables)
        self._reset_visualization()
        self.state.regions = result.records
        self.state.scored_fields = result.scored_fields
        self._recompute()
        return ""

    def load_variants(self, tables: Sequence[TsvTable]) -> str:
        """Replace the variant data, keeping variants covered by the loaded regions."""

        result = VariantUploadAdapter(tables=tables, regions=self.state.regions).read()
        if not result.ok:
            logger.warning("Variant upload rejected: %s", result.error)
            return result.error

        self.state.variants = result.records
        self._recompute()
        return ""

    def load_example(self) -> str:
        example = load_example_data()
        error = self.load_regions([TsvTable.from_text(example["region"], origin="example/regionout.tsv")])
        if error:
            return error
        return self.load_variants([TsvTable.from_text(example["variant"], origin="example/snpout.tsv")])

    def set_assembly(self, assembly: Assembly | str | AssemblyInfo) -> None:
        self.state.assembly = self._assembly_info(assembly)
        self._recompute()

    def set_variables(self, upper: str, lower: str) -> None:
        """Choose the Miami variables; clears any selection."""

        known = set(self.derived.pvalue_variables)
        for name in (upper, lower):
            if name and name not in known:
                raise ValueError(f"Unknown p-value variable: {name}")
        self.state.upper_variable = upper
        self.state.lower_variable = lower
        self.state.selected = None
        self._recompute()

    def set_thresholds(self, thresholds: PlotThresholds) -> None:
        self.state.thresholds = thresholds
        self._recompute()

    def set_transform(self, transform: PValueTransform) -> None:
        self.state.transform = transform
        self._recompute()

    def set_width(self, width: float) -> None:
        if width <= 0:
            raise ValueError("Plot width must be positive")
        self.state.width = width
        self._recompute()

    def _invalidate_stale_detail(self) -> None:
        detail = self.derived.detail
        if detail is not None and detail_is_stale(detail, self.state.history.active):
            logger.debug("Clearing selection on chr %s after zoom change", detail.chr)
            self.state.selected = None

    def push_brush(self, brush: BrushFilter) -> None:
        self.state.history.push(brush)
        self._invalidate_stale_detail()
        self._recompute()

    def pop_brush(self) -> BrushFilter | None:
        brush = self.state.history.pop()
        self._invalidate_stale_detail()
        self._recompute()
        return brush

    def brush_pixels(self, x0: float, x1: float) -> BrushFilter:
        """Zoom to a pixel range of the current Miami plot."""

        brush = self.miami_plot().brush_to_filter(x0, x1)
        self.push_brush(brush)
        return brush

    def select(self, record: GenomicRecord | None) -> None:
        self.state.selected = record
        self._recompute()

    def clear_selection(self) -> None:
        self.select(None)

    def click(self, x: float, y: float) -> GenomicRecord | None:
        """Select whatever Miami point lies under ``(x, y)``."""

        record = self.miami_plot().hit_test(x, y)
        if record is not None:
            self.select(record)
        return record

    def toggle_highlight(self, field_name: str) -> None:
        self.state.highlight = self.state.highlight.toggle(field_name)
        self._recompute()

    @property
    def visible(self) -> list[GenomicRecord]:
        return self.derived.visible

    @property
    def detail(self) -> SelectedRegionDetail | None:
        return self.derived.detail

    @property
    def variables_selected(self) -> bool:
        return bool(self.state.upper_variable and self.state.lower_variable)

    def miami_plot(self) -> MiamiPlot:
        if not self.variables_selected:
            raise ValueError("Select both an upper and a lower variable first")
        if self._miami is None:
            state = self.state
            self._miami = build_miami_plot(
                self.derived.visible,
                state.upper_variable,
                state.lower_variable,
                state.assembly,
                state.width,
                thresholds=state.thresholds,
                palette=self.derived.palette,
                selected=self.derived.detail,
                transform=state.transform,
            )
        return self._miami

    def qq_plot(self, *, seed: int | None = None) -> Scene:
        fields = [name for name in (self.state.upper_variable, self.state.lower_variable) if name]
        return build_qq_plot(
            self.derived.visible,
            fields,
            self.state.width,
            palette=self.derived.palette,
            transform=self.state.transform,
            seed=seed,
        )

    def region_plot(
        self,
        *,
        genes: Sequence[Mapping[str, Any]] | None = None,
        recombination: Sequence[Mapping[str, Any]] | None = None,
    ) -> Scene | None:
        detail = self.derived.detail
        if detail is None:
            return None
        state = self.state
        return build_region_plot(
            detail,
            state.scored_fields,
            [state.upper_variable, state.lower_variable],
            state.width,
            palette=self.derived.palette,
            highlight=state.highlight,
            transform=state.transform,
            thresholds=state.thresholds,
            variants=[record for record in self.derived.visible if isinstance(record, VariantRecord)],
            genes=genes,
            recombination=recombination,
        )

    def results_table(self) -> ResultsTable:
        records = table_records(self.state.regions, self.derived.visible, self.derived.detail)
        return ResultsTable.from_records(records, self.state.scored_fields)
