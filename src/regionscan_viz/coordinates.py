"""Multi-chromosome genomic coordinate system for plot x axes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from regionscan_viz.config import AssemblyInfo
from regionscan_viz.filters import GenomicPosition
from regionscan_viz.models import GenomicRecord
from regionscan_viz.scales import LinearScale, ThresholdScale, extent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChromosomeSpan:
    """Where one chromosome sits on the shared axis."""

    chr: int
    offset: int
    length: int
    pixel_range: tuple[float, float]
    scale: LinearScale

    @property
    def width(self) -> float:
        return self.pixel_range[1] - self.pixel_range[0]

    @property
    def midpoint(self) -> float:
        return (self.pixel_range[0] + self.pixel_range[1]) / 2


class GenomicCoordinateMapper:
    """Immutable mapping from ``(chromosome, bp)`` pairs to pixels.

    Chromosomes are laid out left to right in ascending numeric order, each
    taking a share of ``pixel_range`` proportional to its assembly length.
    With a single chromosome the axis covers only ``observed_extent`` so a
    zoomed view does not waste canvas on empty sequence. Build a new mapper
    whenever the chromosome set, assembly or width changes.
    """

    def __init__(
        self,
        chromosomes: Iterable[int],
        assembly: AssemblyInfo,
        pixel_range: tuple[float, float],
        *,
        inset: float = 0.0,
        observed_extent: tuple[float, float] | None = None,
    ) -> None:
        self.chromosomes: tuple[int, ...] = tuple(sorted({int(chromosome) for chromosome in chromosomes}))
        if not self.chromosomes:
            raise ValueError("At least one chromosome is required to build a coordinate mapper")

        self.assembly = assembly
        self.pixel_range = (float(pixel_range[0]), float(pixel_range[1]))
        self.inset = inset

        lengths = [assembly.length_of(chromosome) for chromosome in self.chromosomes]
        self.total_length = sum(lengths)
        self.global_scale = LinearScale((0, self.total_length), self.pixel_range)

        spans: dict[int, ChromosomeSpan] = {}
        offset = 0
        for chromosome, length in zip(self.chromosomes, lengths):
            start_px = self.global_scale(offset)
            end_px = self.global_scale(offset + length)
            spans[chromosome] = ChromosomeSpan(
                chr=chromosome,
                offset=offset,
                length=length,
                pixel_range=(start_px, end_px),
                scale=LinearScale((0, length), (start_px + inset, end_px - inset)),
            )
            offset += length
        self._spans = spans
        # Steps at chromosome boundaries onto each chromosome's local scale.
        self.chromosome_scale = ThresholdScale(
            domain=tuple(float(chromosome) for chromosome in self.chromosomes[1:]),
            range=tuple(spans[chromosome].scale for chromosome in self.chromosomes),
        )

        self.single_scale: LinearScale | None = None
        if len(self.chromosomes) == 1:
            only = self.chromosomes[0]
            domain = observed_extent or (0, spans[only].length)
            self.single_scale = LinearScale((float(domain[0]), float(domain[1])), self.pixel_range)

        logger.debug(
            "Built coordinate mapper for %d chromosome(s) over %s",
            len(self.chromosomes),
            self.pixel_range,
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[GenomicRecord],
        assembly: AssemblyInfo,
        pixel_range: tuple[float, float],
        *,
        inset: float = 0.0,
    ) -> "GenomicCoordinateMapper":
        """Build a mapper for the chromosomes and positions present in ``records``."""

        items = list(records)
        chromosomes = {record.chr for record in items}
        observed = None
        if len(chromosomes) == 1:
            observed = extent([bp for record in items for bp in (record.start_bp, record.end_bp)])
        return cls(chromosomes, assembly, pixel_range, inset=inset, observed_extent=observed)

    @property
    def is_single_chromosome(self) -> bool:
        return self.single_scale is not None

    @property
    def spans(self) -> list[ChromosomeSpan]:
        return [self._spans[chromosome] for chromosome in self.chromosomes]

    def chromosome_span(self, chromosome: int) -> ChromosomeSpan:
        """Return the span of ``chromosome`` or raise ``KeyError``."""

        if chromosome not in self._spans:
            raise KeyError(f"Chromosome {chromosome} is not on this axis")
        return self._spans[chromosome]

    def scale_for(self, chromosome: int) -> LinearScale:
        """The scale positions on ``chromosome`` are plotted with."""

        self.chromosome_span(chromosome)
        if self.single_scale is not None:
            return self.single_scale
        return self.chromosome_scale(chromosome)

    def to_pixel(self, chromosome: int, position: float) -> float:
        return self.scale_for(chromosome)(position)

    def chromosome_at(self, pixel: float) -> int:
        """Chromosome whose span contains ``pixel``, clamped to the axis ends."""

        if self.single_scale is not None:
            return self.chromosomes[0]

        bp = self.global_scale.invert(pixel)
        for span in self.spans:
            if bp <= span.offset + span.length:
                return span.chr
        return self.chromosomes[-1]

    def invert(self, pixel: float) -> GenomicPosition:
        """Map an x pixel back to a genomic position."""

        chromosome = self.chromosome_at(pixel)
        return GenomicPosition(chr=chromosome, pos=self.scale_for(chromosome).invert(pixel))

    def ticks(self, count: int = 7) -> list[tuple[float, str]]:
        """Axis ticks as ``(pixel, label)`` pairs."""

        if self.single_scale is not None:
            return [
                (self.single_scale(value), f"{value:,.0f}")
                for value in self.single_scale.ticks(count)
            ]
        return [(span.midpoint, f"Chr {span.chr}") for span in self.spans]
