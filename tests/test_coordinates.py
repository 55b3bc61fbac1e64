import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from regionscan_viz.config import Assembly, AssemblyInfo  # noqa: E402
from regionscan_viz.coordinates import GenomicCoordinateMapper  # noqa: E402
from regionscan_viz.models import RegionRecord  # noqa: E402
from regionscan_viz.scales import ThresholdScale  # noqa: E402

TINY = AssemblyInfo(Assembly.GRCH38, {"1": 1000, "2": 2000, "3": 500})


def _record(chromosome: int, start: int, end: int) -> RegionRecord:
    return RegionRecord(id=start, chr=chromosome, start_bp=start, end_bp=end, region=1)


def test_spans_are_proportional_to_chromosome_length() -> None:
    mapper = GenomicCoordinateMapper([2, 1], TINY, (0, 300))

    chr1, chr2 = mapper.spans

    assert mapper.chromosomes == (1, 2)
    assert chr1.pixel_range == pytest.approx((0, 100))
    assert chr2.pixel_range == pytest.approx((100, 300))
    assert chr2.width == pytest.approx(2 * chr1.width)
    assert chr1.pixel_range[1] == pytest.approx(chr2.pixel_range[0])


def test_positions_map_within_their_chromosome_and_invert() -> None:
    mapper = GenomicCoordinateMapper([1, 2], TINY, (0, 300))

    assert mapper.to_pixel(1, 500) == pytest.approx(50)
    assert mapper.to_pixel(2, 1000) == pytest.approx(200)

    position = mapper.invert(200)
    assert position.chr == 2
    assert position.pos == pytest.approx(1000)
    assert mapper.invert(50).chr == 1


def test_inset_keeps_points_off_chromosome_edges() -> None:
    mapper = GenomicCoordinateMapper([1, 2], TINY, (0, 300), inset=5)

    assert mapper.to_pixel(1, 0) == pytest.approx(5)
    assert mapper.to_pixel(1, 1000) == pytest.approx(95)
    assert mapper.chromosome_span(1).pixel_range == pytest.approx((0, 100))


def test_chromosome_scale_steps_onto_each_local_scale() -> None:
    mapper = GenomicCoordinateMapper([1, 2, 3], TINY, (0, 350))

    scale = mapper.chromosome_scale

    assert isinstance(scale, ThresholdScale)
    assert [scale(chromosome) for chromosome in (1, 2, 3)] == [span.scale for span in mapper.spans]
    assert scale(2)(500) == pytest.approx(150)
    assert mapper.to_pixel(2, 500) == pytest.approx(150)
    assert mapper.to_pixel(3, 500) == pytest.approx(350)
    assert [label for _, label in mapper.ticks()] == ["Chr 1", "Chr 2", "Chr 3"]


def test_single_chromosome_axis_covers_observed_extent() -> None:
    records = [_record(1, 100, 200), _record(1, 300, 400)]

    mapper = GenomicCoordinateMapper.from_records(records, TINY, (0, 300))

    assert mapper.is_single_chromosome
    assert mapper.to_pixel(1, 100) == pytest.approx(0)
    assert mapper.to_pixel(1, 400) == pytest.approx(300)
    assert mapper.invert(150).pos == pytest.approx(250)
    assert mapper.ticks(3)[0][1] == "100"


def test_chromosome_missing_from_assembly_raises() -> None:
    with pytest.raises(KeyError):
        GenomicCoordinateMapper([1, 9], TINY, (0, 300))


def test_chromosome_not_on_axis_raises() -> None:
    mapper = GenomicCoordinateMapper([1], TINY, (0, 300))

    with pytest.raises(KeyError):
        mapper.chromosome_span(2)


def test_mapper_requires_a_chromosome() -> None:
    with pytest.raises(ValueError):
        GenomicCoordinateMapper([], TINY, (0, 300))
