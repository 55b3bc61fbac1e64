"""Linear and threshold scales with d3-compatible semantics."""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Sequence

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _tick_steps(start: float, stop: float, count: float) -> tuple[int, int, float]:
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1

    if power < 0:
        inc = 10 ** (-power) / factor
        i1 = round(start * inc)
        i2 = round(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10**power * factor
        i1 = round(start / inc)
        i2 = round(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1

    if i2 < i1 and 0.5 <= count < 2:
        return _tick_steps(start, stop, count * 2)
    return i1, i2, inc


def nice_ticks(start: float, stop: float, count: int = 10) -> list[float]:
    """Round-number ticks between ``start`` and ``stop`` (inclusive)."""

    if count <= 0:
        return []
    if start == stop:
        return [start]

    reverse = stop < start
    if reverse:
        start, stop = stop, start

    i1, i2, inc = _tick_steps(start, stop, count)
    if i2 < i1:
        return []

    if inc < 0:
        ticks = [(i1 + offset) / -inc for offset in range(i2 - i1 + 1)]
    else:
        ticks = [(i1 + offset) * inc for offset in range(i2 - i1 + 1)]
    return ticks[::-1] if reverse else ticks


@dataclass(frozen=True)
class LinearScale:
    """Affine map from ``domain`` onto ``range``; optionally clamped."""

    domain: tuple[float, float]
    range: tuple[float, float]
    clamp: bool = False

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d0 == d1:
            return (r0 + r1) / 2
        t = (value - d0) / (d1 - d0)
        if self.clamp:
            t = min(max(t, 0.0), 1.0)
        return r0 + t * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r0 == r1:
            return (d0 + d1) / 2
        t = (pixel - r0) / (r1 - r0)
        if self.clamp:
            t = min(max(t, 0.0), 1.0)
        return d0 + t * (d1 - d0)

    def ticks(self, count: int = 10) -> list[float]:
        return nice_ticks(self.domain[0], self.domain[-1], count)


@dataclass(frozen=True)
class ThresholdScale:
    """Piecewise-constant scale: ``domain`` breakpoints select ``range`` values.

    ``range`` has one more entry than ``domain``. A value equal to a
    breakpoint maps to the range entry right of that breakpoint. Range
    entries may be numbers or other scales.
    """

    domain: tuple[float, ...]
    range: tuple[Any, ...]

    def __post_init__(self) -> None:
        if len(self.range) != len(self.domain) + 1:
            raise ValueError("ThresholdScale range must have exactly one more entry than domain")

    def __call__(self, value: float) -> Any:
        return self.range[bisect_right(self.domain, value)]


def extent(values: Sequence[float]) -> tuple[float, float] | None:
    """Minimum and maximum of ``values``, or ``None`` when empty."""

    if not values:
        return None
    return min(values), max(values)
