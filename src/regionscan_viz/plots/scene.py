"""Retained-mode scene primitives shared by every plot builder."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Sequence, Type, TypeVar, Union

TABLEAU10: tuple[str, ...] = (
    "#4e79a7",
    "#f28e2c",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc949",
    "#af7aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ab",
)

DASH_LENGTH = 5.0
DASH_GAP = 5.0


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: str = "black"
    opacity: float = 1.0
    group: str = ""
    datum: Any = field(default=None, compare=False, repr=False)

    def contains(self, x: float, y: float) -> bool:
        return math.hypot(x - self.cx, y - self.cy) <= self.r


@dataclass(frozen=True)
class Diamond:
    """Rhombus centred on ``(cx, cy)``; half extents along each axis."""

    cx: float
    cy: float
    half_width: float
    half_height: float
    fill: str = "black"
    opacity: float = 1.0
    group: str = ""
    datum: Any = field(default=None, compare=False, repr=False)

    def contains(self, x: float, y: float) -> bool:
        return abs(x - self.cx) / self.half_width + abs(y - self.cy) / self.half_height <= 1

    @property
    def points(self) -> tuple[tuple[float, float], ...]:
        return (
            (self.cx, self.cy - self.half_height),
            (self.cx + self.half_width, self.cy),
            (self.cx, self.cy + self.half_height),
            (self.cx - self.half_width, self.cy),
        )


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str = "none"
    stroke: str | None = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    group: str = ""
    datum: Any = field(default=None, compare=False, repr=False)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "black"
    stroke_width: float = 1.0
    opacity: float = 1.0
    group: str = ""


@dataclass(frozen=True)
class Polyline:
    points: tuple[tuple[float, float], ...]
    stroke: str = "black"
    stroke_width: float = 1.0
    opacity: float = 1.0
    group: str = ""


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    anchor: str = "middle"
    size: float = 12.0
    rotation: float = 0.0
    fill: str = "black"
    group: str = ""


@dataclass(frozen=True)
class Axis:
    """An axis line with ``(pixel, label)`` ticks.

    ``position`` is the y of a bottom axis or the x of a left/right axis;
    ``start`` and ``end`` bound the line along the other direction.
    """

    orientation: str
    position: float
    start: float
    end: float
    ticks: tuple[tuple[float, str], ...] = ()
    label: str = ""
    group: str = ""


Primitive = Union[Circle, Diamond, Rect, Line, Polyline, Text, Axis]
PrimitiveT = TypeVar("PrimitiveT", Circle, Diamond, Rect, Line, Polyline, Text, Axis)


@dataclass
class Scene:
    """Ordered drawing primitives in pixel space; later primitives draw on top."""

    width: float
    height: float
    title: str = ""
    primitives: list[Primitive] = field(default_factory=list)

    def add(self, primitive: Primitive) -> None:
        self.primitives.append(primitive)

    def extend(self, primitives: Iterable[Primitive]) -> None:
        self.primitives.extend(primitives)

    def of_type(self, kind: Type[PrimitiveT]) -> list[PrimitiveT]:
        return [primitive for primitive in self.primitives if isinstance(primitive, kind)]

    def in_group(self, group: str) -> list[Primitive]:
        return [primitive for primitive in self.primitives if primitive.group == group]

    def data(self, group: str | None = None) -> list[Any]:
        """Data bound to primitives, optionally restricted to one group."""

        return [
            primitive.datum
            for primitive in self.primitives
            if getattr(primitive, "datum", None) is not None
            and (group is None or primitive.group == group)
        ]

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self.primitives)

    def __len__(self) -> int:
        return len(self.primitives)


def hit_test(scene: Scene, x: float, y: float) -> Any:
    """Return the datum of the topmost data-bearing shape under ``(x, y)``."""

    for primitive in reversed(scene.primitives):
        datum = getattr(primitive, "datum", None)
        if datum is not None and primitive.contains(x, y):
            return datum
    return None


def dashed_segments(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    *,
    dash: float = DASH_LENGTH,
    gap: float = DASH_GAP,
    stroke: str = "black",
    group: str = "",
) -> list[Line]:
    """Split the line from ``(x1, y1)`` to ``(x2, y2)`` into alternating dashes."""

    length = math.hypot(x2 - x1, y2 - y1)
    if length == 0:
        return []

    ux = (x2 - x1) / length
    uy = (y2 - y1) / length
    segments: list[Line] = []
    travelled = 0.0
    while travelled < length:
        end = min(travelled + dash, length)
        segments.append(
            Line(
                x1 + ux * travelled,
                y1 + uy * travelled,
                x1 + ux * end,
                y1 + uy * end,
                stroke=stroke,
                group=group,
            )
        )
        travelled = end + gap
    return segments


class OrdinalPalette:
    """Stable colour per field name, cycling through ``colors``.

    Names outside the initial domain are appended on first use.
    """

    def __init__(self, domain: Sequence[str] = (), colors: Sequence[str] = TABLEAU10) -> None:
        self.colors = tuple(colors)
        self._index: dict[str, int] = {}
        for name in domain:
            self._assign(name)

    def _assign(self, name: str) -> int:
        if name not in self._index:
            self._index[name] = len(self._index)
        return self._index[name]

    def __call__(self, name: str) -> str:
        return self.colors[self._assign(name) % len(self.colors)]

    @property
    def domain(self) -> list[str]:
        return list(self._index)
