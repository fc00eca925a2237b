"""Pure geometry helpers for floor-plan layout."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np

EPSILON = sys.float_info.epsilon


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


PointLike = Union[Point, Tuple[float, float], Mapping[str, float]]


def as_point(value: PointLike) -> Point:
    """Coerce ``(x, y)`` tuples and ``{"x", "y"}`` mappings to :class:`Point`."""

    if isinstance(value, Point):
        return value
    if isinstance(value, Mapping):
        return Point(float(value["x"]), float(value["y"]))
    x, y = value
    return Point(float(x), float(y))


def clamp(n: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, n))


def round_half_up(value: float) -> float:
    """Round to the nearest whole unit with halves going up (``2.5 -> 3``, ``-2.5 -> -2``)."""

    return float(math.floor(value + 0.5))


def normalize_rect(a: PointLike, b: PointLike) -> Rect:
    """Return the axis-aligned rectangle spanned by two arbitrary corners."""

    a = as_point(a)
    b = as_point(b)
    return Rect(
        x=min(a.x, b.x),
        y=min(a.y, b.y),
        width=abs(a.x - b.x),
        height=abs(a.y - b.y),
    )


def point_in_polygon(
    point: PointLike, polygon: Sequence[PointLike], *, eps: float = EPSILON
) -> bool:
    """Even-odd ray casting test.

    ``eps`` is added to every edge's vertical extent so horizontal edges never
    divide by zero. Points exactly on an edge follow whatever the arithmetic
    gives; concave and self-intersecting polygons get plain ray-casting
    semantics.
    """

    p = as_point(point)
    pts = [as_point(v) for v in polygon]
    inside = False
    j = len(pts) - 1
    # A zero denominator yields +-inf (or nan), matching points_in_polygon.
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(len(pts)):
            xi, yi = pts[i].x, pts[i].y
            xj, yj = pts[j].x, pts[j].y
            if (yi > p.y) != (yj > p.y):
                crossing_x = (xj - xi) * (p.y - yi) / np.float64(yj - yi + eps) + xi
                if p.x < crossing_x:
                    inside = not inside
            j = i
    return inside


def points_in_polygon(
    points: Iterable[PointLike], polygon: Sequence[PointLike], *, eps: float = EPSILON
) -> np.ndarray:
    """Vectorised :func:`point_in_polygon` over many query points."""

    query = np.array([tuple(as_point(p)) for p in points], dtype=float).reshape(-1, 2)
    if len(polygon) == 0:
        return np.zeros(len(query), dtype=bool)
    verts = np.array([tuple(as_point(v)) for v in polygon], dtype=float)
    xi, yi = verts[:, 0], verts[:, 1]
    prev = np.roll(verts, 1, axis=0)
    xj, yj = prev[:, 0], prev[:, 1]

    px = query[:, 0][:, None]
    py = query[:, 1][:, None]
    straddles = (yi > py) != (yj > py)
    with np.errstate(divide="ignore", invalid="ignore"):
        crossing_x = (xj - xi) * (py - yi) / (yj - yi + eps) + xi
    crossings = straddles & (px < crossing_x)
    return np.count_nonzero(crossings, axis=1) % 2 == 1


def rect_corners(rect: Rect) -> List[Point]:
    """Corners in fixed order: top-left, top-right, bottom-right, bottom-left."""

    return [
        Point(rect.x, rect.y),
        Point(rect.x + rect.width, rect.y),
        Point(rect.x + rect.width, rect.y + rect.height),
        Point(rect.x, rect.y + rect.height),
    ]


@dataclass(frozen=True)
class ViewportTransform:
    """Screen-to-canvas mapping for a zoomed and panned viewport."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_canvas(self, point: PointLike) -> Point:
        p = as_point(point)
        return Point((p.x - self.offset_x) / self.scale, (p.y - self.offset_y) / self.scale)

    def to_screen(self, point: PointLike) -> Point:
        p = as_point(point)
        return Point(p.x * self.scale + self.offset_x, p.y * self.scale + self.offset_y)

    def __call__(self, point: PointLike) -> Point:
        return self.to_canvas(point)
