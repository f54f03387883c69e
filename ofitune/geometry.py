"""Planar geometry used by the region tuner: points, polygons and ray casting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .common import Algorithm, Protocol

# Largest message size (bytes) and rank count the region tables are drawn for.
TUNER_MAX_SIZE = 100 * 1024 * 1024 * 1024
TUNER_MAX_RANKS = 1024 * 8

# Tolerance used when testing points against region edges.
REGION_EPS = 1e-10


@dataclass(frozen=True)
class Point:
    """A point in the (message size, rank count) plane."""

    x: float
    y: float


PointLike = Union[Point, Tuple[float, float]]


def _as_point(value: PointLike) -> Point:
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


@dataclass(frozen=True)
class Region:
    """A polygon in which one algorithm/protocol pair should be used."""

    algorithm: Algorithm
    protocol: Protocol
    vertices: Tuple[Point, ...]

    def __init__(
        self, algorithm: Algorithm, protocol: Protocol, vertices: Iterable[PointLike]
    ) -> None:
        object.__setattr__(self, "algorithm", Algorithm(algorithm))
        object.__setattr__(self, "protocol", Protocol(protocol))
        object.__setattr__(self, "vertices", tuple(_as_point(v) for v in vertices))

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    def edges(self):
        """Yield each closed-polygon edge as a pair of points."""
        count = len(self.vertices)
        for i, start in enumerate(self.vertices):
            yield start, self.vertices[(i + 1) % count]


def _sub(a: Point, b: Point) -> Point:
    return Point(a.x - b.x, a.y - b.y)


def _dot(a: Point, b: Point) -> float:
    return a.x * b.x + a.y * b.y


def _cross(a: Point, b: Point) -> float:
    return a.x * b.y - a.y * b.x


def _madd(a: Point, s: float, b: Point) -> Point:
    return Point(a.x + s * b.x, a.y + s * b.y)


def intersect(
    x0: PointLike, x1: PointLike, y0: PointLike, y1: PointLike, eps: float
) -> Tuple[int, Optional[Point]]:
    """Check whether segment x0->x1 crosses segment y0->y1.

    Returns ``(result, point)`` where result is 1 for a crossing, -1 for
    none and 0 when the segments are parallel or the crossing lies within
    ``eps`` of y0 or y1.  ``point`` is where the line through x0->x1 meets
    the line through y0->y1, or None when they are parallel.
    """
    x0, x1, y0, y1 = (_as_point(p) for p in (x0, x1, y0, y1))
    dx = _sub(x1, x0)
    dy = _sub(y1, y0)
    d = _cross(dy, dx)
    if abs(d) < eps:
        return 0, None

    a = (_cross(x0, dx) - _cross(y0, dx)) / d
    sect = _madd(y0, a, dy)

    if a < -eps or a > 1 + eps:
        return -1, sect
    if a < eps or a > 1 - eps:
        return 0, sect

    a = (_cross(x0, dy) - _cross(y0, dy)) / d
    if a < 0 or a > 1:
        return -1, sect
    return 1, sect


def distance(x: PointLike, y0: PointLike, y1: PointLike, eps: float) -> float:
    """Distance from ``x`` to its perpendicular foot on segment y0->y1.

    Returns infinity when the foot falls outside the segment.  For a
    degenerate (zero-length) segment the distance to its single point is
    returned.
    """
    x, y0, y1 = _as_point(x), _as_point(y0), _as_point(y1)
    dy = _sub(y1, y0)
    x1 = Point(x.x + dy.y, x.y - dy.x)
    result, sect = intersect(x, x1, y0, y1, eps)
    if result == -1:
        return math.inf
    if sect is None:
        sect = y0
    s = _sub(sect, x)
    return math.sqrt(_dot(s, s))


def is_inside_region(point: PointLike, region: Region) -> int:
    """Ray-casting test: 1 inside, -1 outside, 0 on an edge."""
    if region.num_vertices <= 1:
        raise ValueError("a region needs at least two vertices")
    point = _as_point(point)
    eps = REGION_EPS

    for start, end in region.edges():
        if distance(point, start, end, eps) < eps:
            return 0

    vertices = region.vertices
    min_x = max_x = vertices[0].x
    min_y = max_y = vertices[1].y
    for v in vertices:
        max_x = max(max_x, v.x)
        min_x = min(min_x, v.x)
        max_y = max(max_y, v.y)
        min_y = min(min_y, v.y)
    if point.x < min_x or point.x > max_x or point.y < min_y or point.y > max_y:
        return -1

    far = Point(2.0 * TUNER_MAX_SIZE, 2.0 * TUNER_MAX_RANKS)
    crosses = sum(
        1 for start, end in region.edges() if intersect(point, far, start, end, eps)[0] == 1
    )
    return 1 if crosses & 1 else -1


def extend_region(a: PointLike, b: PointLike, z: PointLike) -> Point:
    """Extend the line through ``a`` and ``b`` until it meets x = z.x or y = z.y.

    Of the two candidate points the one that stays within ``z``'s bounds
    is returned.
    """
    a, b, z = _as_point(a), _as_point(b), _as_point(z)
    if a.x == b.x:
        return Point(a.x, z.y)
    if a.y == b.y:
        return Point(z.x, a.y)

    m = (a.y - b.y) / (a.x - b.x)
    c = b.y - m * b.x
    projected_zy = m * z.x + c
    if projected_zy < z.y:
        return Point(z.x, projected_zy)
    return Point((z.y - c) / m, z.y)