"""
Polygon geometry utilities on scaled integer coordinates.

External coordinates are millimetres.  Everything inside the arranger
works on integers where 1 unit = SCALING_FACTOR mm, so contours compare
exactly and tolerances are fixed.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry

Point = tuple[int, int]
Contour = list[Point]


SCALING_FACTOR = 1e-6       # mm per scaled unit
EPSILON = 1e-4              # mm


def scaled(value: float) -> int:
    """Millimetres → scaled integer units."""
    return int(round(value / SCALING_FACTOR))


def unscaled(value: float) -> float:
    """Scaled integer units → millimetres."""
    return value * SCALING_FACTOR


SCALED_EPSILON = scaled(EPSILON)


def scale_points(points: Iterable[Sequence[float]]) -> Contour:
    return [(scaled(p[0]), scaled(p[1])) for p in points]


# ── core primitives ─────────────────────────────────────────────────


def polygon_area(contour: Sequence[Sequence[float]]) -> float:
    """Signed area via shoelace formula (positive = CCW)."""
    n = len(contour)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x0, y0 = contour[i]
        x1, y1 = contour[(i + 1) % n]
        area += x0 * y1 - x1 * y0
    return area / 2.0


def is_counter_clockwise(contour: Sequence[Sequence[float]]) -> bool:
    return polygon_area(contour) > 0


def ensure_cw(contour: Sequence[Point]) -> Contour:
    """Return a copy with clockwise winding."""
    if is_counter_clockwise(contour):
        return list(reversed(contour))
    return list(contour)


def close_ring(contour: Sequence[Point]) -> Contour:
    """Return a copy whose last point repeats the first."""
    ring = list(contour)
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def distance(p: Sequence[float], q: Sequence[float]) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def convex_hull(shapes: Iterable[BaseGeometry]) -> BaseGeometry:
    """Convex hull of a collection of shapes (e.g. a pile plus a candidate)."""
    return GeometryCollection(list(shapes)).convex_hull


def perimeter(shape: BaseGeometry) -> float:
    """Circumference of a polygonal shape."""
    return shape.length
