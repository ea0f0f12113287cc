"""Axis-aligned bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from shapely.geometry import box as shapely_box
from shapely.geometry.base import BaseGeometry


# Half extent of an unbounded bed, in scaled units.  Large enough that no
# real pile reaches it, small enough that its area is still a finite float.
INFINITE_HALF_EXTENT = 2 ** 61


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in scaled units."""

    minx: float
    miny: float
    maxx: float
    maxy: float

    @classmethod
    def of_points(cls, points: Iterable[Sequence[float]]) -> BoundingBox:
        pts = list(points)
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @classmethod
    def of_geometry(cls, geom: BaseGeometry) -> BoundingBox:
        return cls(*geom.bounds)

    @classmethod
    def infinite(cls, center: Sequence[float] = (0, 0)) -> BoundingBox:
        cx, cy = center
        m = INFINITE_HALF_EXTENT
        return cls(cx - m, cy - m, cx + m, cy + m)

    @property
    def width(self) -> float:
        return self.maxx - self.minx

    @property
    def height(self) -> float:
        return self.maxy - self.miny

    @property
    def area(self) -> float:
        return float(self.width) * float(self.height)

    @property
    def center(self) -> tuple[float, float]:
        return ((self.minx + self.maxx) / 2, (self.miny + self.maxy) / 2)

    @property
    def min_corner(self) -> tuple[float, float]:
        return (self.minx, self.miny)

    @property
    def max_corner(self) -> tuple[float, float]:
        return (self.maxx, self.maxy)

    @property
    def top_left(self) -> tuple[float, float]:
        return (self.minx, self.maxy)

    @property
    def bottom_right(self) -> tuple[float, float]:
        return (self.maxx, self.miny)

    def union(self, other: BoundingBox | None) -> BoundingBox:
        if other is None:
            return self
        return BoundingBox(
            min(self.minx, other.minx), min(self.miny, other.miny),
            max(self.maxx, other.maxx), max(self.maxy, other.maxy),
        )

    def intersects(self, other: BoundingBox) -> bool:
        """Overlap test; touching edges count as intersecting."""
        return not (
            other.minx > self.maxx or other.maxx < self.minx
            or other.miny > self.maxy or other.maxy < self.miny
        )

    def contains_box(self, other: BoundingBox) -> bool:
        return (self.minx <= other.minx and self.miny <= other.miny
                and other.maxx <= self.maxx and other.maxy <= self.maxy)

    def to_shapely(self):
        return shapely_box(self.minx, self.miny, self.maxx, self.maxy)


def union_all(boxes: Iterable[BoundingBox]) -> BoundingBox | None:
    """Aggregate box of *boxes*, or None when there are none."""
    result: BoundingBox | None = None
    for bb in boxes:
        result = bb if result is None else result.union(bb)
    return result
