"""Shape fixtures shared by the arranger tests.

All helpers take millimetres.  ``make_item`` returns a PlacementItem in
scaled units, positioned by *offset*.
"""

from __future__ import annotations

import math

from shapely.geometry import Polygon

from autoarrange.arranger.models import ArrangeablePolygon, BoxBed, PlacementItem
from autoarrange.geometry import BoundingBox, scale_points, scaled


def rect(w: float, h: float, x: float = 0.0, y: float = 0.0) -> list[tuple[float, float]]:
    """Counter-clockwise rectangle with its min corner at (x, y)."""
    return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]


def square(size: float, x: float = 0.0, y: float = 0.0) -> list[tuple[float, float]]:
    return rect(size, size, x, y)


def regular_polygon(n: int, radius: float, cx: float = 0.0, cy: float = 0.0):
    return [
        (cx + radius * math.cos(2 * math.pi * k / n),
         cy + radius * math.sin(2 * math.pi * k / n))
        for k in range(n)
    ]


def l_shape(size: float = 100.0) -> list[tuple[float, float]]:
    """Square of side *size* with its upper-right quarter removed."""
    h = size / 2
    return [(0, 0), (size, 0), (size, h), (h, h), (h, size), (0, size)]


def make_item(points, offset=(0.0, 0.0), apply_fn=None) -> PlacementItem:
    item = PlacementItem(scale_points(points), apply_fn)
    item.translation = (scaled(offset[0]), scaled(offset[1]))
    return item


def box_bed(w: float = 100.0, h: float = 100.0, x: float = 0.0, y: float = 0.0) -> BoxBed:
    return BoxBed(BoundingBox(scaled(x), scaled(y), scaled(x + w), scaled(y + h)))


def mm_box(minx, miny, maxx, maxy) -> BoundingBox:
    return BoundingBox(scaled(minx), scaled(miny), scaled(maxx), scaled(maxy))


def placed_polygon(item: ArrangeablePolygon) -> Polygon:
    return Polygon(item.placed_points())


class CountingPolygon(ArrangeablePolygon):
    """ArrangeablePolygon that counts result applications."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.apply_count = 0

    def apply_arrange_result(self, offset, rotation) -> None:
        self.apply_count += 1
        super().apply_arrange_result(offset, rotation)
