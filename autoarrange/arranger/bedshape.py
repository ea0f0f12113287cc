"""Bed shape classification from a raw outline."""

from __future__ import annotations

from typing import Sequence

from autoarrange.geometry import BoundingBox, distance, polygon_area, scale_points

from .models import (
    BOX_AREA_TOLERANCE, CIRCLE_TOLERANCE,
    BedShapeHint, BedShapeType, CircleBed,
)


def _as_circle(points, bb: BoundingBox) -> CircleBed | None:
    """Circle around the bounding-box center, or None if the vertices
    are not all (nearly) equidistant from it."""
    center = bb.center
    dists = [distance(center, p) for p in points]
    avg = sum(dists) / len(dists)
    if any(abs(d - avg) > CIRCLE_TOLERANCE for d in dists):
        return None
    return CircleBed(center=center, radius=avg)


def bed_shape(outline: Sequence[Sequence[float]]) -> BedShapeHint:
    """Classify a bed outline (mm) as a box, a circle, or irregular.

    The outline must have at least 3 points.  A closing point equal to
    the first one is ignored.
    """
    points = scale_points(outline)
    if len(points) > 3 and points[0] == points[-1]:
        points = points[:-1]

    bb = BoundingBox.of_points(points)
    area = abs(polygon_area(points))

    if 1.0 - area / bb.area < BOX_AREA_TOLERANCE:
        return BedShapeHint(BedShapeType.BOX, box=bb)

    circle = _as_circle(points, bb)
    if circle is not None:
        return BedShapeHint(BedShapeType.CIRCLE, circle=circle)

    return BedShapeHint(BedShapeType.IRREGULAR, polygon=points)
