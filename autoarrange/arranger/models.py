"""Arranger data model: placement items, beds, scores, and weights."""

from __future__ import annotations

import copy
import enum
import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable, NamedTuple, Optional, Protocol, Sequence

from shapely.affinity import rotate as shapely_rotate, translate as shapely_translate
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from autoarrange.geometry import (
    BoundingBox, SCALED_EPSILON, close_ring, ensure_cw, polygon_area,
)
from autoarrange.geometry.polygon import Contour, Point


# ── Placement item ─────────────────────────────────────────────────


ApplyFn = Callable[["PlacementItem", int], None]


class PlacementItem:
    """A polygon being arranged, with its current transform.

    The contour is stored clockwise and closed.  Translation is in scaled
    units, rotation in radians about the contour origin.  ``apply_fn`` is
    called with the item and its bin index once the result is final.
    """

    def __init__(self, contour: Sequence[Point], apply_fn: Optional[ApplyFn] = None) -> None:
        self._contour: Contour = close_ring(ensure_cw(contour))
        self._raw = Polygon(self._contour)
        self._area = abs(polygon_area(self._contour))
        self._apply_fn = apply_fn
        self._fixed = False
        self.translation: tuple[int, int] = (0, 0)
        self.rotation: float = 0.0
        self.bin_id: int = -1
        self._cache_key: tuple | None = None
        self._shape: BaseGeometry | None = None
        self._bb: BoundingBox | None = None

    def __repr__(self) -> str:
        return (f"PlacementItem(area={self._area:.0f}, "
                f"translation={self.translation}, fixed={self._fixed})")

    @property
    def contour(self) -> Contour:
        return list(self._contour)

    @property
    def area(self) -> float:
        return self._area

    @property
    def is_fixed(self) -> bool:
        return self._fixed

    def mark_as_fixed(self) -> None:
        self._fixed = True

    def translate(self, dx: int, dy: int) -> None:
        tx, ty = self.translation
        self.translation = (tx + dx, ty + dy)

    def moved(self, translation: tuple[int, int], rotation: float | None = None) -> PlacementItem:
        """Shallow copy at another transform (used for candidate positions)."""
        other = copy.copy(self)
        other.translation = translation
        if rotation is not None:
            other.rotation = rotation
        return other

    def _refresh(self) -> None:
        key = (self.translation, self.rotation)
        if key == self._cache_key:
            return
        shape = self._raw
        if self.rotation:
            shape = shapely_rotate(shape, self.rotation, origin=(0, 0), use_radians=True)
        tx, ty = self.translation
        if tx or ty:
            shape = shapely_translate(shape, xoff=tx, yoff=ty)
        self._shape = shape
        self._bb = BoundingBox.of_geometry(shape)
        self._cache_key = key

    def transformed_shape(self) -> BaseGeometry:
        self._refresh()
        return self._shape

    def bounding_box(self) -> BoundingBox:
        self._refresh()
        return self._bb

    def call_apply_function(self, bin_idx: int) -> None:
        if self._apply_fn is not None:
            self._apply_fn(self, bin_idx)


PackGroup = list[list[PlacementItem]]


# ── Beds ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BoxBed:
    """Axis-aligned rectangular bed."""

    box: BoundingBox

    @property
    def area(self) -> float:
        return self.box.area

    @property
    def center(self) -> tuple[float, float]:
        return self.box.center

    @property
    def width(self) -> float:
        return self.box.width

    def bounding_box(self) -> BoundingBox:
        return self.box

    def contains(self, shape: BaseGeometry) -> bool:
        return self.box.contains_box(BoundingBox.of_geometry(shape))


@dataclass(frozen=True)
class CircleBed:
    center: tuple[float, float]
    radius: float

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius

    @property
    def width(self) -> float:
        return 2 * self.radius

    def bounding_box(self) -> BoundingBox:
        cx, cy = self.center
        r = self.radius
        return BoundingBox(cx - r, cy - r, cx + r, cy + r)

    def contains(self, shape: BaseGeometry) -> bool:
        cx, cy = self.center
        r = self.radius
        return all(math.hypot(x - cx, y - cy) <= r
                   for x, y in shape_vertices(shape))


@dataclass(frozen=True)
class IrregularBed:
    """Arbitrary polygonal bed."""

    contour: tuple[Point, ...]

    @cached_property
    def polygon(self) -> Polygon:
        return Polygon(self.contour)

    @property
    def area(self) -> float:
        return self.polygon.area

    @property
    def center(self) -> tuple[float, float]:
        return self.bounding_box().center

    @property
    def width(self) -> float:
        return self.bounding_box().width

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.of_points(self.contour)

    def contains(self, shape: BaseGeometry) -> bool:
        return self.polygon.covers(shape)


@dataclass(frozen=True)
class InfiniteBed:
    """Unbounded plane anchored at a center point."""

    center: tuple[float, float] = (0, 0)

    @property
    def area(self) -> float:
        return self.bounding_box().area

    @property
    def width(self) -> float:
        return 0

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.infinite(self.center)

    def contains(self, shape: BaseGeometry) -> bool:
        return True


Bed = BoxBed | CircleBed | IrregularBed | InfiniteBed


def shape_vertices(shape: BaseGeometry) -> list[tuple[float, float]]:
    if hasattr(shape, "exterior"):
        return list(shape.exterior.coords)
    if hasattr(shape, "geoms"):
        return [v for g in shape.geoms for v in shape_vertices(g)]
    return list(shape.coords)


# ── Bed shape hint ─────────────────────────────────────────────────


class BedShapeType(enum.Enum):
    BOX = "box"
    CIRCLE = "circle"
    IRREGULAR = "irregular"
    INFINITE = "infinite"


@dataclass
class BedShapeHint:
    """Classified bed outline.  Exactly one shape field is set per type."""

    type: BedShapeType
    box: BoundingBox | None = None
    circle: CircleBed | None = None
    polygon: list[Point] | None = None
    center: tuple[float, float] | None = None     # infinite beds


# ── Scoring ────────────────────────────────────────────────────────


class Score(NamedTuple):
    score: float            # lower is better
    fullbb: BoundingBox     # pile bounding box including the candidate


# Classifier tolerances
BOX_AREA_TOLERANCE = 1e-3
CIRCLE_TOLERANCE = 10 * SCALED_EPSILON

# Two items count as the same size for alignment within this ratio.
AREA_MATCH_TOLERANCE = 1e-6

# Scoring weights.  Distances are normalised by sqrt(bed area).
W_PILE_DISTANCE = 0.8       # nearest anchor to the pile center
W_BED_DISTANCE = 0.2        # item center to bed center
W_LONE_DISTANCE = 0.5       # no neighbour touching the candidate
W_LONE_DENSITY = 0.5
W_NEIGHBOR_DISTANCE = 0.4   # at least one neighbour touching
W_NEIGHBOR_DENSITY = 0.4
W_ALIGNMENT = 0.2
W_HULL_PERIMETER = 0.5      # last big item
W_BOX_PERIMETER = 0.5


# ── External items ─────────────────────────────────────────────────


class Arrangeable(Protocol):
    """Anything that can be arranged.

    ``get_arrange_polygon`` returns (outline in mm, offset in mm, rotation
    in radians); ``apply_arrange_result`` receives the final offset and
    rotation.
    """

    def get_arrange_polygon(
        self,
    ) -> tuple[Sequence[Sequence[float]], tuple[float, float], float]: ...

    def apply_arrange_result(self, offset: tuple[float, float], rotation: float) -> None: ...


@dataclass
class ArrangeablePolygon:
    """Plain polygon that records the arrangement result on itself."""

    id: str
    points: list[tuple[float, float]]
    offset: tuple[float, float] = (0.0, 0.0)
    rotation: float = 0.0
    applied: bool = field(default=False, compare=False)

    def get_arrange_polygon(self):
        return list(self.points), self.offset, self.rotation

    def apply_arrange_result(self, offset: tuple[float, float], rotation: float) -> None:
        self.offset = (float(offset[0]), float(offset[1]))
        self.rotation = rotation
        self.applied = True

    def placed_points(self) -> list[tuple[float, float]]:
        """Outline in bed coordinates after applying offset and rotation."""
        c, s = math.cos(self.rotation), math.sin(self.rotation)
        ox, oy = self.offset
        return [(x * c - y * s + ox, x * s + y * c + oy) for x, y in self.points]
