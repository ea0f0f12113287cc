"""Placement solver — first-fit candidate search with hard/soft constraints.

Items are taken largest first.  For each one the solver tries the open
bins in order: it syncs the caller's scoring state (``before_packing``),
generates candidate positions in contact with the existing pile, drops
the infeasible ones (outside the bed, overlapping, closer than the
minimum distance) and keeps the candidate with the lowest
``object_function`` score.  An item that fits in no open bin opens a new
one and starts at the bed center.
"""

from __future__ import annotations

import enum
import logging
import math
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from shapely.geometry import box as shapely_box
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from autoarrange.geometry import BoundingBox, union_all

from .models import (
    Bed, CircleBed, InfiniteBed, PackGroup, PlacementItem, shape_vertices,
)


log = logging.getLogger(__name__)


class Alignment(enum.Enum):
    CENTER = "center"
    DONT_ALIGN = "dont_align"


BeforePackingFn = Callable[
    [Sequence[BaseGeometry], Sequence[PlacementItem], Sequence[PlacementItem]], Any]
ObjectiveFn = Callable[[PlacementItem, Any], float]


@dataclass
class PlacementConfig:
    """Solver configuration.

    ``before_packing(pile, placed, remaining)`` is called before the
    solver searches positions for the next item; whatever it returns is
    passed as the second argument of every ``object_function`` call for
    that item.
    """

    alignment: Alignment = Alignment.CENTER
    starting_point: Alignment = Alignment.CENTER
    rotations: tuple[float, ...] = (0.0,)
    accuracy: float = 0.65
    parallel: bool = True
    max_workers: int | None = None
    before_packing: Optional[BeforePackingFn] = None
    object_function: Optional[ObjectiveFn] = None


# ── Overfit ────────────────────────────────────────────────────────


def box_overfit(bb: BoundingBox, bin_bb: BoundingBox) -> float:
    """How much *bb* is wider/taller than the bin (0 if it fits)."""
    diff = 0.0
    wdiff = bb.width - bin_bb.width
    hdiff = bb.height - bin_bb.height
    if wdiff > 0:
        diff += wdiff
    if hdiff > 0:
        diff += hdiff
    return diff


def circle_overfit(shape: BaseGeometry, circle: CircleBed) -> float:
    """Largest vertex distance beyond the circle radius (negative = inside)."""
    cx, cy = circle.center
    return max(math.hypot(x - cx, y - cy) for x, y in shape_vertices(shape)) - circle.radius


def overfit(shape: BaseGeometry | BoundingBox, bed: Bed | BoundingBox) -> float:
    """Signed measure of how far *shape* sticks out of *bed*."""
    if isinstance(bed, CircleBed):
        if isinstance(shape, BoundingBox):
            shape = shape.to_shapely()
        return circle_overfit(shape, bed)
    bin_bb = bed if isinstance(bed, BoundingBox) else bed.bounding_box()
    if not isinstance(shape, BoundingBox):
        shape = BoundingBox.of_geometry(shape)
    return box_overfit(shape, bin_bb)


# ── Bin state ──────────────────────────────────────────────────────


@dataclass
class _Bin:
    items: list[PlacementItem] = field(default_factory=list)
    shapes: list[BaseGeometry] = field(default_factory=list)
    tree: STRtree | None = None

    def add(self, item: PlacementItem) -> None:
        self.items.append(item)
        self.shapes.append(item.transformed_shape())
        self.tree = STRtree(self.shapes)

    @property
    def has_fixed(self) -> bool:
        return any(itm.is_fixed for itm in self.items)


def _sweep(lo: float, hi: float, n: int) -> list[float]:
    if n <= 1 or lo == hi:
        return [lo]
    return [lo + (hi - lo) * i / (n - 1) for i in range(n)]


# ── Solver ─────────────────────────────────────────────────────────


class PlacementSolver:
    """Places items onto as many bins as needed, scoring with a callback."""

    def __init__(self, bed: Bed, min_distance: int = 0) -> None:
        self.bed = bed
        self.min_distance = max(0, int(min_distance))
        self._config = PlacementConfig()
        self._progress: Callable[[int], None] | None = None
        self._stop: Callable[[], bool] | None = None

    @property
    def config(self) -> PlacementConfig:
        return self._config

    def configure(self, config: PlacementConfig) -> None:
        self._config = config

    def progress_indicator(self, fn: Callable[[int], None]) -> None:
        self._progress = fn

    def stop_condition(self, fn: Callable[[], bool]) -> None:
        self._stop = fn

    # ── Feasibility ────────────────────────────────────────────────

    def _is_feasible(self, shape: BaseGeometry, bin_: _Bin) -> bool:
        if not self.bed.contains(shape):
            return False
        if bin_.tree is None:
            return True
        md = self.min_distance
        minx, miny, maxx, maxy = shape.bounds
        probe = shapely_box(minx - md, miny - md, maxx + md, maxy + md)
        for i in bin_.tree.query(probe):
            other = bin_.shapes[int(i)]
            if shape.relate_pattern(other, "T********"):
                return False
            # 1 unit of slack for float round-off on exact contacts
            if md and shape.distance(other) < md - 1:
                return False
        return True

    # ── Candidates ─────────────────────────────────────────────────

    def _samples(self) -> int:
        return 2 + int(round(self._config.accuracy * 8))

    def _start_corner(self, w: float, h: float) -> tuple[float, float]:
        if self._config.starting_point is Alignment.CENTER:
            cx, cy = self.bed.center
            return (cx - w / 2, cy - h / 2)
        bb = self.bed.bounding_box()
        return (bb.minx, bb.miny)

    def _contact_corners(
        self, anchors: Iterable[BoundingBox], w: float, h: float,
    ) -> list[tuple[float, float]]:
        """Min corners that put a w×h box against each side of each anchor."""
        g = self.min_distance
        n = self._samples()
        corners: list[tuple[float, float]] = []
        for a in anchors:
            ys = _sweep(a.miny, a.maxy - h, n)
            xs = _sweep(a.minx, a.maxx - w, n)
            corners.extend((a.maxx + g, y) for y in ys)
            corners.extend((a.minx - g - w, y) for y in ys)
            corners.extend((x, a.maxy + g) for x in xs)
            corners.extend((x, a.miny - g - h) for x in xs)
        return corners

    def _grid_corners(self, w: float, h: float) -> list[tuple[float, float]]:
        if isinstance(self.bed, InfiniteBed):
            return []
        bb = self.bed.bounding_box()
        n = 4 + int(round(self._config.accuracy * 16))
        return [(x, y)
                for y in _sweep(bb.miny, bb.maxy - h, n)
                for x in _sweep(bb.minx, bb.maxx - w, n)]

    def _translations(
        self, template: PlacementItem, corners: Iterable[tuple[float, float]],
    ) -> list[tuple[int, int]]:
        tbb = template.bounding_box()
        out = (
            (int(round(x - tbb.minx)), int(round(y - tbb.miny)))
            for x, y in corners
        )
        return list(dict.fromkeys(out))

    # ── Search ─────────────────────────────────────────────────────

    def _search(
        self,
        item: PlacementItem,
        bin_: _Bin,
        ctx: Any,
        pool: Executor | None,
    ) -> PlacementItem | None:
        objfn = self._config.object_function
        anchors = [itm.bounding_box() for itm in bin_.items]
        pile_bb = union_all(anchors)

        def evaluate(cand: PlacementItem) -> float | None:
            if not self._is_feasible(cand.transformed_shape(), bin_):
                return None
            return objfn(cand, ctx) if objfn is not None else 0.0

        def best_of(cands: list[PlacementItem]) -> PlacementItem | None:
            if pool is not None and len(cands) > 1:
                scores = list(pool.map(evaluate, cands))
            else:
                scores = [evaluate(c) for c in cands]
            best, best_score = None, math.inf
            for cand, score in zip(cands, scores):
                if score is not None and score < best_score:
                    best, best_score = cand, score
            return best

        primary: list[PlacementItem] = []
        fallback: list[PlacementItem] = []
        for rotation in self._config.rotations:
            template = item.moved((0, 0), rotation)
            tbb = template.bounding_box()
            w, h = tbb.width, tbb.height
            if pile_bb is None:
                corners = [self._start_corner(w, h)]
            else:
                corners = self._contact_corners(anchors + [pile_bb], w, h)
            primary.extend(template.moved(t) for t in self._translations(template, corners))
            fallback.extend(template.moved(t)
                            for t in self._translations(template, self._grid_corners(w, h)))

        return best_of(primary) or best_of(fallback)

    # ── Main loop ──────────────────────────────────────────────────

    def execute(self, items: Sequence[PlacementItem]) -> PackGroup:
        """Place *items*; fixed ones stay where they are, in bin 0."""
        cfg = self._config
        bins: list[_Bin] = []

        fixed = [itm for itm in items if itm.is_fixed]
        if fixed:
            bins.append(_Bin())
            for itm in fixed:
                itm.bin_id = 0
                bins[0].add(itm)

        movable = sorted((itm for itm in items if not itm.is_fixed),
                         key=lambda itm: -itm.area)

        pool = (ThreadPoolExecutor(max_workers=cfg.max_workers)
                if cfg.parallel else None)
        try:
            for pos, item in enumerate(movable):
                if self._stop is not None and self._stop():
                    log.info("Stop requested; %d item(s) left unplaced",
                             len(movable) - pos)
                    break
                remaining = movable[pos + 1:]
                placed = self._place(item, bins, remaining, pool)
                if placed and self._progress is not None:
                    self._progress(len(remaining))
        finally:
            if pool is not None:
                pool.shutdown(wait=True)

        if cfg.alignment is Alignment.CENTER:
            for bin_ in bins:
                if not bin_.has_fixed:
                    self._center_bin(bin_)

        return [bin_.items for bin_ in bins]

    def _place(
        self,
        item: PlacementItem,
        bins: list[_Bin],
        remaining: Sequence[PlacementItem],
        pool: Executor | None,
    ) -> bool:
        before = self._config.before_packing
        candidates = bins + [_Bin()]
        for idx, bin_ in enumerate(candidates):
            ctx = (before(tuple(bin_.shapes), list(bin_.items), list(remaining))
                   if before is not None else None)
            best = self._search(item, bin_, ctx, pool)
            if best is None:
                continue
            item.translation = best.translation
            item.rotation = best.rotation
            item.bin_id = idx
            if idx == len(bins):
                bins.append(bin_)
            bin_.add(item)
            log.debug("Placed item (area %.0f) in bin %d at %s",
                      item.area, idx, item.translation)
            return True
        log.warning("Item (area %.0f) does not fit on an empty bed; skipped", item.area)
        return False

    def _center_bin(self, bin_: _Bin) -> None:
        pile_bb = union_all(itm.bounding_box() for itm in bin_.items)
        if pile_bb is None:
            return
        bx, by = self.bed.center
        px, py = pile_bb.center
        dx, dy = int(round(bx - px)), int(round(by - py))
        if not dx and not dy:
            return
        moved = [itm.moved((itm.translation[0] + dx, itm.translation[1] + dy))
                 for itm in bin_.items]
        if all(self.bed.contains(m.transformed_shape()) for m in moved):
            for itm in bin_.items:
                itm.translate(dx, dy)
            bin_.shapes = [itm.transformed_shape() for itm in bin_.items]
            bin_.tree = STRtree(bin_.shapes)
