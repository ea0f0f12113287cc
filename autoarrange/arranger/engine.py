"""Arrangement entry point — turns arrangeables into placement jobs."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from autoarrange.config import RULES, ArrangeRules
from autoarrange.geometry import scale_points, scaled, unscaled

from .arranger import AutoArranger
from .models import (
    Arrangeable, Bed, BedShapeHint, BedShapeType,
    BoxBed, InfiniteBed, IrregularBed, PlacementItem,
)


log = logging.getLogger(__name__)


def stride_padding(width: int) -> int:
    """Distance between the origins of successive logical beds (20% gap)."""
    return width + width // 5


def bed_from_hint(hint: BedShapeHint | None) -> tuple[Bed, int]:
    """Return the bed for *hint* and its width (scaled) for bed striding.

    No hint means an unbounded bed centered on the origin.
    """
    if hint is None:
        return InfiniteBed(), 0
    if hint.type is BedShapeType.BOX:
        return BoxBed(hint.box), int(hint.box.width)
    if hint.type is BedShapeType.CIRCLE:
        return hint.circle, int(round(2 * hint.circle.radius))
    if hint.type is BedShapeType.IRREGULAR:
        bed = IrregularBed(tuple(hint.polygon))
        return bed, int(bed.width)
    return InfiniteBed(hint.center or (0, 0)), 0


def to_placement_item(
    arrangeable: Arrangeable,
    apply_fn: Callable[[PlacementItem, int], None] | None = None,
) -> PlacementItem:
    """Read an arrangeable's polygon, offset and rotation into an item."""
    points, offset, rotation = arrangeable.get_arrange_polygon()
    item = PlacementItem(scale_points(points), apply_fn)
    item.rotation = rotation
    item.translation = (scaled(offset[0]), scaled(offset[1]))
    return item


def _seed_center(arranger: AutoArranger, items: list[PlacementItem]) -> PlacementItem | None:
    """Move the first item that fits at the bed center there and fix it.

    The solver never puts an item exactly on the center once fixed items
    are present, so one is placed by hand.
    """
    cx, cy = arranger.bed.bounding_box().center
    for itm in items:
        ix, iy = itm.bounding_box().center
        itm.translate(int(round(cx - ix)), int(round(cy - iy)))
        if arranger.is_colliding(itm) or not arranger.bed.contains(itm.transformed_shape()):
            continue
        itm.mark_as_fixed()
        itm.call_apply_function(0)
        return itm
    return None


def arrange(
    movables: Sequence[Arrangeable],
    fixed: Iterable[Arrangeable] = (),
    min_distance: float = 0.0,
    bed_hint: BedShapeHint | None = None,
    progress: Callable[[int], None] | None = None,
    stop: Callable[[], bool] | None = None,
    *,
    rules: ArrangeRules = RULES,
) -> bool:
    """Arrange *movables* on the bed described by *bed_hint*.

    Parameters
    ----------
    movables : sequence of Arrangeable
        Items to place.  Each placed one receives exactly one
        ``apply_arrange_result`` call.
    fixed : iterable of Arrangeable
        Obstacles already on the bed.  Ones not fully on the bed are
        ignored.  They are never moved and never applied.
    min_distance : float
        Minimum clearance between items, in mm.
    bed_hint : BedShapeHint or None
        Bed shape (see ``bed_shape``).  None means an unbounded bed.
    progress : callable(int), optional
        Called with the number of items left after each placement.
    stop : callable() -> bool, optional
        Polled between items; once true the run ends early.

    Returns
    -------
    bool
        False if the stop predicate holds when the run ends.
    """
    stop_fn = stop or (lambda: False)
    bed, bed_width = bed_from_hint(bed_hint)
    stride = stride_padding(bed_width)
    log.info("Arranging %d item(s) on %s", len(movables), type(bed).__name__)

    def make_apply(arrangeable: Arrangeable) -> Callable[[PlacementItem, int], None]:
        def apply(itm: PlacementItem, bin_idx: int) -> None:
            tx, ty = itm.translation
            arrangeable.apply_arrange_result(
                (unscaled(tx + bin_idx * stride), unscaled(ty)), itm.rotation)
        return apply

    items = [to_placement_item(a, make_apply(a)) for a in movables]

    fixed_items: list[PlacementItem] = []
    for a in fixed:
        itm = to_placement_item(a)
        if bed.contains(itm.transformed_shape()):
            fixed_items.append(itm)
        else:
            log.info("Ignoring fixed item outside the bed (area %.2f mm²)",
                     itm.area * unscaled(1) ** 2)

    arranger = AutoArranger(bed, scaled(min_distance), progress, stop_fn, rules)

    if fixed_items:
        arranger.preload(fixed_items)
        seeded = _seed_center(arranger, items)
        if seeded is not None:
            items.remove(seeded)
            fixed_items.append(seeded)
            log.info("Seeded one item at the bed center")

    groups = arranger(items + fixed_items)

    placed = 0
    for bin_idx, group in enumerate(groups):
        for itm in group:
            if itm.is_fixed:
                continue
            itm.call_apply_function(bin_idx)
            placed += 1

    log.info("Arranged %d item(s) on %d bed(s)", placed, len(groups))
    if stop_fn():
        return False
    return True
