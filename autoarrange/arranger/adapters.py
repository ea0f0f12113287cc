"""Bed-specific wrappers around the objective function.

The raw score says nothing about staying on the bed, so each bed kind
adds its own penalty for candidates that stick out.
"""

from __future__ import annotations

from typing import Callable

from autoarrange.geometry import BoundingBox, convex_hull

from .models import Bed, BoxBed, CircleBed, InfiniteBed, IrregularBed, PlacementItem, Score
from .objective import objective
from .solver import overfit
from .spatial import PackingSnapshot


ObjectiveFn = Callable[[PlacementItem, PackingSnapshot], float]


def box_adapter(bin_bb: BoundingBox, bed_center: tuple[float, float]) -> ObjectiveFn:
    """Add the squared overfit of the full pile box against the bed box."""

    def fn(item: PlacementItem, snap: PackingSnapshot) -> float:
        score, fullbb = objective(item, bed_center, snap)
        miss = max(overfit(fullbb, bin_bb), 0.0)
        return score + miss * miss

    return fn


def circle_adapter(bed: CircleBed) -> ObjectiveFn:
    """Add the squared overfit of the pile's convex hull for big items."""

    def fn(item: PlacementItem, snap: PackingSnapshot) -> float:
        score, _ = objective(item, bed.center, snap)
        if snap.is_big(item.area):
            hull = convex_hull(snap.merged_pile + (item.transformed_shape(),))
            miss = max(overfit(hull, bed), 0.0)
            score += miss * miss
        return score

    return fn


def irregular_adapter(bed: IrregularBed) -> ObjectiveFn:
    """Raw score only.

    There is no overfit measure for arbitrary polygons, so nothing pulls
    the pile back onto the bed here; the solver's containment check is
    the only guard.
    """
    bed_center = bed.bounding_box().center

    def fn(item: PlacementItem, snap: PackingSnapshot) -> float:
        return objective(item, bed_center, snap).score

    return fn


def compute_adapter(bed: Bed) -> ObjectiveFn:
    """Pick the objective adapter for *bed*."""
    if isinstance(bed, CircleBed):
        return circle_adapter(bed)
    if isinstance(bed, IrregularBed):
        return irregular_adapter(bed)
    if isinstance(bed, (BoxBed, InfiniteBed)):
        return box_adapter(bed.bounding_box(), bed.center)
    raise TypeError(f"Unsupported bed type: {type(bed).__name__}")


# ── Fixed-item penalty ─────────────────────────────────────────────


def fixed_overfit(result: Score, bin_bb: BoundingBox) -> float:
    """Penalise a pile box that grows beyond the bed box.

    Used instead of the bed adapters once fixed items are preloaded and
    the pile is no longer re-centered after packing.
    """
    score, pilebb = result
    fullbb = pilebb.union(bin_bb)
    diff = fullbb.area - bin_bb.area
    if diff > 0:
        score += diff
    return score


def fixed_overfit_adapter(bed: Bed) -> ObjectiveFn:
    bin_bb = bed.bounding_box()
    center = bin_bb.center

    def fn(item: PlacementItem, snap: PackingSnapshot) -> float:
        return fixed_overfit(objective(item, center, snap), bin_bb)

    return fn
