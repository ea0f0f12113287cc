"""Objective function scoring candidate placements.

This runs for every candidate position the solver explores, so it only
reads the packing snapshot and never allocates more than it must.
Lower scores are better.

Three cases:

  BIG_ITEM       big item (or no big item placed yet) with more to come:
                 stay close to the pile center, keep the pile dense, and
                 line up with a same-sized neighbour if one touches.
  LAST_BIG_ITEM  the final big item: minimise the pile's perimeter.
  SMALL_ITEM     small item next to existing big ones: hug the big items.
"""

from __future__ import annotations

import enum
import math

from autoarrange.geometry import BoundingBox, convex_hull, distance, perimeter

from .models import (
    AREA_MATCH_TOLERANCE, Score, PlacementItem,
    W_PILE_DISTANCE, W_BED_DISTANCE,
    W_LONE_DISTANCE, W_LONE_DENSITY,
    W_NEIGHBOR_DISTANCE, W_NEIGHBOR_DENSITY, W_ALIGNMENT,
    W_HULL_PERIMETER, W_BOX_PERIMETER,
)
from .spatial import PackingSnapshot


class ScoreCase(enum.Enum):
    BIG_ITEM = "big"
    LAST_BIG_ITEM = "last_big"
    SMALL_ITEM = "small"


def classify(item: PlacementItem, snap: PackingSnapshot) -> ScoreCase:
    """Pick the scoring branch for *item* in the current scene."""
    bigitems = snap.is_big(item.area) or snap.big_index.empty
    if bigitems and snap.remaining:
        return ScoreCase.BIG_ITEM
    if bigitems:
        return ScoreCase.LAST_BIG_ITEM
    return ScoreCase.SMALL_ITEM


def alignment_score(
    item: PlacementItem, ibb: BoundingBox, snap: PackingSnapshot,
) -> tuple[float, bool]:
    """Best alignment with a same-sized neighbour touching *ibb*.

    Returns (score, has_neighbours).  The score is
    1 - (a1 + a2) / area(bb1 ∪ bb2), so two equal rectangles sitting flush
    score 0.  With no same-sized neighbour the score stays 1.
    """
    index = snap.big_index if snap.is_big(item.area) else snap.all_index
    hits = index.query(ibb)

    best = 1.0
    for idx in hits:
        other = snap.items[idx]
        if abs(1.0 - other.area / item.area) < AREA_MATCH_TOLERANCE:
            bb = other.bounding_box().union(ibb)
            score = 1.0 - (item.area + other.area) / bb.area
            if score < best:
                best = score
    return best, bool(hits)


def big_item_score(
    item: PlacementItem,
    ibb: BoundingBox,
    fullbb: BoundingBox,
    snap: PackingSnapshot,
    bed_center: tuple[float, float],
) -> float:
    norm = snap.norm
    cc = fullbb.center
    anchors = (ibb.min_corner, ibb.max_corner, ibb.center,
               ibb.top_left, ibb.bottom_right)
    pile_dist = min(distance(a, cc) for a in anchors) / norm
    bed_dist = distance(ibb.center, bed_center) / norm
    dist = W_PILE_DISTANCE * pile_dist + W_BED_DISTANCE * bed_dist

    density = math.sqrt((fullbb.width / norm) * (fullbb.height / norm))

    align, has_neighbours = alignment_score(item, ibb, snap)
    if not has_neighbours:
        return W_LONE_DISTANCE * dist + W_LONE_DENSITY * density
    return (W_NEIGHBOR_DISTANCE * dist + W_NEIGHBOR_DENSITY * density
            + W_ALIGNMENT * align)


def last_big_item_score(
    item: PlacementItem, fullbb: BoundingBox, snap: PackingSnapshot,
) -> float:
    norm = snap.norm
    hull = convex_hull(snap.merged_pile + (item.transformed_shape(),))
    circ = perimeter(hull) / norm
    bcirc = 2.0 * (fullbb.width + fullbb.height) / norm
    return W_HULL_PERIMETER * circ + W_BOX_PERIMETER * bcirc


def small_item_score(
    ibb: BoundingBox, fullbb: BoundingBox, snap: PackingSnapshot,
) -> float:
    bigbb = snap.big_index.bounds or fullbb
    return distance(ibb.center, bigbb.center) / snap.norm


def objective(
    item: PlacementItem,
    bed_center: tuple[float, float],
    snap: PackingSnapshot,
) -> Score:
    """Score a positioned candidate against the current snapshot."""
    ibb = item.bounding_box()
    fullbb = ibb.union(snap.pile_bb)

    case = classify(item, snap)
    if case is ScoreCase.BIG_ITEM:
        score = big_item_score(item, ibb, fullbb, snap, bed_center)
    elif case is ScoreCase.LAST_BIG_ITEM:
        score = last_big_item_score(item, fullbb, snap)
    else:
        score = small_item_score(ibb, fullbb, snap)

    return Score(score, fullbb)
