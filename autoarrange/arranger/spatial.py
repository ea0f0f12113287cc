"""Spatial indexes over placed items and the per-item packing snapshot.

The solver places one item at a time.  Before it starts on an item it
hands the current pile to ``take_snapshot``, which builds fresh, read-only
indexes.  Every objective evaluation for that item reads the same
snapshot, possibly from several worker threads at once; nothing here is
mutated after construction.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from autoarrange.geometry import BoundingBox, union_all

from .models import PlacementItem


class SpatialIndex:
    """Immutable R-tree of (bounding box, item index) entries."""

    def __init__(self, entries: Sequence[tuple[BoundingBox, int]] = ()) -> None:
        self._boxes = [bb for bb, _ in entries]
        self._ids = [idx for _, idx in entries]
        self._tree = STRtree([bb.to_shapely() for bb in self._boxes]) if entries else None
        self._bounds = union_all(self._boxes)

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def empty(self) -> bool:
        return not self._ids

    @property
    def bounds(self) -> BoundingBox | None:
        """Aggregate box of all entries (None when empty)."""
        return self._bounds

    def query(self, bb: BoundingBox) -> list[int]:
        """Indices of entries whose box intersects *bb* (touching counts)."""
        if self._tree is None:
            return []
        hits = self._tree.query(bb.to_shapely(), predicate="intersects")
        return sorted(self._ids[int(i)] for i in hits)


@dataclass(frozen=True)
class PackingSnapshot:
    """Everything the objective function may read while one item is placed."""

    items: tuple[PlacementItem, ...]        # already placed, index-aligned
    remaining: tuple[PlacementItem, ...]    # still to be placed after this one
    merged_pile: tuple[BaseGeometry, ...]
    pile_bb: BoundingBox | None
    big_index: SpatialIndex
    all_index: SpatialIndex
    bed_area: float
    big_threshold: float

    @property
    def norm(self) -> float:
        """Distance normaliser: sqrt(bed area)."""
        return math.sqrt(self.bed_area)

    def is_big(self, area: float) -> bool:
        return area / self.bed_area > self.big_threshold


def take_snapshot(
    merged_pile: Sequence[BaseGeometry],
    items: Sequence[PlacementItem],
    remaining: Sequence[PlacementItem],
    bed_area: float,
    big_threshold: float,
) -> PackingSnapshot:
    """Rebuild both indexes from the solver's current pile."""
    big_entries: list[tuple[BoundingBox, int]] = []
    all_entries: list[tuple[BoundingBox, int]] = []
    for idx, itm in enumerate(items):
        bb = itm.bounding_box()
        if itm.area / bed_area > big_threshold:
            big_entries.append((bb, idx))
        all_entries.append((bb, idx))

    pile = tuple(g for g in merged_pile if not g.is_empty)
    pile_bb = union_all(BoundingBox.of_geometry(g) for g in pile)

    return PackingSnapshot(
        items=tuple(items),
        remaining=tuple(remaining),
        merged_pile=pile,
        pile_bb=pile_bb,
        big_index=SpatialIndex(big_entries),
        all_index=SpatialIndex(all_entries),
        bed_area=bed_area,
        big_threshold=big_threshold,
    )


def empty_snapshot(bed_area: float, big_threshold: float) -> PackingSnapshot:
    return take_snapshot((), (), (), bed_area, big_threshold)
