"""AutoArranger — binds the placement solver to the objective function.

The arranger owns the per-item packing snapshot.  The solver calls
``begin_next_item`` between items (never while candidates for the
previous item are still being scored); the snapshot it returns is what
every objective evaluation for the next item reads.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from shapely.geometry.base import BaseGeometry

from autoarrange.config import RULES, ArrangeRules

from .adapters import compute_adapter, fixed_overfit_adapter
from .models import Bed, PackGroup, PlacementItem
from .solver import Alignment, PlacementConfig, PlacementSolver
from .spatial import PackingSnapshot, SpatialIndex, empty_snapshot, take_snapshot


log = logging.getLogger(__name__)


class AutoArranger:
    """Arranges items on one bed kind, optionally around fixed obstacles."""

    def __init__(
        self,
        bed: Bed,
        min_distance: int = 0,
        progress: Callable[[int], None] | None = None,
        stop: Callable[[], bool] | None = None,
        rules: ArrangeRules = RULES,
    ) -> None:
        self.bed = bed
        self.rules = rules
        self.bed_area = bed.area
        self.snapshot: PackingSnapshot = empty_snapshot(self.bed_area, rules.big_item_threshold)

        self._solver = PlacementSolver(bed, min_distance)
        self._config = PlacementConfig(
            alignment=Alignment.CENTER,
            starting_point=Alignment.CENTER,
            rotations=tuple(rules.rotations),
            accuracy=rules.accuracy,
            parallel=rules.parallel,
            max_workers=rules.max_workers,
            before_packing=self.begin_next_item,
            object_function=compute_adapter(bed),
        )
        if progress is not None:
            self._solver.progress_indicator(progress)
        if stop is not None:
            self._solver.stop_condition(stop)
        self._solver.configure(self._config)

    @property
    def config(self) -> PlacementConfig:
        return self._config

    def begin_next_item(
        self,
        merged_pile: Sequence[BaseGeometry],
        items: Sequence[PlacementItem],
        remaining: Sequence[PlacementItem],
    ) -> PackingSnapshot:
        """Rebuild the spatial indexes from the solver's current pile."""
        self.snapshot = take_snapshot(
            merged_pile, items, remaining,
            self.bed_area, self.rules.big_item_threshold,
        )
        return self.snapshot

    def preload(self, fixed_items: Sequence[PlacementItem]) -> None:
        """Seed the arrangement with fixed obstacles.

        The pile is no longer centered after packing, and the objective
        switches to the fixed-overfit penalty against the bed box.
        """
        self._config.alignment = Alignment.DONT_ALIGN
        self._config.object_function = fixed_overfit_adapter(self.bed)

        entries = []
        for idx, itm in enumerate(fixed_items):
            itm.mark_as_fixed()
            entries.append((itm.bounding_box(), idx))
        index = SpatialIndex(entries)
        self.snapshot = PackingSnapshot(
            items=tuple(fixed_items),
            remaining=(),
            merged_pile=tuple(itm.transformed_shape() for itm in fixed_items),
            pile_bb=index.bounds,
            big_index=self.snapshot.big_index,
            all_index=index,
            bed_area=self.bed_area,
            big_threshold=self.rules.big_item_threshold,
        )
        self._solver.configure(self._config)
        log.debug("Preloaded %d fixed item(s)", len(fixed_items))

    def is_colliding(self, item: PlacementItem) -> bool:
        """True if *item*'s box touches the box of any preloaded item."""
        index = self.snapshot.all_index
        if index.empty:
            return False
        return bool(index.query(item.bounding_box()))

    def __call__(self, items: Sequence[PlacementItem]) -> PackGroup:
        return self._solver.execute(items)
