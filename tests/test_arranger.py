"""Tests for AutoArranger and the placement solver it drives."""

from __future__ import annotations

import itertools
import unittest

from autoarrange.arranger import AutoArranger, PackingSnapshot
from autoarrange.arranger.solver import Alignment
from autoarrange.config import ArrangeRules
from autoarrange.geometry import scaled
from tests.shapes_fixture import box_bed, make_item, rect, square

SERIAL = ArrangeRules(parallel=False)


def mixed_items():
    sizes = [(30, 20), (25, 25), (10, 40), (15, 15), (8, 8), (5, 12)]
    return [make_item(rect(w, h)) for w, h in sizes]


def overlap_area(a, b) -> float:
    return a.transformed_shape().intersection(b.transformed_shape()).area


class TestPreload(unittest.TestCase):

    def test_no_collision_without_fixed_items(self):
        arranger = AutoArranger(box_bed(), rules=SERIAL)
        self.assertFalse(arranger.is_colliding(make_item(square(10))))

    def test_collision_queries(self):
        arranger = AutoArranger(box_bed(), rules=SERIAL)
        arranger.preload([make_item(square(10))])
        self.assertTrue(arranger.is_colliding(make_item(square(10), offset=(5, 5))))
        self.assertFalse(arranger.is_colliding(make_item(square(10), offset=(50, 50))))
        # touching boxes count as colliding
        self.assertTrue(arranger.is_colliding(make_item(square(10), offset=(10, 0))))

    def test_preload_switches_to_fixed_mode(self):
        arranger = AutoArranger(box_bed(), rules=SERIAL)
        default_fn = arranger.config.object_function
        fixed = make_item(square(10))
        arranger.preload([fixed])
        self.assertTrue(fixed.is_fixed)
        self.assertIs(arranger.config.alignment, Alignment.DONT_ALIGN)
        self.assertIsNot(arranger.config.object_function, default_fn)
        self.assertEqual(len(arranger.snapshot.all_index), 1)

    def test_begin_next_item_rebuilds_snapshot(self):
        arranger = AutoArranger(box_bed(), rules=SERIAL)
        placed = make_item(square(30))
        rest = make_item(square(5))
        snap = arranger.begin_next_item([placed.transformed_shape()], [placed], [rest])
        self.assertIsInstance(snap, PackingSnapshot)
        self.assertIs(arranger.snapshot, snap)
        self.assertEqual(snap.items, (placed,))
        self.assertEqual(snap.remaining, (rest,))
        self.assertEqual(len(snap.big_index), 1)


class TestSolver(unittest.TestCase):

    def test_items_do_not_overlap_and_stay_on_bed(self):
        bed = box_bed()
        items = mixed_items()
        groups = AutoArranger(bed, rules=SERIAL)(items)
        self.assertEqual(len(groups), 1)
        self.assertEqual(len(groups[0]), len(items))
        for itm in items:
            self.assertTrue(bed.contains(itm.transformed_shape()))
            self.assertEqual(itm.bin_id, 0)
        for a, b in itertools.combinations(items, 2):
            self.assertLess(overlap_area(a, b), 1.0)

    def test_min_distance_is_kept(self):
        items = [make_item(square(10)) for _ in range(4)]
        AutoArranger(box_bed(), scaled(2), rules=SERIAL)(items)
        for a, b in itertools.combinations(items, 2):
            gap = a.transformed_shape().distance(b.transformed_shape())
            self.assertGreaterEqual(gap, scaled(2) - 1)

    def test_overflow_opens_new_bins(self):
        items = [make_item(square(20)) for _ in range(3)]
        groups = AutoArranger(box_bed(25, 25), rules=SERIAL)(items)
        self.assertEqual([len(g) for g in groups], [1, 1, 1])
        self.assertEqual(sorted(itm.bin_id for itm in items), [0, 1, 2])

    def test_pile_is_centered(self):
        item = make_item(square(10))
        AutoArranger(box_bed(), rules=SERIAL)([item])
        self.assertEqual(item.bounding_box().center, (scaled(50), scaled(50)))

    def test_progress_reports_remaining(self):
        calls = []
        items = [make_item(square(10)) for _ in range(3)]
        AutoArranger(box_bed(), progress=calls.append, rules=SERIAL)(items)
        self.assertEqual(calls, [2, 1, 0])

    def test_stop_ends_run(self):
        calls = []
        items = [make_item(square(10)) for _ in range(3)]
        arranger = AutoArranger(box_bed(), progress=calls.append,
                                stop=lambda: len(calls) >= 1, rules=SERIAL)
        groups = arranger(items)
        self.assertEqual(sum(len(g) for g in groups), 1)
        self.assertEqual(calls, [2])

    def test_too_big_item_is_skipped(self):
        calls = []
        huge = make_item(square(200))
        small = make_item(square(10))
        groups = AutoArranger(box_bed(), progress=calls.append, rules=SERIAL)([huge, small])
        placed = [itm for g in groups for itm in g]
        self.assertEqual(placed, [small])
        self.assertEqual(huge.bin_id, -1)
        self.assertEqual(calls, [0])

    def test_fixed_item_stays_put(self):
        arranger = AutoArranger(box_bed(), rules=SERIAL)
        fixed = make_item(square(10), offset=(20, 20))
        arranger.preload([fixed])
        movable = make_item(square(10))
        groups = arranger([movable, fixed])
        self.assertEqual(fixed.translation, (scaled(20), scaled(20)))
        self.assertEqual(fixed.bin_id, 0)
        self.assertEqual(movable.bin_id, 0)
        self.assertIn(fixed, groups[0])
        self.assertLess(overlap_area(fixed, movable), 1.0)

    def test_parallel_matches_serial(self):
        serial = mixed_items()
        parallel = mixed_items()
        AutoArranger(box_bed(), rules=SERIAL)(serial)
        AutoArranger(box_bed(), rules=ArrangeRules(parallel=True, max_workers=4))(parallel)
        self.assertEqual([itm.translation for itm in serial],
                         [itm.translation for itm in parallel])

    def test_rotations_are_tried(self):
        # a 90 x 10 strip only fits a 20 x 95 bed when turned upright
        strip = make_item(rect(90, 10))
        rules = ArrangeRules(parallel=False, rotations=(0.0, 1.5707963267948966))
        bed = box_bed(20, 95)
        groups = AutoArranger(bed, rules=rules)([strip])
        self.assertEqual(groups, [[strip]])
        self.assertTrue(bed.contains(strip.transformed_shape()))
        self.assertNotEqual(strip.rotation, 0.0)


if __name__ == "__main__":
    unittest.main()
