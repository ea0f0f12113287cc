"""Tests for the candidate objective function.

Distances are normalised by sqrt(bed area); every case below uses a
100 × 100 mm bed so a normalised distance of 0.1 is 10 mm.
"""

from __future__ import annotations

import math
import unittest
from concurrent.futures import ThreadPoolExecutor

from autoarrange.arranger.objective import (
    ScoreCase, alignment_score, classify, objective,
)
from autoarrange.arranger.spatial import empty_snapshot, take_snapshot
from autoarrange.geometry import scaled
from tests.shapes_fixture import make_item, mm_box, square

BED_AREA = float(scaled(100)) ** 2
BED_CENTER = (scaled(50), scaled(50))


def snapshot(placed=(), remaining=()):
    return take_snapshot(
        [itm.transformed_shape() for itm in placed],
        list(placed), list(remaining), BED_AREA, 0.02)


class TestClassify(unittest.TestCase):

    def test_first_item_with_more_to_come_is_big(self):
        item = make_item(square(5))
        snap = snapshot(remaining=[make_item(square(5))])
        self.assertEqual(classify(item, snap), ScoreCase.BIG_ITEM)

    def test_nothing_remaining_is_last_big(self):
        item = make_item(square(30))
        self.assertEqual(classify(item, snapshot()), ScoreCase.LAST_BIG_ITEM)

    def test_small_item_next_to_big_pile(self):
        big = make_item(square(30))
        item = make_item(square(5), offset=(30, 0))
        snap = snapshot(placed=[big], remaining=[make_item(square(5))])
        self.assertEqual(classify(item, snap), ScoreCase.SMALL_ITEM)

    def test_threshold_area_is_not_big(self):
        big = make_item(square(30))
        exact = make_item([(0, 0), (20, 0), (20, 10), (0, 10)])
        snap = snapshot(placed=[big], remaining=[make_item(square(5))])
        self.assertEqual(classify(exact, snap), ScoreCase.SMALL_ITEM)
        above = make_item([(0, 0), (20.001, 0), (20.001, 10), (0, 10)])
        self.assertEqual(classify(above, snap), ScoreCase.BIG_ITEM)


class TestObjectiveValues(unittest.TestCase):

    def test_big_item_alone_at_center(self):
        item = make_item(square(10), offset=(45, 45))
        snap = snapshot(remaining=[make_item(square(10))])
        score, fullbb = objective(item, BED_CENTER, snap)
        # distances are zero; density = sqrt(0.1 * 0.1)
        self.assertAlmostEqual(score, 0.05)
        self.assertEqual(fullbb, mm_box(45, 45, 55, 55))

    def test_last_big_item_perimeter(self):
        item = make_item(square(10), offset=(45, 45))
        score, _ = objective(item, BED_CENTER, snapshot())
        # hull and box perimeter both 40 mm
        self.assertAlmostEqual(score, 0.4)

    def test_small_item_distance_to_big_items(self):
        big = make_item(square(30))
        item = make_item(square(5), offset=(30, 0))
        snap = snapshot(placed=[big], remaining=[make_item(square(1))])
        score, fullbb = objective(item, BED_CENTER, snap)
        self.assertAlmostEqual(score, math.sqrt(17.5 ** 2 + 12.5 ** 2) / 100)
        self.assertEqual(fullbb, mm_box(0, 0, 35, 30))

    def test_closer_candidate_scores_lower(self):
        big = make_item(square(30))
        snap = snapshot(placed=[big], remaining=[make_item(square(1))])
        near = make_item(square(5), offset=(30, 10))
        far = make_item(square(5), offset=(60, 60))
        self.assertLess(objective(near, BED_CENTER, snap).score,
                        objective(far, BED_CENTER, snap).score)

    def test_fullbb_includes_pile(self):
        placed = make_item(square(10))
        item = make_item(square(10), offset=(20, 30))
        snap = snapshot(placed=[placed], remaining=[make_item(square(10))])
        _, fullbb = objective(item, BED_CENTER, snap)
        self.assertEqual(fullbb, mm_box(0, 0, 30, 40))


class TestAlignment(unittest.TestCase):

    def test_flush_equal_squares_score_zero(self):
        placed = make_item(square(10))
        item = make_item(square(10), offset=(10, 0))
        snap = snapshot(placed=[placed])
        score, has_neighbours = alignment_score(item, item.bounding_box(), snap)
        self.assertEqual(score, 0.0)
        self.assertTrue(has_neighbours)

    def test_offset_equal_squares_score_above_zero(self):
        placed = make_item(square(10))
        item = make_item(square(10), offset=(10, 5))
        snap = snapshot(placed=[placed])
        score, has_neighbours = alignment_score(item, item.bounding_box(), snap)
        # union box 20 x 15
        self.assertAlmostEqual(score, 1.0 - 200.0 / 300.0)
        self.assertTrue(has_neighbours)

    def test_different_sizes_do_not_align(self):
        placed = make_item(square(10))
        item = make_item(square(8), offset=(10, 0))
        snap = snapshot(placed=[placed])
        score, has_neighbours = alignment_score(item, item.bounding_box(), snap)
        self.assertEqual(score, 1.0)
        self.assertTrue(has_neighbours)

    def test_no_neighbours(self):
        placed = make_item(square(10))
        item = make_item(square(10), offset=(50, 50))
        snap = snapshot(placed=[placed])
        self.assertEqual(alignment_score(item, item.bounding_box(), snap), (1.0, False))

    def test_aligned_candidate_beats_misaligned(self):
        placed = make_item(square(10), offset=(45, 45))
        snap = snapshot(placed=[placed], remaining=[make_item(square(10))])
        flush = make_item(square(10), offset=(55, 45))
        shifted = make_item(square(10), offset=(55, 50))
        self.assertLess(objective(flush, BED_CENTER, snap).score,
                        objective(shifted, BED_CENTER, snap).score)


class TestDeterminism(unittest.TestCase):

    def test_threaded_scores_match_serial(self):
        placed = [make_item(square(10), offset=(40, 40)),
                  make_item(square(10), offset=(50, 40)),
                  make_item(square(4), offset=(40, 50))]
        snap = snapshot(placed=placed, remaining=[make_item(square(3))])
        cands = [make_item(square(6), offset=(x, y))
                 for x in range(20, 70, 7) for y in range(20, 70, 9)]
        serial = [objective(c, BED_CENTER, snap) for c in cands]
        with ThreadPoolExecutor(max_workers=4) as pool:
            threaded = list(pool.map(lambda c: objective(c, BED_CENTER, snap), cands))
        self.assertEqual(serial, threaded)

    def test_snapshot_is_not_mutated_by_scoring(self):
        placed = make_item(square(10))
        snap = snapshot(placed=[placed], remaining=[make_item(square(10))])
        before = (snap.pile_bb, len(snap.all_index), len(snap.big_index))
        objective(make_item(square(10), offset=(10, 0)), BED_CENTER, snap)
        self.assertEqual((snap.pile_bb, len(snap.all_index), len(snap.big_index)), before)

    def test_empty_snapshot_scores(self):
        snap = empty_snapshot(BED_AREA, 0.02)
        score, _ = objective(make_item(square(10), offset=(45, 45)), BED_CENTER, snap)
        self.assertAlmostEqual(score, 0.4)


if __name__ == "__main__":
    unittest.main()
