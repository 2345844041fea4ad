"""
Tests for per-region win tallies
"""

import unittest

import numpy as np

from ensemble import WinnerTable, best_predictor


class TestBestPredictor(unittest.TestCase):

    def test_smallest_absolute_error(self):
        self.assertEqual(best_predictor(np.array([3.0, 1.2, -1.0]), 1.0), 1)
        self.assertEqual(best_predictor(np.array([3.0, 1.2, 0.95]), 1.0), 2)

    def test_tie_goes_to_first(self):
        self.assertEqual(best_predictor(np.array([2.0, 0.0, 2.0]), 1.0), 0)
        self.assertEqual(best_predictor(np.array([5.0, 0.0, 2.0]), 1.0), 1)


class TestWinnerTable(unittest.TestCase):

    def setUp(self):
        self.table = WinnerTable(n_regions=4, n_predictors=3)

    def test_majority_winner(self):
        self.table.record(1, np.array([0.0, 1.0, 5.0]), 1.0)
        self.table.record(1, np.array([0.0, 1.0, 5.0]), 1.1)
        self.table.record(1, np.array([0.0, 1.0, 5.0]), 4.9)
        winners = self.table.finalize()
        self.assertEqual(winners[1], 1)

    def test_count_tie_goes_to_lowest_index(self):
        self.table.record(2, np.array([0.0, 1.0, 5.0]), 5.0)
        self.table.record(2, np.array([0.0, 1.0, 5.0]), 1.0)
        self.table.finalize()
        self.assertEqual(self.table.winner(2), 1)

    def test_unseen_regions_default_to_zero(self):
        self.table.record(3, np.array([0.0, 1.0, 5.0]), 5.0)
        self.table.finalize()
        self.assertEqual(self.table.winner(0), 0)
        self.assertEqual(self.table.winner(3), 2)
        self.assertEqual(self.table.unseen_regions(), [0, 1, 2])
        self.assertAlmostEqual(self.table.coverage(), 0.25)
        self.assertEqual(self.table.winner_distribution(), {0: 3, 1: 0, 2: 1})

    def test_merge_sums_partial_tables(self):
        other = WinnerTable(4, 3)
        self.table.record(0, np.array([0.0, 1.0, 5.0]), 0.0)
        other.record(0, np.array([0.0, 1.0, 5.0]), 5.0)
        other.record(0, np.array([0.0, 1.0, 5.0]), 5.0)
        self.table.merge(other).finalize()
        self.assertEqual(self.table.observed_counts()[0], 3)
        self.assertEqual(self.table.winner(0), 2)

    def test_merge_shape_mismatch(self):
        with self.assertRaises(ValueError):
            self.table.merge(WinnerTable(2, 3))

    def test_finalized_table_is_frozen(self):
        self.table.finalize()
        with self.assertRaises(RuntimeError):
            self.table.record(0, np.array([0.0, 1.0, 5.0]), 0.0)

    def test_winner_before_finalize(self):
        with self.assertRaises(RuntimeError):
            self.table.winner(0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
