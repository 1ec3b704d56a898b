"""Tests for runstat.bench.samples: write-once run sample storage."""

from __future__ import annotations

import unittest

from bench_test_helpers import make_sample

from runstat.bench.samples import SampleStore


class TestSampleStore(unittest.TestCase):
    """Tests for SampleStore."""

    def setUp(self) -> None:
        self.store = SampleStore(num_commands=2, num_runs=3)

    def test_empty_store(self) -> None:
        self.assertEqual(len(self.store), 0)
        self.assertEqual(self.store.pending(0), [0, 1, 2])
        self.assertFalse(self.store.is_complete(1))

    def test_set_and_get(self) -> None:
        sample = make_sample(0.5)
        self.store.set(1, 2, sample)
        self.assertIs(self.store.get(1, 2), sample)
        self.assertIn((1, 2), self.store)
        self.assertEqual(len(self.store), 1)

    def test_slot_is_write_once(self) -> None:
        self.store.set(0, 0, make_sample(0.5))
        with self.assertRaises(ValueError):
            self.store.set(0, 0, make_sample(0.7))
        self.assertEqual(self.store.get(0, 0).elapsed, 0.5)

    def test_get_missing_slot(self) -> None:
        with self.assertRaises(KeyError):
            self.store.get(0, 1)

    def test_out_of_range_indices(self) -> None:
        with self.assertRaises(IndexError):
            self.store.set(2, 0, make_sample(0.1))
        with self.assertRaises(IndexError):
            self.store.set(0, 3, make_sample(0.1))
        with self.assertRaises(IndexError):
            self.store.get(-1, 0)

    def test_pending_shrinks(self) -> None:
        self.store.set(0, 1, make_sample(0.1))
        self.assertEqual(self.store.pending(0), [0, 2])
        self.assertEqual(self.store.pending(1), [0, 1, 2])

    def test_get_all_requires_complete_command(self) -> None:
        self.store.set(0, 0, make_sample(0.1))
        self.store.set(0, 1, make_sample(0.2))
        with self.assertRaises(ValueError):
            self.store.get_all(0, "real")

    def test_get_all_in_run_order(self) -> None:
        # Filled out of order, read back by run index.
        for run, wt in ((2, 0.3), (0, 0.1), (1, 0.2)):
            self.store.set(0, run, make_sample(wt))
        self.assertTrue(self.store.is_complete(0))
        self.assertEqual(self.store.get_all(0, "real"), [0.1, 0.2, 0.3])
        self.assertEqual(self.store.get_all(0, "maxrss"), [2048.0, 2048.0, 2048.0])

    def test_commands_are_independent(self) -> None:
        for run in range(3):
            self.store.set(1, run, make_sample(1.0 + run))
        self.assertTrue(self.store.is_complete(1))
        self.assertFalse(self.store.is_complete(0))
        self.assertEqual(self.store.get_all(1, "real"), [1.0, 2.0, 3.0])

    def test_invalid_dimensions(self) -> None:
        with self.assertRaises(ValueError):
            SampleStore(0, 5)
        with self.assertRaises(ValueError):
            SampleStore(1, 0)


if __name__ == "__main__":
    unittest.main()
