"""Tests for runstat.bench.tables: critical-value lookup tables."""

from __future__ import annotations

import unittest

from runstat.bench.tables import MAX_T_DF, T_TABLE, Z_TABLE, t_critical, z_critical


class TestTableShape(unittest.TestCase):
    """The tables cover every confidence level and degree of freedom."""

    def test_t_table_dimensions(self) -> None:
        self.assertEqual(len(T_TABLE), 99)
        for row in T_TABLE:
            self.assertEqual(len(row), MAX_T_DF)

    def test_z_table_dimensions(self) -> None:
        self.assertEqual(len(Z_TABLE), 99)

    def test_tables_are_immutable(self) -> None:
        self.assertIsInstance(T_TABLE, tuple)
        self.assertIsInstance(T_TABLE[0], tuple)
        self.assertIsInstance(Z_TABLE, tuple)


class TestKnownValues(unittest.TestCase):
    """Spot checks against printed two-tailed tables."""

    def test_t_95_9df(self) -> None:
        self.assertAlmostEqual(t_critical(95, 9), 2.262, places=3)

    def test_t_99_1df(self) -> None:
        self.assertAlmostEqual(t_critical(99, 1), 63.657, places=3)

    def test_t_90_4df(self) -> None:
        self.assertAlmostEqual(t_critical(90, 4), 2.132, places=3)

    def test_t_95_29df(self) -> None:
        self.assertAlmostEqual(t_critical(95, 29), 2.045, places=3)

    def test_rows_match_published_tables(self) -> None:
        published = {
            95: (12.706, 4.303, 3.182, 2.776, 2.571, 2.447, 2.365, 2.306, 2.262, 2.228),
            99: (63.657, 9.925, 5.841, 4.604, 4.032, 3.707, 3.499, 3.355, 3.250, 3.169),
        }
        for level, row in published.items():
            with self.subTest(level=level):
                self.assertEqual(T_TABLE[level - 1][: len(row)], row)

    def test_z_values(self) -> None:
        self.assertAlmostEqual(z_critical(90), 1.645, places=3)
        self.assertAlmostEqual(z_critical(95), 1.960, places=3)
        self.assertAlmostEqual(z_critical(99), 2.576, places=3)

    def test_values_rounded_to_three_decimals(self) -> None:
        for value in (t_critical(95, 9), z_critical(95), t_critical(50, 3)):
            self.assertEqual(round(value, 3), value)


class TestMonotonicity(unittest.TestCase):
    """Critical values grow with confidence and shrink with degrees of freedom."""

    def test_t_decreases_with_df(self) -> None:
        for level in (50, 90, 95, 99):
            row = T_TABLE[level - 1]
            for a, b in zip(row, row[1:]):
                self.assertGreaterEqual(a, b)

    def test_t_increases_with_level(self) -> None:
        for df in (1, 5, 29):
            column = [t_critical(level, df) for level in range(1, 100)]
            for a, b in zip(column, column[1:]):
                self.assertLessEqual(a, b)

    def test_t_above_z(self) -> None:
        for level in (80, 95, 99):
            self.assertGreaterEqual(t_critical(level, 29), z_critical(level))


class TestLookupErrors(unittest.TestCase):
    """Out-of-range lookups raise ValueError."""

    def test_level_zero(self) -> None:
        with self.assertRaises(ValueError):
            z_critical(0)

    def test_level_hundred(self) -> None:
        with self.assertRaises(ValueError):
            t_critical(100, 5)

    def test_df_zero(self) -> None:
        with self.assertRaises(ValueError):
            t_critical(95, 0)

    def test_df_thirty(self) -> None:
        with self.assertRaises(ValueError):
            t_critical(95, 30)


if __name__ == "__main__":
    unittest.main()
