"""Tests for runstat.bench.results: per-command reduction of samples."""

from __future__ import annotations

import unittest

from bench_test_helpers import make_config, make_report, make_sample

from runstat.bench.results import build_report
from runstat.bench.samples import SampleStore
from runstat.bench.timing import ALL_METRICS


class TestBuildReport(unittest.TestCase):
    """Tests for build_report()."""

    def test_one_result_per_command(self) -> None:
        report = make_report([[1.0, 2.0], [3.0, 4.0]])
        self.assertEqual([r.index for r in report.commands], [1, 2])
        self.assertEqual([r.command.argv[0] for r in report.commands], ["cmd1", "cmd2"])

    def test_stats_for_every_metric(self) -> None:
        report = make_report([[1.0, 2.0, 3.0]])
        self.assertEqual(set(report.commands[0].stats), set(ALL_METRICS))

    def test_samples_in_run_order(self) -> None:
        report = make_report([[3.0, 1.0, 2.0]])
        self.assertEqual([s.elapsed for s in report.commands[0].samples], [3.0, 1.0, 2.0])

    def test_real_stats(self) -> None:
        real = make_report([[3.0, 1.0, 2.0]]).commands[0].stats["real"]
        self.assertEqual((real.n, real.mean, real.min, real.median, real.max), (3, 2.0, 1.0, 2.0, 3.0))

    def test_commands_are_independent(self) -> None:
        report = make_report([[1.0, 1.0], [5.0, 5.0]])
        self.assertEqual(report.commands[0].stats["real"].mean, 1.0)
        self.assertEqual(report.commands[1].stats["real"].mean, 5.0)

    def test_confidence_level_from_config(self) -> None:
        wide = make_report([[1.0, 2.0, 3.0]], confidence_level=99).commands[0].stats["real"]
        narrow = make_report([[1.0, 2.0, 3.0]], confidence_level=50).commands[0].stats["real"]
        self.assertLess(narrow.ci, wide.ci)

    def test_incomplete_store_raises(self) -> None:
        config = make_config(("a",), num_runs=2)
        store = SampleStore(1, 2)
        store.set(0, 0, make_sample(1.0))
        with self.assertRaises(ValueError):
            build_report(config, store)

    def test_to_dict(self) -> None:
        data = make_report([[1.0, 2.0]]).to_dict()
        self.assertEqual(data["runs"], 2)
        self.assertEqual(data["commands"][0]["runs"], 2)
        self.assertIn("real", data["commands"][0]["stats"])


if __name__ == "__main__":
    unittest.main()
