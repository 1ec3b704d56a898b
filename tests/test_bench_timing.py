"""Tests for runstat.bench.timing: timed spawn-and-wait of one run."""

from __future__ import annotations

import subprocess
import sys
import tempfile
import unittest
from types import SimpleNamespace
from unittest.mock import patch

from runstat.bench.timing import (
    ALL_METRICS,
    RUSAGE_FIELDS,
    ResourceUsage,
    RunSample,
    run_timed,
)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


class TestResourceUsage(unittest.TestCase):
    """Tests for ResourceUsage."""

    def test_from_struct(self) -> None:
        fields = {f"ru_{name}": i for i, name in enumerate(RUSAGE_FIELDS, 1)}
        ru = SimpleNamespace(ru_utime=1.25, ru_stime=0.5, **fields)
        usage = ResourceUsage.from_struct(ru)  # type: ignore[arg-type]
        self.assertEqual(usage.utime, 1.25)
        self.assertEqual(usage.stime, 0.5)
        self.assertEqual(usage.maxrss, 1)
        self.assertEqual(usage.nivcsw, len(RUSAGE_FIELDS))

    def test_to_dict_has_every_counter(self) -> None:
        d = ResourceUsage(utime=0.1, stime=0.2, maxrss=10).to_dict()
        self.assertEqual(d["maxrss"], 10)
        for name in RUSAGE_FIELDS:
            self.assertIn(name, d)


class TestRunSampleMetric(unittest.TestCase):
    """Tests for RunSample.metric()."""

    def setUp(self) -> None:
        self.sample = RunSample(
            elapsed=2.0,
            rusage=ResourceUsage(utime=1.5, stime=0.25, maxrss=4096, nvcsw=7),
        )

    def test_time_metrics(self) -> None:
        self.assertEqual(self.sample.metric("real"), 2.0)
        self.assertEqual(self.sample.metric("user"), 1.5)
        self.assertEqual(self.sample.metric("sys"), 0.25)

    def test_counter_metrics_are_floats(self) -> None:
        self.assertEqual(self.sample.metric("maxrss"), 4096.0)
        self.assertIsInstance(self.sample.metric("nvcsw"), float)

    def test_every_metric_resolves(self) -> None:
        for name in ALL_METRICS:
            self.sample.metric(name)

    def test_unknown_metric(self) -> None:
        with self.assertRaises(KeyError):
            self.sample.metric("wall")


# ---------------------------------------------------------------------------
# run_timed
# ---------------------------------------------------------------------------


class TestRunTimed(unittest.TestCase):
    """Tests for run_timed() against real processes."""

    def test_simple_command(self) -> None:
        sample = run_timed(["true"])
        self.assertEqual(sample.exit_code, 0)
        self.assertGreaterEqual(sample.elapsed, 0.0)
        self.assertGreater(sample.rusage.maxrss, 0)

    def test_captures_wall_time(self) -> None:
        sample = run_timed(["sleep", "0.3"])
        self.assertGreater(sample.elapsed, 0.25)
        self.assertLess(sample.elapsed, 3.0)

    def test_captures_cpu_time(self) -> None:
        sample = run_timed([sys.executable, "-c", "sum(range(10**7))"])
        self.assertEqual(sample.exit_code, 0)
        self.assertGreater(sample.rusage.utime, 0.0)

    def test_exit_code(self) -> None:
        sample = run_timed(["sh", "-c", "exit 42"])
        self.assertEqual(sample.exit_code, 42)

    def test_killed_by_signal(self) -> None:
        sample = run_timed(["sh", "-c", "kill -9 $$"])
        self.assertEqual(sample.exit_code, -9)

    def test_stdin_and_stdout_redirection(self) -> None:
        with tempfile.TemporaryFile() as fin, tempfile.TemporaryFile() as fout:
            fin.write(b"hello runstat\n")
            fin.seek(0)
            sample = run_timed(["cat"], stdin=fin, stdout=fout)
            fout.seek(0)
            self.assertEqual(fout.read(), b"hello runstat\n")
        self.assertEqual(sample.exit_code, 0)

    def test_devnull_stderr(self) -> None:
        sample = run_timed(["sh", "-c", "echo oops >&2"], stderr=subprocess.DEVNULL)
        self.assertEqual(sample.exit_code, 0)

    def test_argv_copied_before_clock_starts(self) -> None:
        events: list[str] = []

        class RecordingArgv(list):
            def __iter__(self):  # type: ignore[no-untyped-def]
                events.append("argv")
                return super().__iter__()

        def fake_clock() -> float:
            events.append("clock")
            return 0.0

        with patch("runstat.bench.timing.time.perf_counter", side_effect=fake_clock):
            run_timed(RecordingArgv(["true"]))
        self.assertEqual(events, ["argv", "clock", "clock"])

    def test_missing_program(self) -> None:
        with self.assertRaises(FileNotFoundError):
            run_timed(["/nonexistent/runstat-no-such-program"])

    def test_no_shell_interpretation(self) -> None:
        with tempfile.TemporaryFile() as fout:
            run_timed(["echo", "$HOME", "*"], stdout=fout)
            fout.seek(0)
            self.assertEqual(fout.read(), b"$HOME *\n")


if __name__ == "__main__":
    unittest.main()
