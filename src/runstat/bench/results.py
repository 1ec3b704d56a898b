"""Benchmark result data structures.

Hierarchy::

    BenchReport (one benchmark execution)
      → config: RunConfig
      → commands: list[CommandResult]
        → samples: list[RunSample]       (run order)
        → stats: dict[metric, SummaryStats]

Statistics are computed only once every run of a command is in the
sample store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from runstat.bench.config import Command, RunConfig
from runstat.bench.samples import SampleStore
from runstat.bench.stats import SummaryStats, summarize
from runstat.bench.timing import ALL_METRICS, RunSample


@dataclass
class CommandResult:
    """All runs of one command, with per-metric statistics."""

    index: int  # 1-based position in the command list
    command: Command
    samples: list[RunSample] = field(default_factory=list)
    stats: dict[str, SummaryStats] = field(default_factory=dict)

    def compute_stats(self, confidence_level: int) -> None:
        """Compute SummaryStats for every metric from the samples."""
        self.stats = {
            metric: summarize([s.metric(metric) for s in self.samples], confidence_level)
            for metric in ALL_METRICS
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "command": self.command.to_dict(),
            "runs": len(self.samples),
            "stats": {name: s.to_dict() for name, s in self.stats.items()},
        }


@dataclass
class BenchReport:
    """Complete results of one benchmark execution."""

    config: RunConfig
    commands: list[CommandResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "runs": self.config.num_runs,
            "confidence_level": self.config.confidence_level,
            "commands": [c.to_dict() for c in self.commands],
        }


def build_report(config: RunConfig, store: SampleStore) -> BenchReport:
    """Reduce a filled sample store to per-command statistics.

    Raises:
        ValueError: If any command is missing runs.
    """
    report = BenchReport(config=config)
    for cmd_index, command in enumerate(config.commands):
        result = CommandResult(
            index=cmd_index + 1,
            command=command,
            samples=store.samples(cmd_index),
        )
        result.compute_stats(config.confidence_level)
        report.commands.append(result)
    return report
