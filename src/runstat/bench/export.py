"""Export benchmark results to CSV and JSON.

CSV format: one row per command per run (long format for pandas/R),
with every raw measurement.

JSON format: the configuration and per-command summary statistics.
"""

from __future__ import annotations

import csv
import io
import json

from runstat.bench.display import format_command
from runstat.bench.results import BenchReport
from runstat.bench.timing import RUSAGE_FIELDS


def export_csv(report: BenchReport) -> str:
    """Export raw samples as CSV.

    Columns:
        command_index, command, run, real, user, sys, exit_code,
        followed by one column per resource-usage counter.
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(
        ["command_index", "command", "run", "real", "user", "sys", "exit_code", *RUSAGE_FIELDS]
    )
    for result in report.commands:
        label = format_command(result.command)
        for run, sample in enumerate(result.samples, 1):
            writer.writerow(
                [
                    result.index,
                    label,
                    run,
                    f"{sample.elapsed:.6f}",
                    f"{sample.rusage.utime:.6f}",
                    f"{sample.rusage.stime:.6f}",
                    sample.exit_code,
                    *(getattr(sample.rusage, name) for name in RUSAGE_FIELDS),
                ]
            )

    return output.getvalue()


def export_json(report: BenchReport) -> str:
    """Export configuration and summary statistics as indented JSON."""
    return json.dumps(report.to_dict(), indent=2) + "\n"
