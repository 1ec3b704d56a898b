"""Terminal formatting for benchmark reports.

Three report styles:
- ``liketime``: the classic ``time`` summary (real/user/sys means) for a
  single command.
- ``normal``: mean with confidence interval, standard deviation, min,
  median and max of the real, user and sys times of every command.
- ``rusage``: ``normal`` plus the same columns for every resource-usage
  counter.
"""

from __future__ import annotations

from runstat.bench.config import Command, FormatStyle
from runstat.bench.results import BenchReport, CommandResult
from runstat.bench.timing import RUSAGE_FIELDS, TIME_METRICS

_LABEL_WIDTH = 12
_COLUMN_WIDTH = 12


# ---------------------------------------------------------------------------
# Command pretty-printing
# ---------------------------------------------------------------------------


def format_arg(arg: str) -> str:
    """Quote an argument containing spaces, escaping double quotes."""
    if " " not in arg:
        return arg
    return '"' + arg.replace('"', '\\"') + '"'


def format_command(command: Command) -> str:
    """Render a command with its options, as it could be written in a batch file."""
    parts: list[str] = []
    if command.replace_str:
        parts += ["-I", format_arg(command.replace_str)]
    if command.input_cmd:
        parts += ["-i", format_arg(command.input_cmd)]
    if command.pre_cmd:
        parts += ["-r", format_arg(command.pre_cmd)]
    if command.output_cmd:
        parts += ["-o", format_arg(command.output_cmd)]
    if command.quiet_stderr:
        parts.append("-qq")
    elif command.quiet_stdout:
        parts.append("-q")
    parts += [format_arg(a) for a in command.argv]
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def format_like_time(report: BenchReport) -> str:
    """Format a single command's mean times like ``time -p``.

    The leading empty line separates the report from the command's own
    output.
    """
    if len(report.commands) != 1:
        raise ValueError("The liketime format only works with a single command.")
    stats = report.commands[0].stats
    return "\n".join(
        [
            "",
            f"real {stats['real'].mean:12.2f}",
            f"user {stats['user'].mean:12.2f}",
            f"sys  {stats['sys'].mean:12.2f}",
        ]
    )


def _time_row(label: str, result: CommandResult, metric: str) -> str:
    s = result.stats[metric]
    mean_ci = f"{s.mean:.3f}+/-{s.ci:<{_COLUMN_WIDTH}.4f}"
    return (
        f"{label:<{_LABEL_WIDTH}}{mean_ci}"
        f"{s.stddev:<{_COLUMN_WIDTH}.3f}"
        f"{s.min:<{_COLUMN_WIDTH}.3f}"
        f"{s.median:<{_COLUMN_WIDTH}.3f}"
        f"{s.max:<{_COLUMN_WIDTH}.3f}"
    ).rstrip()


def _counter_row(label: str, result: CommandResult, metric: str) -> str:
    s = result.stats[metric]
    values = (s.mean, s.stddev, s.min, s.median, s.max)
    return (
        f"{label:<{_LABEL_WIDTH}}" + "".join(f"{v:<{_COLUMN_WIDTH}.0f}" for v in values)
    ).rstrip()


def format_command_result(result: CommandResult, *, rusage: bool = False) -> str:
    """Format the statistics table of one command."""
    lines = [
        f"{result.index}: {format_command(result.command)}",
        f"{'':<{_LABEL_WIDTH}}Mean                Std.Dev.    Min         Median      Max",
    ]
    for metric in TIME_METRICS:
        lines.append(_time_row(metric, result, metric))
    if rusage:
        for metric in RUSAGE_FIELDS:
            lines.append(_counter_row(metric, result, metric))
    return "\n".join(lines)


def format_report(report: BenchReport, style: FormatStyle | None = None) -> str:
    """Format a complete report in the requested (or configured) style."""
    style = style or report.config.format_style
    if style is FormatStyle.LIKE_TIME:
        return format_like_time(report)

    blocks = [
        format_command_result(r, rusage=style is FormatStyle.RUSAGE) for r in report.commands
    ]
    return "===> runstat results\n" + "\n\n".join(blocks)
