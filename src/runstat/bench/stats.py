"""Summary statistics over a set of run measurements.

All functions operate on an in-memory sequence of floats holding one
metric for every run of one command.  The standard deviation is the
population form (divide by n), and the confidence interval is the
half-width around the mean:

    half_width = critical * stddev / sqrt(n)

where ``critical`` comes from the t-table for samples of fewer than 30
values (n - 1 degrees of freedom) and from the normal table otherwise.
"""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass
from typing import Sequence

from runstat.bench.tables import t_critical, z_critical

# Samples of this size or more use the normal approximation.
NORMAL_APPROX_MIN_N = 30


def _require_values(values: Sequence[float], what: str) -> None:
    if not values:
        raise ValueError(f"{what} requires at least one value")


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean of *values*."""
    _require_values(values, "mean")
    return statistics.fmean(values)


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation of *values*.

    A single value has a standard deviation of 0.
    """
    _require_values(values, "stddev")
    return statistics.pstdev(values)


def median(values: Sequence[float]) -> float:
    """Median of *values*.

    The values are sorted first.  For an even count the median is the
    average of the two central values; for an odd count it is the
    central value itself.
    """
    _require_values(values, "median")
    ordered = sorted(values)
    n = len(ordered)
    mid = n // 2
    if n % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2.0
    return ordered[mid]


def critical_value(n: int, confidence_level: int) -> float:
    """Critical value for a sample of *n* values at *confidence_level* percent.

    Uses Student's t with n - 1 degrees of freedom below
    ``NORMAL_APPROX_MIN_N`` values, the normal table from there on.
    """
    if n < 2:
        raise ValueError(f"A critical value needs at least 2 values (got {n})")
    if n < NORMAL_APPROX_MIN_N:
        return t_critical(confidence_level, n - 1)
    return z_critical(confidence_level)


def confidence_interval(values: Sequence[float], confidence_level: int) -> float:
    """Half-width of the confidence interval around the mean.

    A single value carries no spread information, so its interval is 0.
    """
    _require_values(values, "confidence_interval")
    n = len(values)
    if n == 1:
        return 0.0
    return critical_value(n, confidence_level) * stddev(values) / math.sqrt(n)


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryStats:
    """Summary statistics for one metric of one command."""

    n: int
    mean: float
    ci: float  # half-width at the configured confidence level
    stddev: float
    min: float
    median: float
    max: float

    def to_dict(self) -> dict[str, float | int]:
        """Serialize to a dict with rounded values."""
        return {
            "n": self.n,
            "mean": round(self.mean, 6),
            "ci": round(self.ci, 6),
            "stddev": round(self.stddev, 6),
            "min": round(self.min, 6),
            "median": round(self.median, 6),
            "max": round(self.max, 6),
        }


def summarize(values: Sequence[float], confidence_level: int) -> SummaryStats:
    """Compute every summary statistic for a sample in one pass.

    Args:
        values: One metric for every run of a command.  Must not be empty.
        confidence_level: Percentage in 1..99.

    Returns:
        SummaryStats with all fields populated.
    """
    _require_values(values, "summarize")
    return SummaryStats(
        n=len(values),
        mean=mean(values),
        ci=confidence_interval(values, confidence_level),
        stddev=stddev(values),
        min=min(values),
        median=median(values),
        max=max(values),
    )
