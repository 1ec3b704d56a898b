"""Critical-value tables for confidence intervals.

``T_TABLE[level - 1][df - 1]`` holds the two-tailed Student's t critical
value for confidence level ``level`` (1..99 percent) and ``df`` degrees of
freedom (1..29).  ``Z_TABLE[level - 1]`` holds the matching standard
normal critical value, used once a sample reaches 30 values.

Values are rounded to three decimals, as printed in standard statistical
tables (e.g. 95% with 9 df is 2.262, 95% normal is 1.960).  The tables
are generated once at import from :mod:`scipy.stats` and frozen into
tuples; lookups never compute anything.
"""

from __future__ import annotations

from scipy.stats import norm, t  # type: ignore[import-untyped]

MIN_LEVEL = 1
MAX_LEVEL = 99
MAX_T_DF = 29


def _two_tailed_quantile(level: int) -> float:
    return 1.0 - (1.0 - level / 100.0) / 2.0


T_TABLE: tuple[tuple[float, ...], ...] = tuple(
    tuple(
        round(float(t.ppf(_two_tailed_quantile(level), df)), 3)
        for df in range(1, MAX_T_DF + 1)
    )
    for level in range(MIN_LEVEL, MAX_LEVEL + 1)
)

Z_TABLE: tuple[float, ...] = tuple(
    round(float(norm.ppf(_two_tailed_quantile(level))), 3)
    for level in range(MIN_LEVEL, MAX_LEVEL + 1)
)


def _check_level(confidence_level: int) -> None:
    if not MIN_LEVEL <= confidence_level <= MAX_LEVEL:
        raise ValueError(
            f"Confidence level must be between {MIN_LEVEL} and {MAX_LEVEL} "
            f"(got {confidence_level})."
        )


def t_critical(confidence_level: int, degrees_of_freedom: int) -> float:
    """Look up the two-tailed t critical value."""
    _check_level(confidence_level)
    if not 1 <= degrees_of_freedom <= MAX_T_DF:
        raise ValueError(
            f"t-table covers 1..{MAX_T_DF} degrees of freedom (got {degrees_of_freedom})."
        )
    return T_TABLE[confidence_level - 1][degrees_of_freedom - 1]


def z_critical(confidence_level: int) -> float:
    """Look up the two-tailed standard normal critical value."""
    _check_level(confidence_level)
    return Z_TABLE[confidence_level - 1]
