"""Timing capture for a single run.

Spawns one child process with the requested standard stream
redirections, blocks in ``os.wait4`` until it exits, and returns the
elapsed wall-clock time together with the kernel's resource-usage
accounting for exactly that child.  Only process creation and the wait
happen between the two timestamps.
"""

from __future__ import annotations

import os
import resource
import subprocess
import time
from dataclasses import dataclass
from typing import IO, Any, Sequence

# Integer counters reported by getrusage/wait4, in report order.
RUSAGE_FIELDS: tuple[str, ...] = (
    "maxrss",
    "minflt",
    "majflt",
    "nswap",
    "inblock",
    "oublock",
    "msgsnd",
    "msgrcv",
    "nsignals",
    "nvcsw",
    "nivcsw",
)

# Time metrics followed by the counters.
TIME_METRICS: tuple[str, ...] = ("real", "user", "sys")
ALL_METRICS: tuple[str, ...] = TIME_METRICS + RUSAGE_FIELDS


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResourceUsage:
    """Resource usage of one terminated child process.

    ``maxrss`` is kept in the platform's native unit (KiB on Linux,
    bytes on macOS).
    """

    utime: float
    stime: float
    maxrss: int = 0
    minflt: int = 0
    majflt: int = 0
    nswap: int = 0
    inblock: int = 0
    oublock: int = 0
    msgsnd: int = 0
    msgrcv: int = 0
    nsignals: int = 0
    nvcsw: int = 0
    nivcsw: int = 0

    @classmethod
    def from_struct(cls, ru: resource.struct_rusage) -> ResourceUsage:
        """Build from the ``struct_rusage`` returned by ``os.wait4``."""
        return cls(
            utime=ru.ru_utime,
            stime=ru.ru_stime,
            **{name: getattr(ru, f"ru_{name}") for name in RUSAGE_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "utime": round(self.utime, 6),
            "stime": round(self.stime, 6),
        }
        for name in RUSAGE_FIELDS:
            data[name] = getattr(self, name)
        return data


@dataclass(frozen=True)
class RunSample:
    """Measurements for one timed run of one command."""

    elapsed: float  # wall-clock seconds
    rusage: ResourceUsage
    exit_code: int = 0

    def metric(self, name: str) -> float:
        """Return one metric as a float.

        ``real`` is the elapsed time, ``user`` and ``sys`` the CPU times;
        any name in ``RUSAGE_FIELDS`` selects that counter.
        """
        if name == "real":
            return self.elapsed
        if name == "user":
            return self.rusage.utime
        if name == "sys":
            return self.rusage.stime
        if name in RUSAGE_FIELDS:
            return float(getattr(self.rusage, name))
        raise KeyError(f"Unknown metric: {name}")


# ---------------------------------------------------------------------------
# Spawn and wait
# ---------------------------------------------------------------------------


def run_timed(
    argv: Sequence[str],
    *,
    stdin: IO[bytes] | int | None = None,
    stdout: IO[bytes] | int | None = None,
    stderr: IO[bytes] | int | None = None,
) -> RunSample:
    """Execute *argv* once and capture its timing and resource usage.

    The child inherits the parent's environment, working directory and
    file descriptors except where a stream is redirected.

    Args:
        argv: Program and arguments, executed directly (no shell).
        stdin: Readable file or ``subprocess.DEVNULL`` for standard input.
        stdout: Writable file or ``subprocess.DEVNULL`` for standard output.
        stderr: Writable file or ``subprocess.DEVNULL`` for standard error.

    Returns:
        RunSample with the elapsed time, rusage and the child's exit code
        (``-N`` if it was killed by signal N).

    Raises:
        OSError: If the process cannot be created.
    """
    args = list(argv)
    start = time.perf_counter()
    proc = subprocess.Popen(args, stdin=stdin, stdout=stdout, stderr=stderr)
    _, status, ru = os.wait4(proc.pid, 0)
    end = time.perf_counter()

    # The child is reaped; let the Popen object know so it does not wait again.
    proc.returncode = os.waitstatus_to_exitcode(status)

    return RunSample(
        elapsed=end - start,
        rusage=ResourceUsage.from_struct(ru),
        exit_code=proc.returncode,
    )
