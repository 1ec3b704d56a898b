"""Benchmark execution engine.

Orchestrates, for every (command, run index) pair:
1. The pre-command, run through the shell before timing.
2. Capture of the input command's output into a temporary file that
   becomes the timed process's standard input.
3. The timed run itself (see :mod:`runstat.bench.timing`).
4. Streaming of the captured standard output into the output command.

Execution order:
- Sequential: every run of command 1, then every run of command 2, ...
- Randomized (default): pick a random command that still has runs left,
  then a random run index of it that has not been executed.  Interleaving
  keeps thermal, cache and scheduler drift from lining up with one
  command or one position.

Any failure is fatal and raised as :class:`BenchmarkError`; there are no
retries and no partial results.
"""

from __future__ import annotations

import logging
import random
import subprocess
import tempfile
import time
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Any, Callable, Iterator

from runstat.bench.config import Command, RunConfig, validate_config
from runstat.bench.display import format_command
from runstat.bench.samples import SampleStore
from runstat.bench.timing import RunSample, run_timed

log = logging.getLogger("runstat")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class BenchmarkError(Exception):
    """A fatal failure that aborts the whole benchmark.

    ``exit_code`` is the status the program should exit with: the failing
    sub-command's exit status where one is available, 1 otherwise.
    """

    def __init__(self, message: str, *, exit_code: int = 1, command: str | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code if exit_code > 0 else 1
        self.command = command


def _status_to_exit_code(returncode: int) -> int:
    """Map a subprocess return code to a process exit status."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def _spawn_error_code(exc: OSError) -> int:
    if isinstance(exc, FileNotFoundError):
        return 127
    if isinstance(exc, PermissionError):
        return 126
    return 1


# ---------------------------------------------------------------------------
# Shell helpers
# ---------------------------------------------------------------------------


def run_pre_command(pre_cmd: str) -> None:
    """Run the pre-command through the shell; a non-zero exit is fatal."""
    log.debug("Running pre-command: %s", pre_cmd)
    try:
        result = subprocess.run(pre_cmd, shell=True)
    except OSError as exc:
        raise BenchmarkError(
            f"Error when attempting to run '{pre_cmd}': {exc}", command=pre_cmd
        ) from exc
    if result.returncode != 0:
        raise BenchmarkError(
            f"Exiting because '{pre_cmd}' failed.",
            exit_code=_status_to_exit_code(result.returncode),
            command=pre_cmd,
        )


def capture_input(input_cmd: str, stack: ExitStack) -> IO[bytes]:
    """Run *input_cmd* and return a rewound temporary file with its output.

    The file is registered on *stack* and deleted when the stack closes.
    """
    log.debug("Capturing input from: %s", input_cmd)
    try:
        tmp = stack.enter_context(tempfile.TemporaryFile(prefix="runstat-in-"))
        result = subprocess.run(input_cmd, shell=True, stdout=tmp)
    except OSError as exc:
        raise BenchmarkError(
            f"Error when attempting to run '{input_cmd}': {exc}", command=input_cmd
        ) from exc
    if result.returncode != 0:
        raise BenchmarkError(
            f"Error when attempting to run '{input_cmd}'.",
            exit_code=_status_to_exit_code(result.returncode),
            command=input_cmd,
        )
    tmp.seek(0)
    return tmp


def feed_output(output_cmd: str, captured: IO[bytes]) -> None:
    """Stream the captured standard output into *output_cmd*."""
    log.debug("Feeding output to: %s", output_cmd)
    try:
        captured.flush()
        captured.seek(0)
        result = subprocess.run(output_cmd, shell=True, stdin=captured)
    except OSError as exc:
        raise BenchmarkError(
            f"Error when attempting to run '{output_cmd}': {exc}", command=output_cmd
        ) from exc
    if result.returncode != 0:
        raise BenchmarkError(
            f"Exiting because '{output_cmd}' failed.",
            exit_code=_status_to_exit_code(result.returncode),
            command=output_cmd,
        )


# ---------------------------------------------------------------------------
# Single run
# ---------------------------------------------------------------------------


def execute_run(command: Command, run_index: int) -> RunSample:
    """Execute one timed run of *command*.

    Placeholders in the helper commands are replaced with
    ``run_index + 1``.  Helper commands run strictly before or after the
    timed interval.

    Raises:
        BenchmarkError: If any helper command fails, the command cannot be
            started, or the command exits with a non-zero status.
    """
    cmd = command.resolve(run_index)

    if cmd.pre_cmd:
        run_pre_command(cmd.pre_cmd)

    with ExitStack() as stack:
        stdin: IO[bytes] | None = None
        if cmd.input_cmd:
            stdin = capture_input(cmd.input_cmd, stack)

        stdout: IO[bytes] | int | None = None
        captured: IO[bytes] | None = None
        if cmd.quiet_stdout:
            stdout = subprocess.DEVNULL
        elif cmd.output_cmd:
            try:
                captured = stack.enter_context(tempfile.TemporaryFile(prefix="runstat-out-"))
            except OSError as exc:
                raise BenchmarkError(f"Can't create temporary file: {exc}") from exc
            stdout = captured

        stderr = subprocess.DEVNULL if cmd.quiet_stderr else None

        try:
            sample = run_timed(cmd.argv, stdin=stdin, stdout=stdout, stderr=stderr)
        except OSError as exc:
            raise BenchmarkError(
                f"Error when attempting to run {cmd.name}: {exc}",
                exit_code=_spawn_error_code(exc),
                command=cmd.name,
            ) from exc

        if sample.exit_code != 0:
            raise BenchmarkError(
                f"Error when attempting to run {cmd.name} (exit status {sample.exit_code})",
                exit_code=_status_to_exit_code(sample.exit_code),
                command=cmd.name,
            )

        if captured is not None and cmd.output_cmd:
            feed_output(cmd.output_cmd, captured)

    return sample


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


def schedule(
    num_commands: int,
    num_runs: int,
    *,
    randomize: bool = True,
    rng: random.Random | None = None,
) -> Iterator[tuple[int, int]]:
    """Yield every ``(command index, run index)`` pair exactly once.

    Sequential order runs command 0 runs 0..n-1, then command 1, and so
    on.  Randomized order picks a command uniformly among those with runs
    left, then one of its remaining run indices uniformly.
    """
    if not randomize:
        for cmd_index in range(num_commands):
            for run_index in range(num_runs):
                yield cmd_index, run_index
        return

    rng = rng or random.Random()
    pending: dict[int, list[int]] = {c: list(range(num_runs)) for c in range(num_commands)}
    while pending:
        cmd_index = rng.choice(list(pending))
        runs = pending[cmd_index]
        run_index = runs.pop(rng.randrange(len(runs)))
        if not runs:
            del pending[cmd_index]
        yield cmd_index, run_index


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class RunProgress:
    """Progress info passed to the callback after every run."""

    command: Command
    cmd_index: int  # 0-based
    run_index: int  # 0-based
    completed: int  # runs finished so far, all commands
    total: int
    elapsed: float


# Type alias for the progress callback.
ProgressCallback = Any  # Callable[[RunProgress], None] | None


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Executes every run of every command according to a RunConfig.

    Usage::

        config = RunConfig(commands=(Command(argv=("true",)),), num_runs=10)
        store = BenchRunner(config).run()
    """

    def __init__(
        self,
        config: RunConfig,
        progress_callback: ProgressCallback = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.progress: Any = progress_callback or self._default_progress
        self.rng = rng or random.Random(config.seed)
        self._sleep = sleep

    def run(self) -> SampleStore:
        """Execute the full benchmark.

        Returns:
            A SampleStore with every slot filled.

        Raises:
            ValueError: If the configuration is invalid.
            BenchmarkError: On the first failed run; nothing is returned.
        """
        errors = validate_config(self.config)
        if errors:
            messages = [f"  {e.field}: {e.message}" for e in errors]
            raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))

        commands = self.config.commands
        store = SampleStore(len(commands), self.config.num_runs)
        total = self.config.total_runs

        pairs = schedule(
            len(commands),
            self.config.num_runs,
            randomize=self.config.randomize,
            rng=self.rng,
        )
        for done, (cmd_index, run_index) in enumerate(pairs, 1):
            command = commands[cmd_index]
            log.info("===> Executing %s", format_command(command))
            sample = execute_run(command, run_index)
            store.set(cmd_index, run_index, sample)

            self.progress(
                RunProgress(
                    command=command,
                    cmd_index=cmd_index,
                    run_index=run_index,
                    completed=done,
                    total=total,
                    elapsed=sample.elapsed,
                )
            )

            if done < total and self.config.sleep > 0:
                self._sleep(self.rng.random() * self.config.sleep)

        return store

    @staticmethod
    def _default_progress(progress: RunProgress) -> None:
        """Default progress callback: log at debug level."""
        log.debug(
            "  [%d/%d] command %d run %d: %.6fs",
            progress.completed,
            progress.total,
            progress.cmd_index + 1,
            progress.run_index + 1,
            progress.elapsed,
        )
