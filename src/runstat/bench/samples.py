"""Write-once storage for run samples.

Every (command index, run index) slot is filled exactly once by the
runner.  Sample sets for statistics can only be read once every run of
a command has completed.
"""

from __future__ import annotations

from runstat.bench.timing import RunSample


class SampleStore:
    """Run samples keyed by ``(command index, run index)``."""

    def __init__(self, num_commands: int, num_runs: int) -> None:
        if num_commands < 1 or num_runs < 1:
            raise ValueError(
                f"Need at least one command and one run "
                f"(got {num_commands} commands, {num_runs} runs)"
            )
        self.num_commands = num_commands
        self.num_runs = num_runs
        self._samples: dict[tuple[int, int], RunSample] = {}

    def __len__(self) -> int:
        return len(self._samples)

    def __contains__(self, key: object) -> bool:
        return key in self._samples

    def _check_key(self, cmd_index: int, run_index: int) -> None:
        if not 0 <= cmd_index < self.num_commands:
            raise IndexError(f"Command index out of range: {cmd_index}")
        if not 0 <= run_index < self.num_runs:
            raise IndexError(f"Run index out of range: {run_index}")

    def set(self, cmd_index: int, run_index: int, sample: RunSample) -> None:
        """Store the sample for one run.  Each slot can be written once."""
        self._check_key(cmd_index, run_index)
        key = (cmd_index, run_index)
        if key in self._samples:
            raise ValueError(f"Run {run_index} of command {cmd_index} already recorded")
        self._samples[key] = sample

    def get(self, cmd_index: int, run_index: int) -> RunSample:
        self._check_key(cmd_index, run_index)
        return self._samples[(cmd_index, run_index)]

    def pending(self, cmd_index: int) -> list[int]:
        """Run indices of *cmd_index* that have not been recorded yet."""
        self._check_key(cmd_index, 0)
        return [r for r in range(self.num_runs) if (cmd_index, r) not in self._samples]

    def is_complete(self, cmd_index: int) -> bool:
        return not self.pending(cmd_index)

    def samples(self, cmd_index: int) -> list[RunSample]:
        """All samples of a command in run order.

        Raises:
            ValueError: If any run of the command is still missing.
        """
        missing = self.pending(cmd_index)
        if missing:
            raise ValueError(
                f"Command {cmd_index} has {len(missing)} of {self.num_runs} runs missing"
            )
        return [self._samples[(cmd_index, r)] for r in range(self.num_runs)]

    def get_all(self, cmd_index: int, metric: str) -> list[float]:
        """Sample set of one metric over every run of a command."""
        return [s.metric(metric) for s in self.samples(cmd_index)]
