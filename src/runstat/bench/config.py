"""Benchmark configuration.

Handles:
- The immutable ``Command`` and ``RunConfig`` values shared by every stage.
- Placeholder substitution in pre/input/output commands.
- Loading defaults and commands from YAML profiles.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import enum
import logging
import shlex
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

log = logging.getLogger("runstat")

DEFAULT_CONFIDENCE = 99
DEFAULT_SLEEP = 3.0


class FormatStyle(enum.Enum):
    """How the final report is rendered."""

    LIKE_TIME = "liketime"
    NORMAL = "normal"
    RUSAGE = "rusage"


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Command:
    """One command to benchmark, with its per-run helper commands.

    ``pre_cmd``, ``input_cmd`` and ``output_cmd`` are shell command
    strings.  When ``replace_str`` is set, every occurrence of it in
    those strings is replaced with the 1-based run number before the run.
    """

    argv: tuple[str, ...]
    pre_cmd: str | None = None
    input_cmd: str | None = None
    output_cmd: str | None = None
    replace_str: str | None = None
    quiet_stdout: bool = False
    quiet_stderr: bool = False

    @property
    def name(self) -> str:
        return self.argv[0] if self.argv else ""

    def substitute(self, text: str | None, run_index: int) -> str | None:
        """Replace the placeholder in *text* with ``run_index + 1``."""
        if text is None or not self.replace_str:
            return text
        return text.replace(self.replace_str, str(run_index + 1))

    def resolve(self, run_index: int) -> Command:
        """Return a copy with placeholders substituted for *run_index*."""
        return replace(
            self,
            pre_cmd=self.substitute(self.pre_cmd, run_index),
            input_cmd=self.substitute(self.input_cmd, run_index),
            output_cmd=self.substitute(self.output_cmd, run_index),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "argv": list(self.argv),
            "pre": self.pre_cmd,
            "input": self.input_cmd,
            "output": self.output_cmd,
            "replace": self.replace_str,
            "quiet_stdout": self.quiet_stdout,
            "quiet_stderr": self.quiet_stderr,
        }


# ---------------------------------------------------------------------------
# RunConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunConfig:
    """Resolved configuration for a benchmark run."""

    commands: tuple[Command, ...] = ()
    num_runs: int = 1
    confidence_level: int = DEFAULT_CONFIDENCE
    format_style: FormatStyle = FormatStyle.NORMAL
    sleep: float = DEFAULT_SLEEP  # upper bound of the random inter-run sleep
    randomize: bool = True
    seed: int | None = None

    @property
    def total_runs(self) -> int:
        """Number of timed runs across all commands."""
        return len(self.commands) * self.num_runs


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str


def validate_config(config: RunConfig) -> list[ValidationError]:
    """Validate a run configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.commands:
        errors.append(ValidationError(field="commands", message="Missing command."))

    if config.num_runs < 1:
        errors.append(
            ValidationError(
                field="num_runs",
                message=f"Number of runs must be at least 1 (got {config.num_runs}).",
            )
        )

    if not 1 <= config.confidence_level <= 99:
        errors.append(
            ValidationError(
                field="confidence_level",
                message=(
                    f"Confidence level must be between 1 and 99 "
                    f"(got {config.confidence_level})."
                ),
            )
        )

    if config.sleep < 0:
        errors.append(
            ValidationError(
                field="sleep",
                message=f"Sleep cannot be negative (got {config.sleep}).",
            )
        )

    if config.format_style is FormatStyle.LIKE_TIME and len(config.commands) > 1:
        errors.append(
            ValidationError(
                field="format_style",
                message="The liketime format only works with a single command.",
            )
        )

    for i, cmd in enumerate(config.commands, 1):
        if not cmd.argv or not cmd.argv[0]:
            errors.append(
                ValidationError(
                    field=f"commands.{i}.argv",
                    message=f"Command {i} has no program to run.",
                )
            )
        if (cmd.quiet_stdout or cmd.quiet_stderr) and cmd.output_cmd:
            errors.append(
                ValidationError(
                    field=f"commands.{i}.output_cmd",
                    message="-q and -o are mutually exclusive.",
                )
            )
        if cmd.replace_str == "":
            errors.append(
                ValidationError(
                    field=f"commands.{i}.replace_str",
                    message="Replacement string cannot be empty.",
                )
            )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a run profile from a YAML file.

    Profile format::

        runs: 20
        confidence: 95
        format: rusage
        sleep: 1
        randomize: true
        seed: 42

        commands:
          - argv: ["gzip", "-c", "big.tar"]
            output: "cmp - big.tar.gz"
          - command: "bzip2 -c big.tar"
            quiet: 1
          - command: "xz -c big.tar"
            replace: "%N"
            pre: "rm -f /tmp/out.%N"

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in profile {profile_path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def command_from_dict(data: dict[str, Any], *, position: int = 1) -> Command:
    """Build a Command from one entry of a profile's ``commands`` list."""
    if not isinstance(data, dict):
        raise ValueError(f"Command {position} must be a mapping, got {type(data).__name__}")

    if "argv" in data:
        argv = data["argv"]
        if not isinstance(argv, list) or not all(isinstance(a, str) for a in argv):
            raise ValueError(f"Command {position}: 'argv' must be a list of strings")
    elif "command" in data:
        if not isinstance(data["command"], str):
            raise ValueError(f"Command {position}: 'command' must be a string")
        argv = shlex.split(data["command"])
    else:
        raise ValueError(f"Command {position} needs either 'argv' or 'command'")

    for key in ("pre", "input", "output", "replace"):
        if data.get(key) is not None and not isinstance(data[key], str):
            raise ValueError(
                f"Command {position}: '{key}' must be a shell command string, "
                f"got {type(data[key]).__name__}"
            )

    quiet = data.get("quiet", 0)
    if isinstance(quiet, bool):
        quiet = 1 if quiet else 0
    if not isinstance(quiet, int) or quiet < 0:
        raise ValueError(f"Command {position}: 'quiet' must be 0, 1, 2 or a boolean")

    return Command(
        argv=tuple(argv),
        pre_cmd=data.get("pre"),
        input_cmd=data.get("input"),
        output_cmd=data.get("output"),
        replace_str=data.get("replace"),
        quiet_stdout=quiet >= 1,
        quiet_stderr=quiet >= 2,
    )


def _profile_value(
    profile_data: dict[str, Any],
    key: str,
    default: Any,
    kind: type | tuple[type, ...],
) -> Any:
    """Return ``profile_data[key]`` or *default*, checking the YAML type.

    A key present with an empty value is an error, not the default.
    YAML booleans are not accepted where a number is expected.
    """
    if key not in profile_data:
        return default
    value = profile_data[key]
    kinds = kind if isinstance(kind, tuple) else (kind,)
    if value is None and default is None:
        return None
    if not isinstance(value, kinds) or (isinstance(value, bool) and bool not in kinds):
        expected = " or ".join(k.__name__ for k in kinds)
        raise ValueError(
            f"Profile '{key}' must be {expected}, got {type(value).__name__} ({value!r})"
        )
    return value


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> RunConfig:
    """Build a RunConfig from a parsed YAML profile.

    CLI overrides take precedence over profile values.  Keys match
    RunConfig field names; ``None`` values mean "not given on the CLI".
    """
    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    commands_data = profile_data.get("commands", [])
    if not isinstance(commands_data, list):
        raise ValueError("Profile 'commands' must be a list of command definitions")
    commands = tuple(command_from_dict(c, position=i) for i, c in enumerate(commands_data, 1))

    format_name = profile_data.get("format", FormatStyle.NORMAL.value)
    try:
        format_style = FormatStyle(format_name)
    except ValueError:
        raise ValueError(f"Unknown format style in profile: {format_name!r}") from None

    values: dict[str, Any] = {
        "commands": commands,
        "num_runs": _profile_value(profile_data, "runs", 1, int),
        "confidence_level": _profile_value(profile_data, "confidence", DEFAULT_CONFIDENCE, int),
        "format_style": format_style,
        "sleep": float(_profile_value(profile_data, "sleep", DEFAULT_SLEEP, (int, float))),
        "randomize": _profile_value(profile_data, "randomize", True, bool),
        "seed": _profile_value(profile_data, "seed", None, int),
    }
    values.update(cli)
    log.debug("Profile configuration: %s", values)
    return RunConfig(**values)
