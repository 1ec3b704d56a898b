"""Command-line interface for runstat.

Runs a command (or every command of a batch file) several times and
prints timing statistics to standard error::

    runstat -n 10 -c 95 gzip -c big.tar
    runstat -n 20 -f rusage -b commands.txt
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from runstat import __version__
from runstat.bench.config import (
    DEFAULT_CONFIDENCE,
    DEFAULT_SLEEP,
    Command,
    FormatStyle,
    RunConfig,
    config_from_profile,
    load_profile,
    validate_config,
)
from runstat.logging import setup_logging

log = logging.getLogger("runstat")


def _build_config(
    *,
    command: tuple[str, ...],
    batch_file: Path | None,
    profile_path: Path | None,
    cli_overrides: dict[str, object],
    pre_cmd: str | None,
    input_cmd: str | None,
    output_cmd: str | None,
    replace_str: str | None,
    quiet: int,
) -> RunConfig:
    """Combine profile, batch file and command-line options into a RunConfig."""
    from runstat.batch import BatchSyntaxError, parse_batch_file

    per_command_given = any(v is not None for v in (pre_cmd, input_cmd, output_cmd, replace_str))
    if batch_file is not None:
        if per_command_given or quiet:
            raise click.UsageError(
                "In batch file mode, -I/-i/-o/-q/-r must be specified per-command "
                "in the batch file."
            )
        if command:
            raise click.UsageError("A command cannot be given together with --batch.")
        try:
            cli_overrides["commands"] = tuple(parse_batch_file(batch_file))
        except BatchSyntaxError as exc:
            raise click.UsageError(f"{batch_file}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise click.UsageError(f"{batch_file}: not valid UTF-8 text ({exc.reason}).") from exc
        except OSError as exc:
            raise click.UsageError(f"Error when trying to read '{batch_file}': {exc}") from exc
    elif command:
        cli_overrides["commands"] = (
            Command(
                argv=command,
                pre_cmd=pre_cmd,
                input_cmd=input_cmd,
                output_cmd=output_cmd,
                replace_str=replace_str,
                quiet_stdout=quiet >= 1,
                quiet_stderr=quiet >= 2,
            ),
        )

    if profile_path is not None:
        try:
            profile_data = load_profile(profile_path)
            return config_from_profile(profile_data, cli_overrides=cli_overrides)
        except (OSError, ValueError) as exc:
            raise click.UsageError(str(exc)) from exc

    values = {k: v for k, v in cli_overrides.items() if v is not None}
    return RunConfig(**values)  # type: ignore[arg-type]


@click.command(context_settings={"allow_interspersed_args": False})
@click.version_option(version=__version__)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "-n",
    "--runs",
    "num_runs",
    type=click.IntRange(min=1),
    default=None,
    help="Number of times to run each command (default: 1).",
)
@click.option(
    "-c",
    "--confidence",
    "confidence_level",
    type=click.IntRange(1, 99),
    default=None,
    help=f"Confidence level in percent (default: {DEFAULT_CONFIDENCE}).",
)
@click.option(
    "-f",
    "--format",
    "format_name",
    type=click.Choice([s.value for s in FormatStyle]),
    default=None,
    help="Report style.",
)
@click.option("-l", "rusage_flag", is_flag=True, help="Shorthand for --format rusage.")
@click.option("-p", "liketime_flag", is_flag=True, help="Shorthand for --format liketime.")
@click.option("-I", "replace_str", type=str, default=None, help="Run-number placeholder.")
@click.option("-i", "input_cmd", type=str, default=None, help="Command whose output is stdin.")
@click.option("-o", "output_cmd", type=str, default=None, help="Command receiving stdout.")
@click.option("-r", "pre_cmd", type=str, default=None, help="Command run before each run.")
@click.option("-q", "quiet", count=True, help="Quiet stdout; twice quiets stderr too.")
@click.option(
    "-s",
    "--sleep",
    type=click.FloatRange(min=0),
    default=None,
    help=f"Upper bound in seconds of the random sleep between runs (default: {DEFAULT_SLEEP:g}).",
)
@click.option(
    "--sequential",
    is_flag=True,
    default=False,
    help="Run commands in order instead of a random interleaving.",
)
@click.option("--seed", type=int, default=None, help="Seed for the run order and sleeps.")
@click.option(
    "-b",
    "--batch",
    "batch_file",
    type=click.Path(path_type=Path),
    default=None,
    help="File listing one command per line.",
)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(path_type=Path),
    default=None,
    help="YAML profile with defaults and commands.",
)
@click.option("--csv", "csv_path", type=click.Path(path_type=Path), help="Write raw samples.")
@click.option("--json", "json_path", type=click.Path(path_type=Path), help="Write summaries.")
@click.option("-v", "--verbose", is_flag=True, help="Log every execution.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def main(  # noqa: PLR0913
    command: tuple[str, ...],
    num_runs: int | None,
    confidence_level: int | None,
    format_name: str | None,
    rusage_flag: bool,
    liketime_flag: bool,
    replace_str: str | None,
    input_cmd: str | None,
    output_cmd: str | None,
    pre_cmd: str | None,
    quiet: int,
    sleep: float | None,
    sequential: bool,
    seed: int | None,
    batch_file: Path | None,
    profile_path: Path | None,
    csv_path: Path | None,
    json_path: Path | None,
    verbose: bool,
    log_file: Path | None,
) -> None:
    """Run COMMAND several times and report timing statistics.

    \b
    Examples:
        # Ten runs of one command, 95% confidence interval
        runstat -n 10 -c 95 gzip -c big.tar

        # Every command of a batch file, with resource usage
        runstat -n 20 -f rusage -b commands.txt

        # Fresh input per run, placeholder replaced by the run number
        runstat -n 5 -I %N -i "cat input.%N" -o "cmp - expected.%N" ./filter
    """
    from runstat.bench.display import format_report
    from runstat.bench.export import export_csv, export_json
    from runstat.bench.results import build_report
    from runstat.bench.runner import BenchmarkError, BenchRunner

    setup_logging(verbose=verbose, log_file=log_file)

    format_style = FormatStyle(format_name) if format_name else None
    if rusage_flag:
        format_style = FormatStyle.RUSAGE
    if liketime_flag:
        format_style = FormatStyle.LIKE_TIME

    cli_overrides: dict[str, object] = {
        "num_runs": num_runs,
        "confidence_level": confidence_level,
        "format_style": format_style,
        "sleep": sleep,
        "randomize": False if sequential else None,
        "seed": seed,
    }
    config = _build_config(
        command=command,
        batch_file=batch_file,
        profile_path=profile_path,
        cli_overrides=cli_overrides,
        pre_cmd=pre_cmd,
        input_cmd=input_cmd,
        output_cmd=output_cmd,
        replace_str=replace_str,
        quiet=quiet,
    )

    if batch_file is not None and config.format_style is FormatStyle.LIKE_TIME:
        raise click.UsageError("Can't use batch file mode with -f liketime.")

    fatal = validate_config(config)
    if fatal:
        raise click.UsageError(" ".join(e.message for e in fatal))

    try:
        store = BenchRunner(config).run()
    except BenchmarkError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(exc.exit_code) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    report = build_report(config, store)
    click.echo(format_report(report), err=True)

    if csv_path is not None:
        csv_path.write_text(export_csv(report))
        log.info("Raw samples written to %s", csv_path)
    if json_path is not None:
        json_path.write_text(export_json(report))
        log.info("Summary written to %s", json_path)


if __name__ == "__main__":
    main()
