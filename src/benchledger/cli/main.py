"""Main CLI entry point for benchledger.

This module defines the Typer application and all CLI commands.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError as PydanticValidationError

from benchledger import __version__
from benchledger.core.config import Settings
from benchledger.core.exceptions import BenchLedgerError, ConfigurationError

# Create the main Typer app
app = typer.Typer(
    name="benchledger",
    help="benchledger: Append-only benchmark history with regression detection.",
    add_completion=False,
    no_args_is_help=True,
)

# Global state for options
state: dict[str, bool] = {
    "json": False,
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"benchledger v{__version__}")
        raise typer.Exit()


def _fail(message: str, code: int = 2) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code)


def _load_settings() -> Settings:
    try:
        return Settings()
    except PydanticValidationError as e:
        raise _fail(str(ConfigurationError(f"Invalid settings: {e}"))) from e


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results in JSON format.",
        ),
    ] = False,
) -> None:
    """benchledger: Append-only benchmark history with regression detection.

    Record CI benchmark results into a dashboard-ready data.js and flag regressions.
    """
    state["json"] = json_output


@app.command()
def version() -> None:
    """Show the current version."""
    typer.echo(f"benchledger v{__version__}")


def _read_commit(path: Path) -> dict[str, Any]:
    """Read a commit payload, accepting a bare commit or a push event."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise _fail(f"Cannot read commit file {path}: {e}") from e
    if isinstance(data, dict) and isinstance(data.get("head_commit"), dict):
        data = data["head_commit"]
    if not isinstance(data, dict):
        raise _fail(f"Commit file {path} must contain a JSON object")
    return data


@app.command()
def ingest(
    tool: Annotated[
        str,
        typer.Option(
            "--tool",
            "-t",
            help="Harness that produced the output (cargo, go, pytest, customSmallerIsBetter, ...).",
        ),
    ],
    output_file: Annotated[
        Path,
        typer.Option(
            "--output-file",
            "-o",
            help="Path to the harness output.",
        ),
    ],
    commit_file: Annotated[
        Path,
        typer.Option(
            "--commit-file",
            "-c",
            help="JSON file with the measured commit (or a push event with head_commit).",
        ),
    ],
    suite: Annotated[
        str | None,
        typer.Option(
            "--suite",
            "-s",
            help="Series name in the history (defaults to the tool).",
        ),
    ] = None,
    data_file: Annotated[
        str | None,
        typer.Option(
            "--data-file",
            "-d",
            help="History artifact to update.",
        ),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option(
            "--threshold",
            help="Fractional change reported as warning or improvement.",
        ),
    ] = None,
    alert_threshold: Annotated[
        float | None,
        typer.Option(
            "--alert-threshold",
            help="Fractional change reported as regression.",
        ),
    ] = None,
    comparator: Annotated[
        str | None,
        typer.Option(
            "--comparator",
            help="lower-is-better or higher-is-better (inferred from tool when unset).",
        ),
    ] = None,
    thresholds_file: Annotated[
        Path | None,
        typer.Option(
            "--thresholds-file",
            help="YAML file with threshold, alert_threshold and comparator.",
        ),
    ] = None,
    skip_duplicate: Annotated[
        bool,
        typer.Option(
            "--skip-duplicate",
            help="Do nothing if the commit is already recorded in the series.",
        ),
    ] = False,
    fail_on_alert: Annotated[
        bool,
        typer.Option(
            "--fail-on-alert",
            help="Exit with code 1 if a regression is detected.",
        ),
    ] = False,
) -> None:
    """Record a benchmark run and check it for regressions.

    Examples:
        benchledger ingest --tool cargo -o output.txt -c commit.json
        benchledger ingest --tool cargo -o output.txt -c event.json --suite "Rust Benchmark"
        benchledger ingest --tool go -o out.txt -c commit.json --fail-on-alert
        benchledger --json ingest --tool pytest -o bench.json -c commit.json
    """
    from benchledger.benchmarks import BenchmarkHistory, build_run, extract_benchmarks
    from benchledger.regression import RegressionThresholds

    settings = _load_settings()
    logging.basicConfig(level=settings.log_level)

    try:
        if thresholds_file is not None:
            thresholds = RegressionThresholds.from_yaml(thresholds_file)
        else:
            thresholds = RegressionThresholds(
                threshold=settings.threshold,
                alert_threshold=settings.alert_threshold,
                comparator=settings.comparator,
            )
        overrides = {
            key: value
            for key, value in {
                "threshold": threshold,
                "alert_threshold": alert_threshold,
                "comparator": comparator,
            }.items()
            if value is not None
        }
        thresholds = dataclasses.replace(thresholds, **overrides)

        try:
            output = output_file.read_text(encoding="utf-8")
        except OSError as e:
            raise _fail(f"Cannot read output file {output_file}: {e}") from e

        run = build_run(tool, _read_commit(commit_file), extract_benchmarks(tool, output))
        history = BenchmarkHistory(
            data_file or settings.data_file,
            thresholds=thresholds,
            repo_url=settings.repo_url,
            global_name=settings.global_name,
        )
        result = history.ingest(run, suite=suite, skip_duplicate=skip_duplicate)
    except (BenchLedgerError, FileNotFoundError) as e:
        raise _fail(str(e)) from e

    name = suite or tool
    if result.skipped or result.regression is None:
        if state["json"]:
            typer.echo(json.dumps({"status": "skipped", "suite": name, "commit": run.commit.id}))
        else:
            typer.echo(f"Commit {run.commit.id} already recorded in {name}, nothing to do.")
        return

    regression = result.regression
    if state["json"]:
        payload = {"status": "recorded", "suite": name, **regression.to_dict()}
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(f"Recorded {len(run.benches)} benchmarks for {name} ({len(result.store.entries[name])} runs)")
        typer.echo(regression.summary())
        if regression.new:
            typer.echo(f"New benchmarks: {', '.join(c.name for c in regression.new)}")

    if fail_on_alert and regression.has_regressions:
        raise typer.Exit(1)


@app.command()
def show(
    suite: Annotated[
        str,
        typer.Argument(help="Series name to list."),
    ],
    data_file: Annotated[
        str | None,
        typer.Option(
            "--data-file",
            "-d",
            help="History artifact to read.",
        ),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-n",
            help="Show only the most recent N runs.",
        ),
    ] = None,
) -> None:
    """List the recorded runs of a series.

    Example:
        benchledger show "Rust Benchmark" --limit 5
    """
    from benchledger.benchmarks import load, series

    settings = _load_settings()
    try:
        store = load(data_file or settings.data_file, global_name=settings.global_name)
        runs = series(store, suite)
    except BenchLedgerError as e:
        raise _fail(str(e)) from e

    if limit is not None:
        runs = runs[-limit:] if limit > 0 else ()

    if state["json"]:
        typer.echo(json.dumps([run.to_dict() for run in runs], indent=2, ensure_ascii=False))
        return

    for run in runs:
        when = datetime.fromtimestamp(run.date / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        typer.echo(f"{when}  {run.commit.id[:7]}  {run.tool}  {len(run.benches)} benchmarks")


if __name__ == "__main__":
    app()
