#!/usr/bin/env python3
"""Validate client, worker and task datasets before allocation export.

Checks each dataset for missing columns, bad values and duplicate IDs, then
cross-checks them: requested tasks exist, required skills are covered, enough
qualified workers exist for each task, and phase capacity is not exceeded.
An advisory model adds a semantic review when an API key is configured.

Usage:
    uv run python -m data_alchemist.scripts.validate_datasets --clients clients.csv --workers workers.csv --tasks tasks.csv
    uv run python -m data_alchemist.scripts.validate_datasets --tasks tasks.csv --workers workers.csv --no-advisory
    uv run python -m data_alchemist.scripts.validate_datasets ... --rules rules.json --output report.json
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from data_alchemist.advisory import build_advisory_oracle
from data_alchemist.models import AllocationConfig, Dataset, EntityKind, PrioritySettings, Workspace
from data_alchemist.parsing import load_allocation_config, load_dataset
from data_alchemist.validation import (
    export_validation_report,
    print_workspace_report,
    validate_workspace,
)

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _load(path: Path | None, kind: EntityKind) -> Dataset:
    if path is None:
        return Dataset(kind=kind)
    try:
        return load_dataset(path, kind)
    except ValueError as e:
        raise click.UsageError(str(e)) from e


def _load_config(path: Path) -> AllocationConfig:
    try:
        return load_allocation_config(path)
    except ValueError as e:
        raise click.UsageError(f"Invalid rules file {path}: {e}") from e


@click.command()
@click.option(
    "--clients",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Clients CSV/TSV file",
)
@click.option(
    "--workers",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Workers CSV/TSV file",
)
@click.option(
    "--tasks",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Tasks CSV/TSV file",
)
@click.option(
    "--rules",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Rules JSON file ({\"rules\": [...], \"priorities\": {...}}), carried into the workspace",
)
@click.option(
    "--no-advisory",
    is_flag=True,
    help="Skip the advisory model and run local checks only",
)
@click.option(
    "--model",
    type=str,
    default=None,
    help="PydanticAI model identifier for the advisory review",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Export report to JSON file",
)
@click.option(
    "--fail-on-error",
    is_flag=True,
    help="Exit with status 1 when any dataset has errors",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
def main(
    clients: Path | None,
    workers: Path | None,
    tasks: Path | None,
    rules: Path | None,
    no_advisory: bool,
    model: str | None,
    output: Path | None,
    fail_on_error: bool,
    debug: bool,
) -> None:
    """Validate allocation datasets and report errors, warnings and confidence.

    Only the datasets given are validated, but every given dataset is checked
    against all the others:

    \b
    - clients: RequestedTaskIDs must exist in tasks
    - tasks: RequiredSkills should be held by some worker
    - tasks: MaxConcurrent and phase load must fit the workers
    """
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    paths = {EntityKind.CLIENTS: clients, EntityKind.WORKERS: workers, EntityKind.TASKS: tasks}
    kinds = [kind for kind, path in paths.items() if path is not None]
    if not kinds:
        raise click.UsageError("Specify at least one of --clients, --workers, --tasks.")

    config = _load_config(rules) if rules is not None else None
    workspace = Workspace(
        clients=_load(clients, EntityKind.CLIENTS),
        workers=_load(workers, EntityKind.WORKERS),
        tasks=_load(tasks, EntityKind.TASKS),
        rules=tuple(config.rules) if config else (),
        priorities=config.priorities if config else PrioritySettings(),
    )

    oracle = None if no_advisory else build_advisory_oracle(model)
    if oracle is None:
        click.echo("Advisory review disabled; running local checks only.")

    report = asyncio.run(validate_workspace(workspace, oracle, kinds=kinds))
    print_workspace_report(report)

    if output is not None:
        export_validation_report(report, output)
        click.echo(f"\nExported report to {output}")

    if fail_on_error and report.total_errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
