"""Validation engine for orchestrating dataset validation.

This module provides the main entry points:
- validate_dataset(): Validate one dataset against its siblings
- validate_dataset_sync(): Same, for callers without an event loop
- validate_workspace(): Validate all three datasets of a workspace

A pass runs four stages strictly in order, each adding to what the previous
ones found: required columns, row checks, cross-entity checks, then the
optional advisory merge. The local stages are pure; only the advisory merge
awaits. Every call is independent and returns a fresh result.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from pathlib import Path  # noqa: TC003 - Path is used at runtime

from data_alchemist.models import Dataset, EntityKind, Workspace
from data_alchemist.validation.advisory import AdvisoryOracle, merge_advisory
from data_alchemist.validation.base import Tally, ValidationResult, WorkspaceReport
from data_alchemist.validation.validators.cross_entity import check_cross_entity
from data_alchemist.validation.validators.rows import check_rows
from data_alchemist.validation.validators.schema_gate import check_required_fields

logger = logging.getLogger(__name__)


def run_local_checks(dataset: Dataset, workspace: Workspace) -> Tally:
    """Run the deterministic stages and fold their findings.

    Args:
        dataset: Dataset to validate
        workspace: All three datasets, for cross-referencing

    Returns:
        Tally of errors, warnings and confidence, in stage order
    """
    tally = Tally().extend(check_required_fields(dataset))
    tally = tally.extend(check_rows(dataset, workspace))
    tally = tally.extend(check_cross_entity(dataset, workspace))
    logger.debug(
        f"{dataset.kind.value}: local checks found {len(tally.errors)} errors, "
        f"{len(tally.warnings)} warnings, confidence {tally.confidence}"
    )
    return tally


async def validate_dataset(
    dataset: Dataset,
    workspace: Workspace,
    oracle: AdvisoryOracle | None = None,
) -> ValidationResult:
    """Validate one dataset.

    Args:
        dataset: Dataset to validate. Usually ``workspace.dataset(dataset.kind)``,
            but an edited copy can be checked against the current siblings.
        workspace: All three datasets, read-only for the pass
        oracle: Optional advisory oracle

    Returns:
        ValidationResult for the dataset
    """
    tally = run_local_checks(dataset, workspace)
    tally = await merge_advisory(tally, dataset, oracle)
    result = ValidationResult.from_tally(tally, total_rows=len(dataset))

    logger.info(
        f"Validated {dataset.kind.value}: {len(dataset)} rows, {result.error_count} errors, "
        f"{result.warning_count} warnings, confidence {result.confidence}"
    )
    return result


def validate_dataset_sync(
    dataset: Dataset,
    workspace: Workspace,
    oracle: AdvisoryOracle | None = None,
) -> ValidationResult:
    """Synchronous version of validate_dataset."""
    return asyncio.run(validate_dataset(dataset, workspace, oracle))


async def validate_workspace(
    workspace: Workspace,
    oracle: AdvisoryOracle | None = None,
    kinds: Iterable[EntityKind] | None = None,
) -> WorkspaceReport:
    """Validate several datasets of a workspace concurrently.

    Args:
        workspace: All three datasets
        oracle: Optional advisory oracle shared by every pass
        kinds: Entity kinds to validate (default: all three)

    Returns:
        WorkspaceReport with one result per kind. ``export_ready`` requires every
        kind to be validated, non-empty and free of errors.
    """
    selected = list(EntityKind) if kinds is None else [EntityKind(k) for k in kinds]
    results = await asyncio.gather(
        *(validate_dataset(workspace.dataset(kind), workspace, oracle) for kind in selected)
    )
    by_kind = dict(zip(selected, results, strict=True))

    export_ready = (
        set(by_kind) == set(EntityKind)
        and all(len(workspace.dataset(kind)) > 0 for kind in EntityKind)
        and all(result.is_valid for result in by_kind.values())
    )
    return WorkspaceReport(results=by_kind, export_ready=export_ready)


def print_validation_result(result: ValidationResult, kind: EntityKind | None = None) -> None:
    """Print human-readable validation result for one dataset.

    Args:
        result: ValidationResult to print
        kind: Entity kind, used in the heading
    """
    title = f"VALIDATION RESULT: {kind.value}" if kind is not None else "VALIDATION RESULT"
    print(f"\n{title}")
    print("=" * 60)
    print(f"Rows:       {result.summary.valid_rows} / {result.summary.total_rows} valid")
    print(f"Confidence: {result.confidence}%")
    print(f"Status:     {'valid' if result.is_valid else 'invalid'}")
    print()

    if result.errors:
        print(f"ERRORS ({result.error_count}):")
        for issue in result.errors:
            print(f"  {issue}")
            if issue.suggestion:
                print(f"    -> {issue.suggestion}")
        print()

    if result.warnings:
        print(f"WARNINGS ({result.warning_count}):")
        for issue in result.warnings:
            print(f"  {issue}")
            if issue.suggestion:
                print(f"    -> {issue.suggestion}")
        print()

    # Summary by category
    counts = result.count_by_category()
    if counts:
        print("Summary by category:")
        for category, count in sorted(counts.items(), key=lambda item: item[0].value):
            print(f"  {category.value}: {count}")
        print()


def print_workspace_report(report: WorkspaceReport) -> None:
    """Print every dataset's result followed by workspace totals."""
    for kind, result in report.results.items():
        print_validation_result(result, kind)

    print("SUMMARY")
    print("=" * 60)
    print(f"Total errors:   {report.total_errors}")
    print(f"Total warnings: {report.total_warnings}")
    print(f"Export ready:   {'yes' if report.export_ready else 'no'}")


def export_validation_report(report: WorkspaceReport, path: Path) -> None:
    """Export workspace report to JSON file.

    Args:
        report: WorkspaceReport to export
        path: Output file path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2)

    logger.info(f"Exported validation report to {path}")
