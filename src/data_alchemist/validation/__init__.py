"""Dataset validation and consistency scoring.

This package checks client, worker and task datasets for structural problems,
bad field values and cross-dataset inconsistencies, optionally merges in an
advisory oracle's opinion, and produces a ValidationResult per dataset.

Main entry points:
    - validate_dataset(): Validate one dataset against its siblings
    - validate_workspace(): Validate all three datasets
    - validate_dataset_sync(): Blocking wrapper around validate_dataset()

Example:
    from data_alchemist.models import Workspace
    from data_alchemist.validation import print_validation_result, validate_dataset_sync

    workspace = Workspace.from_rows(clients=clients, workers=workers, tasks=tasks)
    result = validate_dataset_sync(workspace.tasks, workspace)
    print_validation_result(result)
"""

from data_alchemist.validation.advisory import (
    AdvisoryIssue,
    AdvisoryOracle,
    AdvisoryReport,
    FixSuggestion,
    FixSuggestionList,
)
from data_alchemist.validation.base import (
    Finding,
    IssueCategory,
    IssueType,
    RowValidator,
    Severity,
    Tally,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
    WorkspaceReport,
)
from data_alchemist.validation.engine import (
    export_validation_report,
    print_validation_result,
    print_workspace_report,
    run_local_checks,
    validate_dataset,
    validate_dataset_sync,
    validate_workspace,
)
from data_alchemist.validation.schemas import (
    REQUIRED_FIELDS,
    get_id_field,
    get_required_fields,
    list_entity_kinds,
)

__all__ = [
    "REQUIRED_FIELDS",
    "AdvisoryIssue",
    "AdvisoryOracle",
    "AdvisoryReport",
    "Finding",
    "FixSuggestion",
    "FixSuggestionList",
    "IssueCategory",
    "IssueType",
    "RowValidator",
    "Severity",
    "Tally",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
    "WorkspaceReport",
    "export_validation_report",
    "get_id_field",
    "get_required_fields",
    "list_entity_kinds",
    "print_validation_result",
    "print_workspace_report",
    "run_local_checks",
    "validate_dataset",
    "validate_dataset_sync",
    "validate_workspace",
]
