"""Base classes for the validation framework.

This module provides the core data structures (issues, findings, results) and
the abstract base class for row validators.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from data_alchemist.models import EntityKind, Workspace

INITIAL_CONFIDENCE = 100


class Severity(str, Enum):
    """Severity levels for validation issues."""

    ERROR = "error"  # Dataset is not valid while this stands
    WARNING = "warning"  # Soft constraint, reported but never blocks


class IssueCategory(str, Enum):
    """Broad families of issues, by what the check had to look at."""

    STRUCTURAL = "structural"  # Required columns missing
    FIELD = "field"  # Single row, single column
    REFERENTIAL = "referential"  # Needs a sibling dataset
    CAPACITY = "capacity"  # Aggregate over the whole dataset
    ADVISORY = "advisory"  # Reported by the advisory oracle


class IssueType(str, Enum):
    """Types of validation issues."""

    # Structure
    MISSING_COLUMNS = "missing_columns"

    # Single field
    DUPLICATE_ID = "duplicate_id"
    INVALID_VALUE = "invalid_value"  # Wrong type or out of range
    INVALID_FORMAT = "invalid_format"  # Payload does not parse

    # Cross-dataset
    UNKNOWN_REFERENCE = "unknown_reference"
    UNCOVERED_SKILL = "uncovered_skill"
    INSUFFICIENT_WORKERS = "insufficient_workers"

    # Aggregate
    PHASE_OVERSATURATED = "phase_oversaturated"

    ADVISORY = "advisory"

    @property
    def category(self) -> IssueCategory:
        """The family this issue type belongs to."""
        return _CATEGORIES[self]


_CATEGORIES: dict[IssueType, IssueCategory] = {
    IssueType.MISSING_COLUMNS: IssueCategory.STRUCTURAL,
    IssueType.DUPLICATE_ID: IssueCategory.FIELD,
    IssueType.INVALID_VALUE: IssueCategory.FIELD,
    IssueType.INVALID_FORMAT: IssueCategory.FIELD,
    IssueType.UNKNOWN_REFERENCE: IssueCategory.REFERENTIAL,
    IssueType.UNCOVERED_SKILL: IssueCategory.REFERENTIAL,
    IssueType.INSUFFICIENT_WORKERS: IssueCategory.REFERENTIAL,
    IssueType.PHASE_OVERSATURATED: IssueCategory.CAPACITY,
    IssueType.ADVISORY: IssueCategory.ADVISORY,
}


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation issue found in a dataset.

    Attributes:
        row: Row number in the dataset (1-indexed); 0 for dataset-level issues
        column: Column name where the issue was found; "" when not column-specific
        message: Human-readable description of the issue
        severity: How serious the issue is
        suggestion: Suggested fix (if applicable)
        issue_type: Category of the issue
    """

    row: int
    column: str
    message: str
    severity: Severity
    suggestion: str | None = None
    issue_type: IssueType = IssueType.INVALID_VALUE

    def __str__(self) -> str:
        """Format issue for display."""
        loc = f"row {self.row}" if self.row else "dataset"
        sev = self.severity.value.upper()
        col = f" {self.column}:" if self.column else ""
        return f"[{sev}] {loc} [{self.issue_type.value}]{col} {self.message}"

    def with_suggestion(self, suggestion: str) -> ValidationIssue:
        """Return a copy carrying a different suggestion."""
        return replace(self, suggestion=suggestion)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape; ``suggestion`` is omitted when there is none."""
        data: dict[str, Any] = {
            "row": self.row,
            "column": self.column,
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass(frozen=True)
class Finding:
    """An issue together with the confidence penalty it carries."""

    issue: ValidationIssue
    penalty: int = 0


@dataclass(frozen=True)
class Tally:
    """Running totals of a validation pass.

    Never updated in place: ``extend`` returns a new Tally, so each pipeline
    stage can be run and inspected on its own.
    """

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    confidence: int = INITIAL_CONFIDENCE

    def extend(self, findings: Iterable[Finding]) -> Tally:
        """Fold findings in order. Confidence has no lower bound here."""
        findings = list(findings)
        if not findings:
            return self
        return Tally(
            errors=self.errors + tuple(f.issue for f in findings if f.issue.severity == Severity.ERROR),
            warnings=self.warnings + tuple(f.issue for f in findings if f.issue.severity == Severity.WARNING),
            confidence=self.confidence - sum(f.penalty for f in findings),
        )


@dataclass(frozen=True)
class ValidationSummary:
    """Counts reported alongside a validation result."""

    total_errors: int = 0
    total_warnings: int = 0
    valid_rows: int = 0
    total_rows: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalErrors": self.total_errors,
            "totalWarnings": self.total_warnings,
            "validRows": self.valid_rows,
            "totalRows": self.total_rows,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one dataset.

    Attributes:
        errors: Error issues, in emission order
        warnings: Warning issues, in emission order
        confidence: Health score starting at 100; not floored at 0
        summary: Issue and row counts
    """

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    confidence: int = INITIAL_CONFIDENCE
    summary: ValidationSummary = field(default_factory=ValidationSummary)

    @classmethod
    def from_tally(cls, tally: Tally, total_rows: int) -> ValidationResult:
        """Close out a pass.

        ``valid_rows`` is total rows minus the number of errors, not the number
        of distinct offending rows: a row with two errors counts twice and
        dataset-level errors count too. Downstream consumers read this number
        as-is, so it is kept.
        """
        return cls(
            errors=tally.errors,
            warnings=tally.warnings,
            confidence=tally.confidence,
            summary=ValidationSummary(
                total_errors=len(tally.errors),
                total_warnings=len(tally.warnings),
                valid_rows=total_rows - len(tally.errors),
                total_rows=total_rows,
            ),
        )

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def count_by_category(self) -> dict[IssueCategory, int]:
        """Count errors and warnings per issue category."""
        counts: dict[IssueCategory, int] = {}
        for issue in (*self.errors, *self.warnings):
            category = issue.issue_type.category
            counts[category] = counts.get(category, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "confidence": self.confidence,
            "summary": self.summary.to_dict(),
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


@dataclass(frozen=True)
class WorkspaceReport:
    """Validation results for every dataset in a workspace.

    Attributes:
        results: One result per validated entity kind
        export_ready: All three datasets are non-empty and none has errors
    """

    results: dict[EntityKind, ValidationResult] = field(default_factory=dict)
    export_ready: bool = False

    @property
    def total_errors(self) -> int:
        return sum(r.error_count for r in self.results.values())

    @property
    def total_warnings(self) -> int:
        return sum(r.warning_count for r in self.results.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "exportReady": self.export_ready,
            "totalErrors": self.total_errors,
            "totalWarnings": self.total_warnings,
            "results": {kind.value: result.to_dict() for kind, result in self.results.items()},
        }


EntityT = TypeVar("EntityT")


class RowValidator(ABC, Generic[EntityT]):
    """Abstract base class for per-kind row validators.

    A validator is created once per pass with the workspace it cross-references,
    so lookups against sibling datasets are built once and shared across rows.

    Subclasses must implement:
        - validate(): Check one record and return findings
        - name: Property returning the validator's name
    """

    def __init__(self, workspace: Workspace):
        """Initialize with the workspace being validated.

        Args:
            workspace: All three datasets, read-only for the pass
        """
        self.workspace = workspace

    @abstractmethod
    def validate(self, record: EntityT, row: int) -> list[Finding]:
        """Validate a single record.

        Args:
            record: Entity record for the row
            row: Row number (1-indexed)

        Returns:
            List of Finding objects (empty if valid), in a fixed check order
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return validator name for reporting."""
