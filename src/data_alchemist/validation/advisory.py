"""Advisory merge: folding an external oracle's opinion into a local verdict.

The oracle is optional and best-effort. It may be absent, it may raise, and it
may return something that only partly matches the expected shape. None of that
ever becomes a validation issue: a failed call is logged and its enrichment is
dropped, leaving the local result as it was.

Two calls are made, one after the other:

1. ``validate`` returns issues and a confidence score. Its errors and warnings
   are appended to the local lists and the final confidence is the lower of the
   two scores.
2. ``suggest_fixes`` is asked only when there are errors. Each returned
   suggestion replaces the suggestion on every error with the same
   ``(row, column)``; anything else is discarded.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from data_alchemist.models import Dataset, EntityKind
from data_alchemist.validation.base import (
    INITIAL_CONFIDENCE,
    IssueType,
    Severity,
    Tally,
    ValidationIssue,
)

logger = logging.getLogger(__name__)


class AdvisoryIssue(BaseModel):
    """An issue reported by the advisory oracle."""

    row: int = Field(ge=0, description="1-based row number, or 0 for a dataset-level issue")
    column: str = Field(default="", description="Column name, or empty when not column-specific")
    message: str = Field(description="Human-readable description of the issue")
    suggestion: str | None = Field(default=None, description="Suggested fix, if any")

    @field_validator("column", mode="before")
    @classmethod
    def _blank_column(cls, value: Any) -> Any:
        return "" if value is None else value


class AdvisoryReport(BaseModel):
    """Semantic validation returned by the advisory oracle."""

    errors: list[AdvisoryIssue] = Field(default_factory=list, description="Definite problems")
    warnings: list[AdvisoryIssue] = Field(default_factory=list, description="Suspicious values")
    confidence: int = Field(
        default=INITIAL_CONFIDENCE,
        ge=0,
        le=100,
        description="Overall data quality score from 0 to 100",
    )


class FixSuggestion(BaseModel):
    """A suggested replacement value for one cell."""

    row: int = Field(description="1-based row number of the error being fixed, 0 for dataset-level")
    column: str = Field(description="Column of the error being fixed")
    suggestion: str = Field(description="Suggested value or remediation")

    @field_validator("suggestion", mode="before")
    @classmethod
    def _render_value(cls, value: Any) -> Any:
        # Oracles often answer with the bare value (3, [1, 2]) rather than text
        if isinstance(value, bool):
            return json.dumps(value)
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, (list, dict)):
            return json.dumps(value)
        return value


class FixSuggestionList(BaseModel):
    """Fix suggestions returned by the advisory oracle."""

    fixes: list[FixSuggestion] = Field(default_factory=list)


@runtime_checkable
class AdvisoryOracle(Protocol):
    """External semantic validation and fix suggestion service.

    Either method may return a pydantic model, plain JSON-like data, or JSON
    text. Shapes are checked on receipt.
    """

    async def validate(self, kind: EntityKind, rows: list[dict[str, Any]]) -> Any:
        """Holistically validate rows of one kind."""
        ...

    async def suggest_fixes(
        self,
        kind: EntityKind,
        rows: list[dict[str, Any]],
        errors: Sequence[ValidationIssue],
    ) -> Any:
        """Suggest replacement values for the given errors."""
        ...


_INT = TypeAdapter(int)


def _parse_json_text(raw: str) -> Any:
    """Parse JSON text, tolerating a Markdown code fence around it."""
    raw = raw.strip()
    if raw.startswith("```json"):
        raw = raw[7:]
    if raw.startswith("```"):
        raw = raw[3:]
    if raw.endswith("```"):
        raw = raw[:-3]
    raw = raw.strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def _load_payload(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        return _parse_json_text(payload)
    return payload


def _parse_items(raw: Any, model: type[BaseModel]) -> list[Any]:
    """Validate list items one by one, dropping the ones that don't fit."""
    if not isinstance(raw, list):
        return []
    items = []
    for item in raw:
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Dropping unusable advisory item {item!r}: {e.error_count()} errors")
    return items


def _parse_confidence(raw: Any) -> int:
    """Read the oracle's score. Missing or out-of-range means no opinion."""
    if raw is None or isinstance(raw, bool):
        return INITIAL_CONFIDENCE
    # Scores are whole points; fractional scores round down
    if isinstance(raw, float) and math.isfinite(raw):
        raw = math.floor(raw)
    try:
        value = _INT.validate_python(raw)
    except ValidationError:
        return INITIAL_CONFIDENCE
    if not 0 <= value <= 100:
        return INITIAL_CONFIDENCE
    return value


def parse_advisory_report(payload: Any) -> AdvisoryReport | None:
    """Salvage an AdvisoryReport from whatever the oracle returned.

    Returns:
        The usable parts as an AdvisoryReport, or None when the payload is not
        an object at all
    """
    data = _load_payload(payload)
    if not isinstance(data, Mapping):
        return None
    return AdvisoryReport(
        errors=_parse_items(data.get("errors"), AdvisoryIssue),
        warnings=_parse_items(data.get("warnings"), AdvisoryIssue),
        confidence=_parse_confidence(data.get("confidence")),
    )


def parse_fix_suggestions(payload: Any) -> list[FixSuggestion] | None:
    """Salvage fix suggestions from a list or a ``{"fixes": [...]}`` object.

    Returns:
        Usable suggestions, or None when the payload has no list to read
    """
    data = _load_payload(payload)
    if isinstance(data, Mapping):
        data = data.get("fixes")
    if not isinstance(data, list):
        return None
    return _parse_items(data, FixSuggestion)


async def request_advisory_report(oracle: AdvisoryOracle, dataset: Dataset) -> AdvisoryReport | None:
    """Ask the oracle to validate a dataset. Returns None on any failure."""
    try:
        payload = await oracle.validate(dataset.kind, dataset.to_payload())
    except Exception as e:
        logger.warning(f"Advisory validation failed for {dataset.kind.value}: {e}")
        return None

    report = parse_advisory_report(payload)
    if report is None:
        logger.warning(f"Advisory validation response for {dataset.kind.value} was not usable")
    return report


async def request_fix_suggestions(
    oracle: AdvisoryOracle,
    dataset: Dataset,
    errors: Sequence[ValidationIssue],
) -> list[FixSuggestion]:
    """Ask the oracle for fixes to the given errors. Returns [] on any failure."""
    try:
        payload = await oracle.suggest_fixes(dataset.kind, dataset.to_payload(), errors)
    except Exception as e:
        logger.warning(f"Advisory fix suggestion failed for {dataset.kind.value}: {e}")
        return []

    fixes = parse_fix_suggestions(payload)
    if fixes is None:
        logger.warning(f"Advisory fix suggestion response for {dataset.kind.value} was not usable")
        return []
    return fixes


def _to_issue(item: AdvisoryIssue, severity: Severity) -> ValidationIssue:
    return ValidationIssue(
        row=item.row,
        column=item.column,
        message=item.message,
        severity=severity,
        suggestion=item.suggestion,
        issue_type=IssueType.ADVISORY,
    )


def merge_advisory_report(tally: Tally, report: AdvisoryReport) -> Tally:
    """Append the oracle's issues and cap confidence at its score.

    Issues land in the list they were reported in, whatever severity the
    oracle attached. Nothing is deduplicated against local findings.
    """
    return Tally(
        errors=tally.errors + tuple(_to_issue(i, Severity.ERROR) for i in report.errors),
        warnings=tally.warnings + tuple(_to_issue(i, Severity.WARNING) for i in report.warnings),
        confidence=min(tally.confidence, report.confidence),
    )


def apply_fix_suggestions(
    errors: Sequence[ValidationIssue],
    fixes: Sequence[FixSuggestion],
) -> tuple[ValidationIssue, ...]:
    """Attach suggestions to errors by exact ``(row, column)`` match.

    The first suggestion for a location wins. Errors without a match keep the
    suggestion they already had.
    """
    by_location: dict[tuple[int, str], str] = {}
    for fix in fixes:
        by_location.setdefault((fix.row, fix.column), fix.suggestion)

    return tuple(
        error.with_suggestion(by_location[(error.row, error.column)])
        if (error.row, error.column) in by_location
        else error
        for error in errors
    )


async def merge_advisory(tally: Tally, dataset: Dataset, oracle: AdvisoryOracle | None) -> Tally:
    """Run both advisory calls and fold their results into the tally.

    Args:
        tally: Local results of the pass
        dataset: Dataset being validated, sent to the oracle
        oracle: Advisory oracle, or None when none is configured

    Returns:
        A new Tally; the input is returned unchanged when the oracle is absent
        or both calls fail
    """
    if oracle is None:
        return tally

    report = await request_advisory_report(oracle, dataset)
    if report is not None:
        tally = merge_advisory_report(tally, report)

    if tally.errors:
        fixes = await request_fix_suggestions(oracle, dataset, tally.errors)
        if fixes:
            tally = Tally(
                errors=apply_fix_suggestions(tally.errors, fixes),
                warnings=tally.warnings,
                confidence=tally.confidence,
            )

    return tally
