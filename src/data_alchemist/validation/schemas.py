"""Dataset validation schemas.

Required columns, identifier columns and confidence penalties for each entity kind.
"""

from __future__ import annotations

from data_alchemist.models import EntityKind
from data_alchemist.validation.base import IssueType

REQUIRED_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.CLIENTS: (
        "ClientID",
        "ClientName",
        "PriorityLevel",
        "RequestedTaskIDs",
        "GroupTag",
        "AttributesJSON",
    ),
    EntityKind.WORKERS: (
        "WorkerID",
        "WorkerName",
        "Skills",
        "AvailableSlots",
        "MaxLoadPerPhase",
        "WorkerGroup",
        "QualificationLevel",
    ),
    EntityKind.TASKS: (
        "TaskID",
        "TaskName",
        "Category",
        "Duration",
        "RequiredSkills",
        "PreferredPhases",
        "MaxConcurrent",
    ),
}

ID_FIELDS: dict[EntityKind, str] = {
    EntityKind.CLIENTS: "ClientID",
    EntityKind.WORKERS: "WorkerID",
    EntityKind.TASKS: "TaskID",
}

# Confidence points deducted per finding
PENALTIES: dict[IssueType, int] = {
    IssueType.MISSING_COLUMNS: 20,
    IssueType.DUPLICATE_ID: 5,
    IssueType.INVALID_VALUE: 5,
    IssueType.INVALID_FORMAT: 5,
    IssueType.UNKNOWN_REFERENCE: 5,
    IssueType.UNCOVERED_SKILL: 2,
    IssueType.INSUFFICIENT_WORKERS: 5,
    IssueType.PHASE_OVERSATURATED: 10,
    # Advisory findings lower confidence only through the oracle's own score
    IssueType.ADVISORY: 0,
}

PRIORITY_LEVEL_RANGE = (1, 5)


def get_required_fields(kind: EntityKind) -> tuple[str, ...]:
    """Get the required columns for an entity kind, in declaration order."""
    return REQUIRED_FIELDS[kind]


def get_id_field(kind: EntityKind) -> str:
    """Get the identifier column for an entity kind."""
    return ID_FIELDS[kind]


def get_penalty(issue_type: IssueType) -> int:
    """Get the confidence penalty for an issue type."""
    return PENALTIES[issue_type]


def list_entity_kinds() -> list[str]:
    """List all entity kinds with defined schemas."""
    return [kind.value for kind in REQUIRED_FIELDS]
