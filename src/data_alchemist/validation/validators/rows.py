"""Row-level validators.

One validator per entity kind, plus the duplicate-identifier check every kind
shares. For each row the duplicate check is emitted first, then the kind's own
checks in a fixed order; rows are visited in dataset order.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import TYPE_CHECKING, Any

from data_alchemist.models import Client, EntityKind, Task, Worker
from data_alchemist.validation.base import Finding, IssueType, RowValidator, Severity
from data_alchemist.validation.schemas import PRIORITY_LEVEL_RANGE, get_id_field, list_entity_kinds
from data_alchemist.validation.validators.common import (
    as_list,
    contains,
    is_integer,
    is_positive_integer,
    is_positive_integer_list,
    is_structured_data,
    make_finding,
)

if TYPE_CHECKING:
    from data_alchemist.models import Dataset, Workspace

logger = logging.getLogger(__name__)

ARRAY_SUGGESTION = "Correct to an array of positive integers (e.g., [1, 2, 3])"


class ClientRowValidator(RowValidator[Client]):
    """Validate a client row.

    Checks:
        1. PriorityLevel is an integer from 1 to 5
        2. Every RequestedTaskIDs entry names an existing task (one finding per unknown id)
        3. AttributesJSON is valid structured data
    """

    def __init__(self, workspace: Workspace):
        super().__init__(workspace)
        self.known_task_ids = frozenset(
            task.identifier for task in workspace.tasks.records() if isinstance(task.identifier, Hashable)
        )

    @property
    def name(self) -> str:
        return "client_row"

    def validate(self, record: Client, row: int) -> list[Finding]:
        findings: list[Finding] = []

        low, high = PRIORITY_LEVEL_RANGE
        priority = record.priority_level
        if not is_integer(priority) or not low <= priority <= high:
            findings.append(
                make_finding(
                    IssueType.INVALID_VALUE,
                    row=row,
                    column="PriorityLevel",
                    message=f"PriorityLevel must be an integer between {low} and {high}",
                    suggestion=f"Set PriorityLevel to a value between {low} and {high}",
                )
            )

        for task_id in as_list(record.requested_task_ids):
            if not contains(self.known_task_ids, task_id):
                findings.append(
                    make_finding(
                        IssueType.UNKNOWN_REFERENCE,
                        row=row,
                        column="RequestedTaskIDs",
                        message=f"Unknown TaskID: {task_id}",
                    )
                )

        if not is_structured_data(record.attributes_json):
            findings.append(
                make_finding(
                    IssueType.INVALID_FORMAT,
                    row=row,
                    column="AttributesJSON",
                    message="Invalid JSON in AttributesJSON",
                    suggestion="Provide valid JSON or remove invalid content",
                )
            )

        return findings


class WorkerRowValidator(RowValidator[Worker]):
    """Validate a worker row.

    Checks:
        1. AvailableSlots is a non-empty list of positive integers
        2. MaxLoadPerPhase is a positive integer
    """

    @property
    def name(self) -> str:
        return "worker_row"

    def validate(self, record: Worker, row: int) -> list[Finding]:
        findings: list[Finding] = []

        if not is_positive_integer_list(record.available_slots, allow_empty=False):
            findings.append(
                make_finding(
                    IssueType.INVALID_VALUE,
                    row=row,
                    column="AvailableSlots",
                    message="AvailableSlots must be an array of positive integers",
                    suggestion=ARRAY_SUGGESTION,
                )
            )

        if not is_positive_integer(record.max_load_per_phase):
            findings.append(
                make_finding(
                    IssueType.INVALID_VALUE,
                    row=row,
                    column="MaxLoadPerPhase",
                    message="MaxLoadPerPhase must be a positive integer",
                    suggestion="Set MaxLoadPerPhase to a positive integer",
                )
            )

        return findings


class TaskRowValidator(RowValidator[Task]):
    """Validate a task row.

    Checks:
        1. Duration is a positive integer
        2. PreferredPhases is a list of positive integers
        3. MaxConcurrent is a positive integer
        4. Every RequiredSkills entry is held by some worker (warning, one per skill)
    """

    def __init__(self, workspace: Workspace):
        super().__init__(workspace)
        skills: set[Any] = set()
        for worker in workspace.workers.records():
            skills.update(s for s in as_list(worker.skills) if isinstance(s, Hashable))
        self.worker_skills = frozenset(skills)

    @property
    def name(self) -> str:
        return "task_row"

    def validate(self, record: Task, row: int) -> list[Finding]:
        findings: list[Finding] = []

        if not is_positive_integer(record.duration):
            findings.append(
                make_finding(
                    IssueType.INVALID_VALUE,
                    row=row,
                    column="Duration",
                    message="Duration must be a positive integer",
                    suggestion="Set Duration to a positive integer",
                )
            )

        if not is_positive_integer_list(record.preferred_phases):
            findings.append(
                make_finding(
                    IssueType.INVALID_VALUE,
                    row=row,
                    column="PreferredPhases",
                    message="PreferredPhases must be an array of positive integers",
                    suggestion=ARRAY_SUGGESTION,
                )
            )

        if not is_positive_integer(record.max_concurrent):
            findings.append(
                make_finding(
                    IssueType.INVALID_VALUE,
                    row=row,
                    column="MaxConcurrent",
                    message="MaxConcurrent must be a positive integer",
                    suggestion="Set MaxConcurrent to a positive integer",
                )
            )

        for skill in as_list(record.required_skills):
            if not contains(self.worker_skills, skill):
                findings.append(
                    make_finding(
                        IssueType.UNCOVERED_SKILL,
                        row=row,
                        column="RequiredSkills",
                        message=f"No worker has the required skill: {skill}",
                        suggestion="Add a worker with this skill or remove it from RequiredSkills",
                        severity=Severity.WARNING,
                    )
                )

        return findings


# Registry of entity kinds to row validator classes
ROW_VALIDATORS: dict[EntityKind, type[RowValidator[Any]]] = {
    EntityKind.CLIENTS: ClientRowValidator,
    EntityKind.WORKERS: WorkerRowValidator,
    EntityKind.TASKS: TaskRowValidator,
}


def get_row_validator(kind: EntityKind, workspace: Workspace) -> RowValidator[Any]:
    """Create the row validator for an entity kind.

    Raises:
        ValueError: If no validator is registered for the kind
    """
    if kind not in ROW_VALIDATORS:
        raise ValueError(f"Unknown entity kind: {kind}. Available: {list_entity_kinds()}")
    return ROW_VALIDATORS[kind](workspace)


def _id_key(identifier: Any) -> Hashable:
    return identifier if isinstance(identifier, Hashable) else repr(identifier)


def check_rows(dataset: Dataset, workspace: Workspace) -> list[Finding]:
    """Run the duplicate-identifier check and the kind's row validator over every row.

    Args:
        dataset: Dataset being validated
        workspace: Sibling datasets for reference lookups

    Returns:
        Findings in row order, duplicate check first within each row
    """
    validator = get_row_validator(dataset.kind, workspace)
    id_field = get_id_field(dataset.kind)
    seen: set[Hashable] = set()
    findings: list[Finding] = []

    for row_num, record in enumerate(dataset.records(), start=1):
        identifier = record.identifier
        if identifier is not None:
            key = _id_key(identifier)
            if key in seen:
                findings.append(
                    make_finding(
                        IssueType.DUPLICATE_ID,
                        row=row_num,
                        column=id_field,
                        message=f"Duplicate {id_field}: {identifier}",
                    )
                )
            else:
                seen.add(key)

        findings.extend(validator.validate(record, row_num))

    logger.debug(f"{validator.name}: {len(dataset)} rows, {len(findings)} findings")
    return findings
