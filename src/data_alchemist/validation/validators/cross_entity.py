"""Cross-entity feasibility checks.

These need the task dataset together with the full worker dataset:

- Concurrency: enough workers hold every skill a task requires to run it at its
  MaxConcurrent.
- Phase capacity: the total duration of tasks preferring a phase fits within the
  summed MaxLoadPerPhase of workers available in that phase.

Only task passes with a non-empty worker dataset do anything here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Sequence
from typing import TYPE_CHECKING

from data_alchemist.models import EntityKind, Task, Worker
from data_alchemist.validation.base import Finding, IssueType
from data_alchemist.validation.validators.common import (
    as_list,
    contains,
    format_number,
    is_integer,
    is_number,
    make_finding,
)

if TYPE_CHECKING:
    from data_alchemist.models import Dataset, Workspace

logger = logging.getLogger(__name__)


def _skill_set(worker: Worker) -> frozenset[Hashable]:
    return frozenset(s for s in as_list(worker.skills) if isinstance(s, Hashable))


def _phase_set(values: object) -> set[int]:
    return {int(p) for p in as_list(values) if is_integer(p)}


def count_qualified_workers(task: Task, worker_skills: Sequence[frozenset[Hashable]]) -> int:
    """Count workers whose skills are a superset of the task's required skills."""
    required = as_list(task.required_skills)
    return sum(1 for skills in worker_skills if all(contains(skills, skill) for skill in required))


def check_concurrency(tasks: Sequence[Task], workers: Sequence[Worker]) -> list[Finding]:
    """Flag tasks whose MaxConcurrent exceeds the number of qualified workers.

    Tasks with a non-numeric MaxConcurrent are skipped; the row validator has
    already flagged them.
    """
    worker_skills = [_skill_set(worker) for worker in workers]
    findings: list[Finding] = []
    for row_num, task in enumerate(tasks, start=1):
        if not is_number(task.max_concurrent):
            continue
        qualified = count_qualified_workers(task, worker_skills)
        if qualified < task.max_concurrent:
            findings.append(
                make_finding(
                    IssueType.INSUFFICIENT_WORKERS,
                    row=row_num,
                    column="MaxConcurrent",
                    message=f"Not enough qualified workers for MaxConcurrent: {format_number(task.max_concurrent)}",
                    suggestion=f"Reduce MaxConcurrent to {qualified} or add more qualified workers",
                )
            )
    return findings


def compute_phase_loads(tasks: Sequence[Task]) -> dict[int, float]:
    """Sum task durations per preferred phase.

    A phase listed twice by one task counts that task twice. Tasks with a
    non-numeric Duration and non-integer phase entries do not contribute.
    """
    loads: dict[int, float] = {}
    for task in tasks:
        if not is_number(task.duration):
            continue
        for phase in as_list(task.preferred_phases):
            if is_integer(phase):
                loads[int(phase)] = loads.get(int(phase), 0) + task.duration
    return loads


def compute_phase_capacity(phases: Sequence[int], workers: Sequence[Worker]) -> dict[int, float]:
    """Sum MaxLoadPerPhase per phase over the workers available in it."""
    capacity: dict[int, float] = {phase: 0 for phase in phases}
    for worker in workers:
        if not is_number(worker.max_load_per_phase):
            continue
        for phase in _phase_set(worker.available_slots):
            if phase in capacity:
                capacity[phase] += worker.max_load_per_phase
    return capacity


def check_phase_capacity(tasks: Sequence[Task], workers: Sequence[Worker]) -> list[Finding]:
    """Flag phases whose requested duration exceeds worker capacity.

    Returns:
        One dataset-level finding per oversaturated phase, in ascending phase order
    """
    loads = compute_phase_loads(tasks)
    phases = sorted(loads)
    capacity = compute_phase_capacity(phases, workers)

    findings: list[Finding] = []
    for phase in phases:
        if loads[phase] > capacity[phase]:
            findings.append(
                make_finding(
                    IssueType.PHASE_OVERSATURATED,
                    row=0,
                    column="",
                    message=(
                        f"Phase {phase} is oversaturated: {format_number(loads[phase])} task duration "
                        f"exceeds {format_number(capacity[phase])} available slots"
                    ),
                    suggestion="Reduce task durations or increase worker availability for this phase",
                )
            )
    return findings


def _check_tasks(dataset: Dataset, workspace: Workspace) -> list[Finding]:
    workers = workspace.workers.records()
    if not workers:
        return []
    tasks = dataset.records()
    findings = check_concurrency(tasks, workers) + check_phase_capacity(tasks, workers)
    logger.debug(f"cross-entity: {len(tasks)} tasks against {len(workers)} workers, {len(findings)} findings")
    return findings


def _no_cross_checks(dataset: Dataset, workspace: Workspace) -> list[Finding]:
    return []


CROSS_ENTITY_CHECKS: dict[EntityKind, Callable[[Dataset, Workspace], list[Finding]]] = {
    EntityKind.CLIENTS: _no_cross_checks,
    EntityKind.WORKERS: _no_cross_checks,
    EntityKind.TASKS: _check_tasks,
}


def check_cross_entity(dataset: Dataset, workspace: Workspace) -> list[Finding]:
    """Run the cross-entity checks for the dataset's kind.

    Args:
        dataset: The same dataset snapshot the row validator saw
        workspace: Sibling datasets

    Raises:
        ValueError: If no check is registered for the kind
    """
    if dataset.kind not in CROSS_ENTITY_CHECKS:
        raise ValueError(f"Unknown entity kind: {dataset.kind}")
    return CROSS_ENTITY_CHECKS[dataset.kind](dataset, workspace)
