"""Domain models for allocation datasets.

This module defines the three entity kinds the validation engine understands
(clients, workers, tasks), the record types parsed rows are read into, and the
containers a validation pass borrows: a single ``Dataset`` and the ``Workspace``
holding all three datasets plus the allocation rules and priority settings.

Rows reach these models already parsed and type-coerced by ingestion. Record
constructors copy values as supplied and never coerce them; the validators are
responsible for checking their shape.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    """Dataset kinds. Closed set, never extended at runtime."""

    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"

    @property
    def label(self) -> str:
        """Singular display label (e.g. "client")."""
        return self.value[:-1]


class _RowRecord:
    """Mixin mapping dataset columns onto record attributes."""

    # attribute name -> column name
    COLUMNS: ClassVar[dict[str, str]] = {}
    ID_ATTRIBUTE: ClassVar[str] = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Any:
        """Build a record from a parsed row. Absent columns become None."""
        return cls(**{attr: row.get(column) for attr, column in cls.COLUMNS.items()})

    @property
    def identifier(self) -> Any:
        """The record's identifier value, or None when the column is absent."""
        return getattr(self, self.ID_ATTRIBUTE)


@dataclass(frozen=True)
class Client(_RowRecord):
    """A client requesting work.

    Attributes:
        client_id: ClientID
        client_name: ClientName
        priority_level: PriorityLevel, expected integer 1-5
        requested_task_ids: RequestedTaskIDs, TaskIDs this client wants run
        group_tag: GroupTag
        attributes_json: AttributesJSON, free-form structured payload (JSON text or parsed)
    """

    COLUMNS: ClassVar[dict[str, str]] = {
        "client_id": "ClientID",
        "client_name": "ClientName",
        "priority_level": "PriorityLevel",
        "requested_task_ids": "RequestedTaskIDs",
        "group_tag": "GroupTag",
        "attributes_json": "AttributesJSON",
    }
    ID_ATTRIBUTE: ClassVar[str] = "client_id"

    client_id: str | None = None
    client_name: str | None = None
    priority_level: int | None = None
    requested_task_ids: list[str] | None = None
    group_tag: str | None = None
    attributes_json: str | dict[str, Any] | None = None


@dataclass(frozen=True)
class Worker(_RowRecord):
    """A worker who can be allocated to tasks.

    Attributes:
        worker_id: WorkerID
        worker_name: WorkerName
        skills: Skills, skill labels
        available_slots: AvailableSlots, phase numbers the worker is available in
        max_load_per_phase: MaxLoadPerPhase, load ceiling per phase
        worker_group: WorkerGroup
        qualification_level: QualificationLevel
    """

    COLUMNS: ClassVar[dict[str, str]] = {
        "worker_id": "WorkerID",
        "worker_name": "WorkerName",
        "skills": "Skills",
        "available_slots": "AvailableSlots",
        "max_load_per_phase": "MaxLoadPerPhase",
        "worker_group": "WorkerGroup",
        "qualification_level": "QualificationLevel",
    }
    ID_ATTRIBUTE: ClassVar[str] = "worker_id"

    worker_id: str | None = None
    worker_name: str | None = None
    skills: list[str] | None = None
    available_slots: list[int] | None = None
    max_load_per_phase: int | None = None
    worker_group: str | None = None
    qualification_level: int | None = None


@dataclass(frozen=True)
class Task(_RowRecord):
    """A unit of work to be allocated.

    Attributes:
        task_id: TaskID
        task_name: TaskName
        category: Category
        duration: Duration, in phases
        required_skills: RequiredSkills, every qualified worker must hold all of them
        preferred_phases: PreferredPhases
        max_concurrent: MaxConcurrent, workers that may run the task at once
    """

    COLUMNS: ClassVar[dict[str, str]] = {
        "task_id": "TaskID",
        "task_name": "TaskName",
        "category": "Category",
        "duration": "Duration",
        "required_skills": "RequiredSkills",
        "preferred_phases": "PreferredPhases",
        "max_concurrent": "MaxConcurrent",
    }
    ID_ATTRIBUTE: ClassVar[str] = "task_id"

    task_id: str | None = None
    task_name: str | None = None
    category: str | None = None
    duration: int | None = None
    required_skills: list[str] | None = None
    preferred_phases: list[int] | None = None
    max_concurrent: int | None = None


Entity = Client | Worker | Task

ENTITY_TYPES: dict[EntityKind, type[Client] | type[Worker] | type[Task]] = {
    EntityKind.CLIENTS: Client,
    EntityKind.WORKERS: Worker,
    EntityKind.TASKS: Task,
}


@dataclass(frozen=True)
class Dataset:
    """An ordered, read-only sequence of rows of one entity kind.

    Row position (1-based) is how issues address rows.

    Attributes:
        kind: Entity kind of every row
        rows: Parsed rows, each a read-only mapping of column -> value
        header: Declared column names from ingestion, used when there are no rows
    """

    kind: EntityKind
    rows: tuple[Mapping[str, Any], ...] = ()
    header: tuple[str, ...] = ()

    @classmethod
    def from_rows(
        cls,
        kind: EntityKind | str,
        rows: Iterable[Mapping[str, Any]] = (),
        header: Iterable[str] = (),
    ) -> Dataset:
        """Snapshot rows into a Dataset. Later changes to the inputs are not seen."""
        return cls(
            kind=EntityKind(kind),
            rows=tuple(MappingProxyType(dict(row)) for row in rows),
            header=tuple(header),
        )

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def columns(self) -> list[str]:
        """Column names of the first row, or the declared header for an empty dataset."""
        if self.rows:
            return list(self.rows[0].keys())
        return list(self.header)

    def records(self) -> list[Entity]:
        """Read every row into its entity record type."""
        record_type = ENTITY_TYPES[self.kind]
        return [record_type.from_row(row) for row in self.rows]

    def to_payload(self) -> list[dict[str, Any]]:
        """Plain-dict copy of the rows, for handing to external services."""
        return [dict(row) for row in self.rows]


class BusinessRule(BaseModel):
    """An allocation rule. Carried through validation without interpretation."""

    id: str = Field(description="Rule identifier")
    type: str = Field(description="Rule type (e.g., 'coRun', 'loadLimit')")
    description: str = Field(default="", description="Human-readable description")
    rule: dict[str, Any] = Field(default_factory=dict, description="Rule parameters")


class PrioritySettings(BaseModel):
    """Weights for the downstream allocator. Carried through validation untouched."""

    model_config = ConfigDict(populate_by_name=True)

    client_priority_weight: int = Field(default=30, alias="clientPriorityWeight")
    skill_match_weight: int = Field(default=25, alias="skillMatchWeight")
    workload_balance_weight: int = Field(default=20, alias="workloadBalanceWeight")
    deadline_weight: int = Field(default=15, alias="deadlineWeight")
    cost_optimization_weight: int = Field(default=10, alias="costOptimizationWeight")


class AllocationConfig(BaseModel):
    """Rules file contents: ``{"rules": [...], "priorities": {...}}``."""

    rules: list[BusinessRule] = Field(default_factory=list)
    priorities: PrioritySettings = Field(default_factory=PrioritySettings)


def _empty(kind: EntityKind) -> Any:
    return field(default_factory=lambda: Dataset(kind=kind))


@dataclass(frozen=True)
class Workspace:
    """The full dataset triple a validation pass cross-references.

    The engine only borrows a Workspace for the duration of a pass and never
    mutates it. ``rules`` and ``priorities`` are passed through untouched.
    """

    clients: Dataset = _empty(EntityKind.CLIENTS)
    workers: Dataset = _empty(EntityKind.WORKERS)
    tasks: Dataset = _empty(EntityKind.TASKS)
    rules: tuple[BusinessRule, ...] = ()
    priorities: PrioritySettings = field(default_factory=PrioritySettings)

    def __post_init__(self) -> None:
        for kind in EntityKind:
            dataset = self.dataset(kind)
            if dataset.kind is not kind:
                raise ValueError(f"Workspace.{kind.value} holds a {dataset.kind.value} dataset")

    @classmethod
    def from_rows(
        cls,
        clients: Iterable[Mapping[str, Any]] = (),
        workers: Iterable[Mapping[str, Any]] = (),
        tasks: Iterable[Mapping[str, Any]] = (),
        rules: Iterable[BusinessRule] = (),
        priorities: PrioritySettings | None = None,
    ) -> Workspace:
        """Build a Workspace from plain row lists."""
        return cls(
            clients=Dataset.from_rows(EntityKind.CLIENTS, clients),
            workers=Dataset.from_rows(EntityKind.WORKERS, workers),
            tasks=Dataset.from_rows(EntityKind.TASKS, tasks),
            rules=tuple(rules),
            priorities=priorities or PrioritySettings(),
        )

    def dataset(self, kind: EntityKind) -> Dataset:
        """Get the dataset of the given kind."""
        datasets = {
            EntityKind.CLIENTS: self.clients,
            EntityKind.WORKERS: self.workers,
            EntityKind.TASKS: self.tasks,
        }
        return datasets[kind]

    def with_dataset(self, dataset: Dataset) -> Workspace:
        """Return a copy with one dataset replaced (e.g. after an edit)."""
        return replace(self, **{dataset.kind.value: dataset})
