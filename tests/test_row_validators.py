"""Tests for the required-column gate and row validators."""

from typing import Any

import pytest

from data_alchemist.models import Client, Dataset, EntityKind, Task, Worker, Workspace
from data_alchemist.validation.base import IssueType, Severity
from data_alchemist.validation.validators import (
    ClientRowValidator,
    TaskRowValidator,
    WorkerRowValidator,
    check_required_fields,
    check_rows,
    get_row_validator,
)
from data_alchemist.validation.validators.rows import ROW_VALIDATORS


def _client(**overrides: Any) -> dict[str, Any]:
    row = {
        "ClientID": "C1",
        "ClientName": "Acme",
        "PriorityLevel": 3,
        "RequestedTaskIDs": ["T1"],
        "GroupTag": "GroupA",
        "AttributesJSON": '{"location": "NY"}',
    }
    row.update(overrides)
    return row


def _worker(**overrides: Any) -> dict[str, Any]:
    row = {
        "WorkerID": "W1",
        "WorkerName": "Ann",
        "Skills": ["coding"],
        "AvailableSlots": [1, 2],
        "MaxLoadPerPhase": 2,
        "WorkerGroup": "GroupA",
        "QualificationLevel": 3,
    }
    row.update(overrides)
    return row


def _task(**overrides: Any) -> dict[str, Any]:
    row = {
        "TaskID": "T1",
        "TaskName": "Build",
        "Category": "Dev",
        "Duration": 1,
        "RequiredSkills": ["coding"],
        "PreferredPhases": [1],
        "MaxConcurrent": 1,
    }
    row.update(overrides)
    return row


WORKSPACE = Workspace.from_rows(clients=[_client()], workers=[_worker()], tasks=[_task()])


class TestRequiredFields:
    """Tests for check_required_fields."""

    def test_all_present(self) -> None:
        """Test a complete dataset passes."""
        assert check_required_fields(WORKSPACE.clients) == []

    def test_missing_columns_listed_in_order(self) -> None:
        """Test one dataset-level finding naming every missing column."""
        dataset = Dataset.from_rows(EntityKind.TASKS, [{"TaskID": "T1", "Duration": 1}])

        findings = check_required_fields(dataset)

        assert len(findings) == 1
        issue = findings[0].issue
        assert issue.row == 0
        assert issue.column == ""
        assert issue.message == (
            "Missing required columns: TaskName, Category, RequiredSkills, PreferredPhases, MaxConcurrent"
        )
        assert issue.issue_type == IssueType.MISSING_COLUMNS
        assert findings[0].penalty == 20

    def test_empty_dataset_uses_header(self) -> None:
        """Test that an empty dataset with a full header passes."""
        dataset = Dataset.from_rows(EntityKind.WORKERS, [], header=[c for c in _worker()])
        assert check_required_fields(dataset) == []

    def test_empty_dataset_without_header(self) -> None:
        """Test that an empty dataset with no header misses every column."""
        findings = check_required_fields(Dataset(kind=EntityKind.CLIENTS))
        assert findings[0].issue.message.startswith("Missing required columns: ClientID, ClientName")

    def test_only_first_row_counts(self) -> None:
        """Test that columns present only in later rows do not count."""
        full = _task()
        partial = {k: v for k, v in full.items() if k != "Category"}
        dataset = Dataset.from_rows(EntityKind.TASKS, [partial, full])

        findings = check_required_fields(dataset)

        assert findings[0].issue.message == "Missing required columns: Category"


class TestClientRowValidator:
    """Tests for ClientRowValidator."""

    def setup_method(self) -> None:
        self.validator = ClientRowValidator(WORKSPACE)

    def _validate(self, **overrides: Any) -> list:
        return self.validator.validate(Client.from_row(_client(**overrides)), 1)

    def test_valid(self) -> None:
        """Test a valid client has no findings."""
        assert self._validate() == []

    def test_integral_float_priority(self) -> None:
        """Test 3.0 is accepted as an integer."""
        assert self._validate(PriorityLevel=3.0) == []

    @pytest.mark.parametrize("priority", [0, 6, 7, 2.5, "3", None, True])
    def test_invalid_priority(self, priority: object) -> None:
        """Test out-of-range or non-integer priorities."""
        findings = self._validate(PriorityLevel=priority)

        assert len(findings) == 1
        assert findings[0].issue.column == "PriorityLevel"
        assert findings[0].issue.message == "PriorityLevel must be an integer between 1 and 5"
        assert findings[0].penalty == 5

    def test_unknown_task_ids(self) -> None:
        """Test one finding per unknown task id."""
        findings = self._validate(RequestedTaskIDs=["T1", "T8", "T9"])

        assert [f.issue.message for f in findings] == ["Unknown TaskID: T8", "Unknown TaskID: T9"]
        assert all(f.issue.issue_type == IssueType.UNKNOWN_REFERENCE for f in findings)
        assert all(f.issue.suggestion is None for f in findings)

    def test_single_task_id_string(self) -> None:
        """Test a bare string is read as one task id."""
        assert self._validate(RequestedTaskIDs="T1") == []
        assert len(self._validate(RequestedTaskIDs="T5")) == 1

    def test_no_requested_tasks(self) -> None:
        """Test empty or absent requests are fine."""
        assert self._validate(RequestedTaskIDs=[]) == []
        assert self._validate(RequestedTaskIDs=None) == []

    def test_invalid_attributes(self) -> None:
        """Test invalid AttributesJSON."""
        findings = self._validate(AttributesJSON="{bad")

        assert len(findings) == 1
        assert findings[0].issue.column == "AttributesJSON"
        assert findings[0].issue.message == "Invalid JSON in AttributesJSON"
        assert findings[0].issue.issue_type == IssueType.INVALID_FORMAT

    def test_parsed_attributes(self) -> None:
        """Test an already-parsed payload passes."""
        assert self._validate(AttributesJSON={"location": "NY"}) == []

    def test_absent_attributes(self) -> None:
        """Test a missing AttributesJSON is an error."""
        assert len(self._validate(AttributesJSON=None)) == 1

    def test_check_order(self) -> None:
        """Test findings follow priority, references, attributes."""
        findings = self._validate(PriorityLevel=9, RequestedTaskIDs=["T9"], AttributesJSON="{bad")
        assert [f.issue.column for f in findings] == ["PriorityLevel", "RequestedTaskIDs", "AttributesJSON"]


class TestWorkerRowValidator:
    """Tests for WorkerRowValidator."""

    def _validate(self, **overrides: Any) -> list:
        return WorkerRowValidator(WORKSPACE).validate(Worker.from_row(_worker(**overrides)), 1)

    def test_valid(self) -> None:
        """Test a valid worker has no findings."""
        assert self._validate() == []

    @pytest.mark.parametrize("slots", [[], [1, 0], [1, "2"], "1,2", None, [1.5]])
    def test_invalid_slots(self, slots: object) -> None:
        """Test bad AvailableSlots values."""
        findings = self._validate(AvailableSlots=slots)

        assert len(findings) == 1
        assert findings[0].issue.column == "AvailableSlots"
        assert findings[0].issue.suggestion == "Correct to an array of positive integers (e.g., [1, 2, 3])"

    @pytest.mark.parametrize("load", [0, -1, 1.5, None])
    def test_invalid_max_load(self, load: object) -> None:
        """Test bad MaxLoadPerPhase values."""
        findings = self._validate(MaxLoadPerPhase=load)

        assert [f.issue.column for f in findings] == ["MaxLoadPerPhase"]


class TestTaskRowValidator:
    """Tests for TaskRowValidator."""

    def _validate(self, workspace: Workspace = WORKSPACE, **overrides: Any) -> list:
        return TaskRowValidator(workspace).validate(Task.from_row(_task(**overrides)), 1)

    def test_valid(self) -> None:
        """Test a valid task has no findings."""
        assert self._validate() == []

    def test_invalid_duration(self) -> None:
        """Test non-positive duration."""
        findings = self._validate(Duration=0)
        assert [f.issue.message for f in findings] == ["Duration must be a positive integer"]

    def test_empty_preferred_phases_allowed(self) -> None:
        """Test no preferred phases is fine."""
        assert self._validate(PreferredPhases=[]) == []

    def test_invalid_preferred_phases(self) -> None:
        """Test a negative phase."""
        findings = self._validate(PreferredPhases=[1, -1])
        assert [f.issue.column for f in findings] == ["PreferredPhases"]

    def test_invalid_max_concurrent(self) -> None:
        """Test missing MaxConcurrent."""
        findings = self._validate(MaxConcurrent=None)
        assert [f.issue.column for f in findings] == ["MaxConcurrent"]

    def test_uncovered_skill_is_warning(self) -> None:
        """Test a skill no worker holds gives one warning."""
        findings = self._validate(RequiredSkills=["coding", "welding"])

        assert len(findings) == 1
        issue = findings[0].issue
        assert issue.severity == Severity.WARNING
        assert issue.column == "RequiredSkills"
        assert issue.message == "No worker has the required skill: welding"
        assert findings[0].penalty == 2

    def test_uncovered_skill_without_workers(self) -> None:
        """Test every skill warns when there are no workers."""
        workspace = Workspace.from_rows(tasks=[_task()])
        findings = self._validate(workspace, RequiredSkills=["coding", "design"])

        assert [f.issue.severity for f in findings] == [Severity.WARNING, Severity.WARNING]

    def test_skill_held_by_any_worker(self) -> None:
        """Test skills are pooled across workers."""
        workspace = Workspace.from_rows(
            workers=[_worker(Skills=["coding"]), _worker(WorkerID="W2", Skills=["design"])],
        )
        assert self._validate(workspace, RequiredSkills=["coding", "design"]) == []


class TestCheckRows:
    """Tests for check_rows."""

    def test_duplicate_flagged_on_later_row(self) -> None:
        """Test the second occurrence of an id is flagged."""
        dataset = Dataset.from_rows(EntityKind.CLIENTS, [_client(), _client()])

        findings = check_rows(dataset, WORKSPACE)

        assert len(findings) == 1
        issue = findings[0].issue
        assert issue.row == 2
        assert issue.column == "ClientID"
        assert issue.message == "Duplicate ClientID: C1"
        assert issue.issue_type == IssueType.DUPLICATE_ID

    def test_every_repeat_flagged(self) -> None:
        """Test third and later occurrences are flagged too."""
        dataset = Dataset.from_rows(EntityKind.TASKS, [_task(), _task(), _task()])

        findings = check_rows(dataset, WORKSPACE)

        assert [f.issue.row for f in findings if f.issue.issue_type == IssueType.DUPLICATE_ID] == [2, 3]

    def test_duplicate_emitted_before_row_checks(self) -> None:
        """Test the duplicate finding comes first within a row."""
        dataset = Dataset.from_rows(EntityKind.CLIENTS, [_client(), _client(PriorityLevel=9)])

        findings = check_rows(dataset, WORKSPACE)

        assert [f.issue.column for f in findings] == ["ClientID", "PriorityLevel"]

    def test_missing_ids_not_duplicates(self) -> None:
        """Test rows without an id never count as duplicates."""
        rows = [{k: v for k, v in _worker().items() if k != "WorkerID"}] * 2
        dataset = Dataset.from_rows(EntityKind.WORKERS, rows)

        assert check_rows(dataset, WORKSPACE) == []

    def test_row_numbers_are_one_based(self) -> None:
        """Test row numbering."""
        dataset = Dataset.from_rows(EntityKind.WORKERS, [_worker(), _worker(WorkerID="W2", MaxLoadPerPhase=0)])

        findings = check_rows(dataset, WORKSPACE)

        assert [f.issue.row for f in findings] == [2]


class TestRegistry:
    """Tests for the row validator registry."""

    def test_every_kind_registered(self) -> None:
        """Test each kind has a validator."""
        assert set(ROW_VALIDATORS) == set(EntityKind)

    def test_get_row_validator(self) -> None:
        """Test creating validators by kind."""
        assert isinstance(get_row_validator(EntityKind.CLIENTS, WORKSPACE), ClientRowValidator)
        assert get_row_validator(EntityKind.TASKS, WORKSPACE).name == "task_row"

    def test_unknown_kind(self) -> None:
        """Test an unknown kind raises."""
        with pytest.raises(ValueError, match="Unknown entity kind"):
            get_row_validator("bogus", WORKSPACE)  # type: ignore[arg-type]

    def test_unknown_kind_lists_available(self) -> None:
        """Test the error names the registered kinds."""
        with pytest.raises(ValueError, match=r"Available: \['clients', 'workers', 'tasks'\]"):
            get_row_validator("bogus", WORKSPACE)  # type: ignore[arg-type]
