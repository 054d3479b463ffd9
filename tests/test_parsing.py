"""Tests for CSV/TSV ingestion."""

import logging
from pathlib import Path

import pytest

from data_alchemist.models import EntityKind
from data_alchemist.parsing import (
    coerce_row,
    coerce_value,
    load_allocation_config,
    load_dataset,
    parse_list,
    parse_number,
)


class TestParseNumber:
    """Tests for parse_number."""

    def test_integers(self) -> None:
        """Test integer text parses to int."""
        assert parse_number("3") == 3
        assert isinstance(parse_number("3"), int)
        assert parse_number(" -2 ") == -2

    def test_floats(self) -> None:
        """Test decimal text parses to float."""
        assert parse_number("2.5") == 2.5
        assert isinstance(parse_number("3.0"), float)
        assert parse_number("1e2") == 100.0

    @pytest.mark.parametrize("value", ["", "abc", "3a", "1,2", "nan"])
    def test_not_numbers(self, value: str) -> None:
        """Test unparsable text returns None."""
        assert parse_number(value) is None


class TestParseList:
    """Tests for parse_list."""

    def test_json_array(self) -> None:
        """Test JSON array cells."""
        assert parse_list('["coding", "design"]') == ["coding", "design"]
        assert parse_list("[1, 2, 3]", numeric=True) == [1, 2, 3]

    def test_comma_separated(self) -> None:
        """Test comma separated cells."""
        assert parse_list("coding, design") == ["coding", "design"]

    def test_semicolon_separated(self) -> None:
        """Test semicolons win over commas."""
        assert parse_list("a,b;c") == ["a,b", "c"]

    def test_empty(self) -> None:
        """Test empty cells give an empty list."""
        assert parse_list("") == []
        assert parse_list("   ") == []

    def test_numeric_keeps_non_numbers(self) -> None:
        """Test that non-numeric entries survive numeric parsing."""
        assert parse_list("1;x;3", numeric=True) == [1, "x", 3]

    def test_broken_json_falls_back(self) -> None:
        """Test bracketed text that is not JSON."""
        assert parse_list("[1, 2,", numeric=True) == [1, 2]


class TestCoerce:
    """Tests for coerce_value and coerce_row."""

    def test_number_default(self) -> None:
        """Test empty or bad numeric cells fall back to 1."""
        assert coerce_value("Duration", "") == 1
        assert coerce_value("Duration", "abc") == 1
        assert coerce_value("Duration", "0") == 0

    def test_explicit_zero_is_kept(self) -> None:
        """Test 0 survives coercion so the row checks can reject it."""
        assert coerce_value("MaxConcurrent", "0") == 0
        assert coerce_value("MaxLoadPerPhase", " 0 ") == 0

    def test_phase_lists_are_numeric(self) -> None:
        """Test phase columns become number lists."""
        assert coerce_value("AvailableSlots", "1;2") == [1, 2]
        assert coerce_value("Skills", "1;2") == ["1", "2"]

    def test_json_column(self) -> None:
        """Test invalid JSON is replaced."""
        assert coerce_value("AttributesJSON", '{"a": 1}') == '{"a": 1}'
        assert coerce_value("AttributesJSON", "{bad") == "{}"
        assert coerce_value("AttributesJSON", None) == "{}"

    def test_text_column(self) -> None:
        """Test other columns are trimmed text."""
        assert coerce_value("ClientName", "  Acme ") == "Acme"
        assert coerce_value("ClientName", None) == ""

    def test_coerce_row(self) -> None:
        """Test a whole row."""
        assert coerce_row({"TaskID": "T1", "Duration": "2", "Notes": "x"}) == {
            "TaskID": "T1",
            "Duration": 2,
            "Notes": "x",
        }


class TestLoadDataset:
    """Tests for load_dataset."""

    def test_load_csv(self, tmp_path: Path) -> None:
        """Test loading a CSV file."""
        path = tmp_path / "tasks.csv"
        path.write_text(
            "TaskID,TaskName,Duration,PreferredPhases\n"
            'T1,Build,2,"1,2"\n'
            "T2,Test,,3\n"
        )

        dataset = load_dataset(path, EntityKind.TASKS)

        assert dataset.kind is EntityKind.TASKS
        assert len(dataset) == 2
        assert dict(dataset.rows[0]) == {"TaskID": "T1", "TaskName": "Build", "Duration": 2, "PreferredPhases": [1, 2]}
        assert dataset.rows[1]["Duration"] == 1
        assert dataset.rows[1]["PreferredPhases"] == [3]

    def test_load_logs_row_count(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test the parsed row count is logged with the singular kind label."""
        path = tmp_path / "tasks.csv"
        path.write_text("TaskID,Duration\nT1,1\nT2,2\n")

        with caplog.at_level(logging.INFO, logger="data_alchemist.parsing"):
            load_dataset(path, EntityKind.TASKS)

        assert "Parsed 2 task rows from tasks.csv" in caplog.text

    def test_load_tsv(self, tmp_path: Path) -> None:
        """Test loading a TSV file."""
        path = tmp_path / "workers.tsv"
        path.write_text("WorkerID\tSkills\nW1\tcoding, design\n")

        dataset = load_dataset(path, "workers")

        assert dataset.rows[0]["Skills"] == ["coding", "design"]

    def test_missing_columns_stay_missing(self, tmp_path: Path) -> None:
        """Test that absent columns are not filled in."""
        path = tmp_path / "clients.csv"
        path.write_text("ClientID\nC1\n")

        dataset = load_dataset(path, EntityKind.CLIENTS)

        assert dataset.columns == ["ClientID"]
        assert "PriorityLevel" not in dataset.rows[0]

    def test_header_only_file(self, tmp_path: Path) -> None:
        """Test that a file with only a header keeps its columns."""
        path = tmp_path / "tasks.csv"
        path.write_text("TaskID,TaskName\n")

        dataset = load_dataset(path, EntityKind.TASKS)

        assert len(dataset) == 0
        assert dataset.columns == ["TaskID", "TaskName"]

    def test_blank_rows_skipped_and_bom_stripped(self, tmp_path: Path) -> None:
        """Test blank lines are ignored and a UTF-8 BOM does not corrupt the header."""
        path = tmp_path / "tasks.csv"
        path.write_bytes("\ufeffTaskID,TaskName\nT1,Build\n,\nT2,Test\n".encode())

        dataset = load_dataset(path, EntityKind.TASKS)

        assert dataset.columns == ["TaskID", "TaskName"]
        assert [row["TaskID"] for row in dataset.rows] == ["T1", "T2"]

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Test that other formats are rejected."""
        path = tmp_path / "tasks.xlsx"
        path.write_bytes(b"")

        with pytest.raises(ValueError, match="Unsupported file format"):
            load_dataset(path, EntityKind.TASKS)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file gives an empty dataset."""
        dataset = load_dataset(tmp_path / "nope.csv", EntityKind.TASKS)

        assert len(dataset) == 0
        assert dataset.kind is EntityKind.TASKS


class TestLoadAllocationConfig:
    """Tests for load_allocation_config."""

    def test_load(self, tmp_path: Path) -> None:
        """Test reading a rules file."""
        path = tmp_path / "rules.json"
        path.write_text('{"rules": [{"id": "r1", "type": "coRun"}], "priorities": {"deadlineWeight": 40}}')

        config = load_allocation_config(path)

        assert [rule.id for rule in config.rules] == ["r1"]
        assert config.priorities.deadline_weight == 40
        assert config.priorities.client_priority_weight == 30
