"""CSV/TSV parsing for allocation datasets.

This module turns uploaded files into the coerced rows the validation engine
expects. It sits outside the engine: the engine re-validates what it is given
and never coerces.

Coercion per column:
- Identifiers, names, tags and categories: text, "" when empty
- Numeric columns: a number, 1 when empty or unparsable; an explicit 0 is kept
- List columns: a JSON array, else comma/semicolon separated values; phase
  columns turn numeric-looking entries into numbers
- AttributesJSON: the text when it is valid JSON, else "{}"

Columns missing from the header stay missing from every row, so the required
column check still reports them.
"""

from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path  # noqa: TC003 - Path is used at runtime
from typing import Any

from data_alchemist.models import AllocationConfig, Dataset, EntityKind

logger = logging.getLogger(__name__)

DELIMITERS: dict[str, str] = {
    ".csv": ",",
    ".tsv": "\t",
}

NUMBER_FIELDS = frozenset({"PriorityLevel", "MaxLoadPerPhase", "QualificationLevel", "Duration", "MaxConcurrent"})
LIST_FIELDS = frozenset({"RequestedTaskIDs", "Skills", "AvailableSlots", "RequiredSkills", "PreferredPhases"})
NUMBER_LIST_FIELDS = frozenset({"AvailableSlots", "PreferredPhases"})
JSON_FIELDS = frozenset({"AttributesJSON"})

DEFAULT_NUMBER = 1

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def parse_number(value: str) -> int | float | None:
    """Parse numeric text, preferring int. Returns None when not a number."""
    value = value.strip()
    if not _NUMBER_RE.match(value):
        return None
    number = float(value)
    if number.is_integer() and "." not in value and "e" not in value.lower():
        return int(value)
    return number


def parse_list(value: str, numeric: bool = False) -> list[Any]:
    """Parse a list cell.

    Handles:
        - '["a", "b"]' or '[1, 2]' (JSON array)
        - "a;b" or "a, b" (separated)
        - "" (empty list)

    Args:
        value: Cell text
        numeric: Convert numeric-looking entries to numbers

    Returns:
        List of entries; non-numeric entries stay text even when numeric=True
    """
    value = value.strip()
    if not value:
        return []

    items: list[Any]
    if value.startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = parsed
        else:
            items = [v.strip() for v in value.strip("[]").split(",") if v.strip()]
    else:
        separator = ";" if ";" in value else ","
        items = [v.strip() for v in value.split(separator) if v.strip()]

    if numeric:
        items = [_as_number(item) for item in items]
    return items


def _as_number(item: Any) -> Any:
    if isinstance(item, str):
        number = parse_number(item)
        return item if number is None else number
    return item


def _is_json(value: str) -> bool:
    try:
        json.loads(value)
    except json.JSONDecodeError:
        return False
    return True


def coerce_value(column: str, value: str | None) -> Any:
    """Coerce one cell according to its column."""
    text = (value or "").strip()
    if column in NUMBER_FIELDS:
        number = parse_number(text)
        return DEFAULT_NUMBER if number is None else number
    if column in LIST_FIELDS:
        return parse_list(text, numeric=column in NUMBER_LIST_FIELDS)
    if column in JSON_FIELDS:
        return text if text and _is_json(text) else "{}"
    return text


def coerce_row(row: dict[str, str | None]) -> dict[str, Any]:
    """Coerce every cell of a parsed row. Unknown columns stay text."""
    return {column: coerce_value(column, value) for column, value in row.items() if column}


def load_dataset(path: Path, kind: EntityKind | str) -> Dataset:
    """Load a CSV or TSV file as a Dataset.

    Args:
        path: Path to a .csv or .tsv file with a header row
        kind: Entity kind of the rows

    Returns:
        Dataset with coerced rows and the file's header. A missing file logs a
        warning and yields an empty dataset.

    Raises:
        ValueError: If the file extension is not supported
    """
    kind = EntityKind(kind)
    delimiter = DELIMITERS.get(path.suffix.lower())
    if delimiter is None:
        raise ValueError(f"Unsupported file format: {path.name}. Please use a CSV or TSV file.")

    if not path.exists():
        logger.warning(f"File not found: {path}")
        return Dataset(kind=kind)

    with path.open(newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        header = [name.strip() for name in reader.fieldnames or [] if name and name.strip()]
        rows = []
        for raw in reader:
            if not any((v or "").strip() for k, v in raw.items() if k):
                continue
            rows.append(coerce_row({(k or "").strip(): v for k, v in raw.items() if k}))

    logger.info(f"Parsed {len(rows)} {kind.label} rows from {path.name}")
    return Dataset.from_rows(kind, rows, header=header)


def load_allocation_config(path: Path) -> AllocationConfig:
    """Load rules and priority settings from a JSON file."""
    with path.open(encoding="utf-8") as f:
        return AllocationConfig.model_validate(json.load(f))
