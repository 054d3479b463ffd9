"""Value-shape helpers shared by the validators.

Values arrive already coerced by ingestion, so these only answer questions about
them; nothing here converts a value.
"""

from __future__ import annotations

import json
import math
from collections.abc import Hashable
from typing import Any

from data_alchemist.validation.base import Finding, IssueType, Severity, ValidationIssue
from data_alchemist.validation.schemas import get_penalty


def is_number(value: Any) -> bool:
    """True for finite ints and floats. Booleans are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_integer(value: Any) -> bool:
    """True for ints and integral floats (spreadsheets hand back 3.0 for 3)."""
    if not is_number(value):
        return False
    return isinstance(value, int) or float(value).is_integer()


def is_positive_integer(value: Any) -> bool:
    return is_integer(value) and value >= 1


def is_positive_integer_list(value: Any, allow_empty: bool = True) -> bool:
    """True when value is a list whose entries are all positive integers."""
    if not isinstance(value, (list, tuple)):
        return False
    if not value and not allow_empty:
        return False
    return all(is_positive_integer(item) for item in value)


def as_list(value: Any) -> list[Any]:
    """View a list-like field as a list.

    A bare non-empty string is read as a one-item list; anything else that is
    not a collection is treated as empty.
    """
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, str):
        return [value] if value else []
    return []


def contains(pool: set[Any] | frozenset[Any], value: Any) -> bool:
    """Set membership that treats unhashable values as absent."""
    return isinstance(value, Hashable) and value in pool


def is_structured_data(value: Any) -> bool:
    """True when value round-trips through JSON.

    Text must parse; an already-parsed payload must serialize. None does neither.
    """
    if value is None:
        return False
    try:
        if isinstance(value, (str, bytes, bytearray)):
            json.loads(value)
        else:
            json.loads(json.dumps(value))
    except (TypeError, ValueError):
        return False
    return True


def format_number(value: Any) -> str:
    """Render numbers the way a spreadsheet user typed them (8, not 8.0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def make_finding(
    issue_type: IssueType,
    row: int,
    column: str,
    message: str,
    suggestion: str | None = None,
    severity: Severity = Severity.ERROR,
) -> Finding:
    """Build a Finding carrying the standard penalty for its issue type."""
    issue = ValidationIssue(
        row=row,
        column=column,
        message=message,
        severity=severity,
        suggestion=suggestion,
        issue_type=issue_type,
    )
    return Finding(issue=issue, penalty=get_penalty(issue_type))
