"""Checks for the validation pipeline.

This package provides the local (deterministic) stages:
- schema_gate: Required column presence
- rows: Duplicate identifiers and per-kind row validators
- cross_entity: Concurrency and phase capacity feasibility
"""

from data_alchemist.validation.validators.cross_entity import (
    check_concurrency,
    check_cross_entity,
    check_phase_capacity,
)
from data_alchemist.validation.validators.rows import (
    ClientRowValidator,
    TaskRowValidator,
    WorkerRowValidator,
    check_rows,
    get_row_validator,
)
from data_alchemist.validation.validators.schema_gate import check_required_fields

__all__ = [
    "ClientRowValidator",
    "TaskRowValidator",
    "WorkerRowValidator",
    "check_concurrency",
    "check_cross_entity",
    "check_phase_capacity",
    "check_required_fields",
    "check_rows",
    "get_row_validator",
]
