"""Required-column check.

Runs once per pass, before any row-level work. A missing column does not stop
the pass: row checks still run and see the absent values as None.
"""

from __future__ import annotations

import logging

from data_alchemist.models import Dataset
from data_alchemist.validation.base import Finding, IssueType
from data_alchemist.validation.schemas import get_required_fields
from data_alchemist.validation.validators.common import make_finding

logger = logging.getLogger(__name__)


def check_required_fields(dataset: Dataset) -> list[Finding]:
    """Compare the dataset's columns against the required list for its kind.

    Args:
        dataset: Dataset to check; columns come from its first row, or its
            declared header when it has no rows

    Returns:
        At most one dataset-level finding listing every missing column in
        declaration order
    """
    present = set(dataset.columns)
    missing = [column for column in get_required_fields(dataset.kind) if column not in present]
    if not missing:
        return []

    logger.debug(f"{dataset.kind.value}: missing required columns {missing}")
    return [
        make_finding(
            IssueType.MISSING_COLUMNS,
            row=0,
            column="",
            message=f"Missing required columns: {', '.join(missing)}",
        )
    ]
