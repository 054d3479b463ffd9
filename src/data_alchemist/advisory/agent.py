"""PydanticAI agent acting as the advisory oracle for dataset validation.

The local checks only catch what can be stated as a rule. This agent gives the
model a look at the whole dataset to catch what can't: a client whose
attributes contradict its group, a task whose duration is implausible for its
category, skills spelled two ways. It also proposes replacement values for
errors already found.

The oracle is optional. ``build_advisory_oracle()`` returns None when no
credential is configured, and the engine then runs local checks only.

Configuration (environment, ``.env`` supported):
    DATA_ALCHEMIST_ADVISORY_MODEL: PydanticAI model identifier
        (default "google-gla:gemini-2.5-flash")
    GEMINI_API_KEY / GOOGLE_API_KEY, OPENAI_API_KEY, ANTHROPIC_API_KEY:
        credential for the chosen provider
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic_ai import Agent

from data_alchemist.validation.advisory import AdvisoryReport, FixSuggestionList

if TYPE_CHECKING:
    from pydantic_ai.models import Model

    from data_alchemist.models import EntityKind
    from data_alchemist.validation.base import ValidationIssue

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_ADVISORY_MODEL = "google-gla:gemini-2.5-flash"
ADVISORY_MODEL = os.getenv("DATA_ALCHEMIST_ADVISORY_MODEL", DEFAULT_ADVISORY_MODEL)

# Model provider prefix -> environment variables that may hold its API key
PROVIDER_API_KEYS: dict[str, tuple[str, ...]] = {
    "google-gla": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
    "groq": ("GROQ_API_KEY",),
    "mistral": ("MISTRAL_API_KEY",),
}


VALIDATION_SYSTEM_PROMPT = """You are a data quality analyst for a resource-allocation tool.
The tool schedules tasks for clients onto workers across numbered phases. You review one
dataset at a time: clients, workers, or tasks.

Dataset columns:
- clients: ClientID, ClientName, PriorityLevel (1-5), RequestedTaskIDs, GroupTag, AttributesJSON
- workers: WorkerID, WorkerName, Skills, AvailableSlots (phase numbers), MaxLoadPerPhase,
  WorkerGroup, QualificationLevel
- tasks: TaskID, TaskName, Category, Duration (phases), RequiredSkills, PreferredPhases,
  MaxConcurrent

Mechanical checks (missing columns, duplicate IDs, ranges, integer types, unknown TaskIDs)
are already done elsewhere. Focus on logical consistency and business sense:
- values that are valid but implausible for their context
- inconsistent naming or spelling of the same skill, group or category
- attributes or groupings that contradict each other

Rows are numbered from 1 in the order given. Use row 0 for findings about the dataset as a
whole, and an empty column when a finding is not about one column. Report definite problems
as errors and doubtful values as warnings. Give a confidence score from 0 to 100 for the
overall quality of the dataset.
"""

FIX_SYSTEM_PROMPT = """You are a data quality analyst for a resource-allocation tool.
You are given a dataset and the validation errors found in it. For each error you can fix,
propose the replacement value for the offending cell.

Use exactly the row and column of the error you are fixing. Give the suggested value itself
(for example "3" or "[1, 2]"), not an explanation. Skip errors you cannot fix with a single
value.
"""


def _format_rows(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2, default=str)


def resolve_credential(model: str) -> str | None:
    """Find the API key for a model identifier's provider.

    Returns:
        The key, or None when the provider is known and no key is set. Model
        identifiers for providers not listed in PROVIDER_API_KEYS are assumed
        to carry their own configuration and resolve to "".
    """
    provider = model.split(":", 1)[0] if ":" in model else ""
    env_vars = PROVIDER_API_KEYS.get(provider)
    if env_vars is None:
        return ""
    for env_var in env_vars:
        value = os.getenv(env_var)
        if value:
            return value
    return None


def _build_model(model: str, api_key: str) -> Model | str:
    """Turn a model identifier into something Agent accepts.

    Gemini keys are passed explicitly so GEMINI_API_KEY works as well as
    GOOGLE_API_KEY.
    """
    provider, _, model_name = model.partition(":")
    if provider == "google-gla" and api_key:
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))
    return model


class AdvisoryAgent:
    """PydanticAI-powered advisory oracle."""

    def __init__(self, model: Model | str = ADVISORY_MODEL):
        """Initialize the advisory agents.

        Args:
            model: PydanticAI model or identifier (e.g., "google-gla:gemini-2.5-flash",
                "openai:gpt-4o-mini")
        """
        self.validation_agent = Agent(
            model,
            output_type=AdvisoryReport,
            system_prompt=VALIDATION_SYSTEM_PROMPT,
        )
        self.fix_agent = Agent(
            model,
            output_type=FixSuggestionList,
            system_prompt=FIX_SYSTEM_PROMPT,
        )

    async def validate(self, kind: EntityKind, rows: list[dict[str, Any]]) -> AdvisoryReport:
        """Validate a dataset for logical consistency.

        Args:
            kind: Entity kind of the rows
            rows: The dataset's rows

        Returns:
            AdvisoryReport with errors, warnings and a confidence score
        """
        prompt = f"""Validate the following {kind.value} data for logical consistency and business rules.

Data:
{_format_rows(rows)}
"""
        result = await self.validation_agent.run(prompt)
        return result.output

    async def suggest_fixes(
        self,
        kind: EntityKind,
        rows: list[dict[str, Any]],
        errors: Sequence[ValidationIssue],
    ) -> FixSuggestionList:
        """Suggest replacement values for validation errors.

        Args:
            kind: Entity kind of the rows
            rows: The dataset's rows
            errors: Errors found so far

        Returns:
            FixSuggestionList keyed by row and column
        """
        prompt = f"""Given the following {kind.value} data and errors, suggest fixes for each error.

Data:
{_format_rows(rows)}

Errors:
{json.dumps([e.to_dict() for e in errors], indent=2)}
"""
        result = await self.fix_agent.run(prompt)
        return result.output


def build_advisory_oracle(model: str | None = None) -> AdvisoryAgent | None:
    """Create the advisory oracle from configuration.

    Args:
        model: Model identifier; defaults to DATA_ALCHEMIST_ADVISORY_MODEL

    Returns:
        AdvisoryAgent, or None when no credential is configured for the model
    """
    model = model or ADVISORY_MODEL
    api_key = resolve_credential(model)
    if api_key is None:
        logger.warning(f"No API key configured for {model}. Advisory validation will be disabled.")
        return None
    return AdvisoryAgent(_build_model(model, api_key))
