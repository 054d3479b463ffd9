"""Advisory oracle backed by a PydanticAI agent."""

from data_alchemist.advisory.agent import AdvisoryAgent, build_advisory_oracle, resolve_credential

__all__ = [
    "AdvisoryAgent",
    "build_advisory_oracle",
    "resolve_credential",
]
