"""Exception taxonomy shared by the runtime, tools and pipeline."""

from __future__ import annotations


class AgentPausedError(Exception):
    """A run hit its time budget and was checkpointed; invoke again to resume.

    Deliberately not an ``AgentRunError``: retry logic must not count a pause
    as a failure.
    """

    def __init__(self, *, run_id: str, agent_kind: str, entity_id: str) -> None:
        super().__init__(f"AGENT_PAUSED: {agent_kind} run {run_id} for {entity_id}")
        self.run_id = run_id
        self.agent_kind = agent_kind
        self.entity_id = entity_id


class AgentRunError(RuntimeError):
    """A run reached the terminal ``error`` status."""

    def __init__(self, message: str, *, run_id: str | None = None) -> None:
        super().__init__(message)
        self.run_id = run_id


class RunStateError(RuntimeError):
    """An operation was requested for a run in the wrong status."""


class StructuredOutputError(ValueError):
    """Structured model output or tool input could not be parsed."""


class TruncatedOutputError(StructuredOutputError):
    """The model stopped at its output-size limit."""


class CriticSelectionError(StructuredOutputError):
    """Critic selection output was unusable (not the same as zero matches)."""


class LLMServiceError(RuntimeError):
    """The language-model service could not be reached or rejected the request."""


class UnknownToolError(LookupError):
    """A tool name is not present in the registry."""
