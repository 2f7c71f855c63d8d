"""Serializable run state: messages, content blocks, plan steps and the run itself."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

RunStatus = Literal["running", "paused", "complete", "error"]
ProgressEvent = Literal["tool_call", "paused", "complete", "error"]
PlanStepStatus = Literal["pending", "in_progress", "complete", "skipped"]
TERMINAL_STATUSES: frozenset[str] = frozenset({"complete", "error"})


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """One exchange unit. The opening user message may carry plain text."""

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]

    def blocks(self) -> list[TextBlock | ToolUseBlock | ToolResultBlock]:
        if isinstance(self.content, str):
            return [TextBlock(text=self.content)]
        return list(self.content)

    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.blocks() if isinstance(block, ToolUseBlock)]


class PlanStep(BaseModel):
    description: str
    rationale: str
    status: PlanStepStatus = "pending"


class AgentRun(BaseModel):
    """One execution of an agent against one entity.

    ``messages`` is append-only. ``final_output`` and ``error`` are only set on
    terminal statuses and never together.
    """

    run_id: str
    agent_kind: str
    entity_id: str
    status: RunStatus = "running"
    turn_count: int = 0
    resume_count: int = 0
    messages: list[Message] = Field(default_factory=list)
    plan: list[PlanStep] = Field(default_factory=list)
    final_output: str | None = None
    error: str | None = None
    last_tool_call: str | None = None
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def mark_complete(self, final_output: str | None) -> None:
        self.status = "complete"
        self.final_output = final_output
        self.error = None

    def mark_error(self, message: str) -> None:
        self.status = "error"
        self.error = message
        self.final_output = None


def extract_final_text(blocks: list[Any]) -> str | None:
    texts = [block.text for block in blocks if isinstance(block, TextBlock)]
    if not texts:
        return None
    return "\n".join(texts)
