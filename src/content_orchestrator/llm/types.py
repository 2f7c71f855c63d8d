"""Request/response contract for the language-model service."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from content_orchestrator.runtime.types import ContentBlock, Message, TextBlock, ToolUseBlock

StopReason = Literal["end_turn", "tool_use", "max_tokens", "stop_sequence"]


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class LLMRequest(BaseModel):
    system: str | None = None
    messages: list[Message]
    tools: list[dict[str, Any]] = Field(default_factory=list)
    model: str
    max_tokens: int = 4096


class LLMResponse(BaseModel):
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: StopReason = "end_turn"
    usage: Usage = Field(default_factory=Usage)

    @property
    def truncated(self) -> bool:
        return self.stop_reason == "max_tokens"

    def text(self) -> str:
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))

    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    def first_tool_use(self, name: str | None = None) -> ToolUseBlock | None:
        for block in self.tool_uses():
            if name is None or block.name == name:
                return block
        return None
