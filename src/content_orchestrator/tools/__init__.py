"""Tooling layer for schema-validated, failure-isolated execution."""

from content_orchestrator.tools.evaluation import create_evaluation_tools
from content_orchestrator.tools.gateway import ToolDispatcher
from content_orchestrator.tools.plan import create_plan_tools
from content_orchestrator.tools.registry import ToolRegistry, ToolSpec
from content_orchestrator.tools.scratchpad import create_scratchpad_tools

__all__ = [
    "ToolDispatcher",
    "ToolRegistry",
    "ToolSpec",
    "create_evaluation_tools",
    "create_plan_tools",
    "create_scratchpad_tools",
]
