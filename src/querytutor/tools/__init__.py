"""Tools for agent integrations."""

from querytutor.tools.base import ToolDefinition, function_to_tool_definition
from querytutor.tools.registry import ToolRegistry
from querytutor.tools.tutor import QueryTutorTools

__all__ = [
    "QueryTutorTools",
    "ToolDefinition",
    "ToolRegistry",
    "function_to_tool_definition",
]
