"""Tool registry for agent access."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from querytutor.exceptions import ToolNotFoundError
from querytutor.tools.base import ToolDefinition, function_to_tool_definition

if TYPE_CHECKING:
    from querytutor.tools.tutor import QueryTutorTools

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


def _matches_schema(value: Any, schema: dict[str, Any]) -> bool:
    """Check a decoded JSON value against a parameter schema (null always passes)."""
    if value is None:
        return True
    if "anyOf" in schema:
        return any(_matches_schema(value, option) for option in schema["anyOf"])
    expected = _JSON_TYPES.get(schema.get("type", ""))
    if expected is None:
        return True
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) and bool not in expected:
        return False
    return isinstance(value, expected)


class ToolRegistry:
    """Registry of tools for agent consumption.

    Exports the tutor's operations as tools for OpenAI or Anthropic style
    function calling, and dispatches the calls the model makes.
    """

    def __init__(self, tools: QueryTutorTools) -> None:
        """Initialize tool registry.

        Args:
            tools: Tutor toolset the registered tools call into
        """
        self._toolset = tools
        self._tools: dict[str, ToolDefinition] = {}
        self._register_default_tools()

    def _register_default_tools(self) -> None:
        # Query tools
        self.register(name="analyze_query", func=self._toolset.analyze_query)
        self.register(name="get_table_schema", func=self._toolset.get_table_schema)
        self.register(name="suggest_optimizations", func=self._toolset.suggest_optimizations)

        # Challenge tools
        self.register(name="generate_challenge", func=self._toolset.generate_challenge)
        self.register(
            name="validate_challenge_answer", func=self._toolset.validate_challenge_answer
        )
        self.register(name="reveal_challenge_answer", func=self._toolset.reveal_challenge_answer)

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        description: str | None = None,
    ) -> ToolDefinition:
        """Register a tool.

        Args:
            name: Tool name
            func: Function to call
            description: Tool description (docstring summary if omitted)

        Returns:
            Created ToolDefinition
        """
        tool = function_to_tool_definition(func, name=name, description=description)
        self._tools[name] = tool
        return tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        return list(self._tools.keys())

    def get_all(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def to_openai_format(self) -> list[dict[str, Any]]:
        """Export all tools in OpenAI function calling format."""
        return [tool.to_openai_format() for tool in self._tools.values()]

    def to_anthropic_format(self) -> list[dict[str, Any]]:
        """Export all tools in Anthropic Claude format."""
        return [tool.to_anthropic_format() for tool in self._tools.values()]

    def to_dict(self) -> list[dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]

    def call(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """Invoke a registered tool with the arguments the model supplied.

        Arguments the tool does not accept are dropped; missing required
        arguments and arguments of the wrong JSON type are reported back as
        text for the model to correct.

        Args:
            name: Tool name
            arguments: Keyword arguments decoded from the model's call

        Returns:
            The tool's text result

        Raises:
            ToolNotFoundError: If no tool is registered under ``name``
        """
        tool = self._tools.get(name)
        if tool is None or tool.function is None:
            raise ToolNotFoundError(name, self.list_tools())

        accepted = tool.parameters.get("properties", {})
        kwargs = {key: value for key, value in (arguments or {}).items() if key in accepted}
        missing = [key for key in tool.parameters.get("required", []) if key not in kwargs]
        if missing:
            return f"❌ Missing arguments for {name}: {', '.join(missing)}"

        mistyped = [
            key for key, value in kwargs.items() if not _matches_schema(value, accepted[key])
        ]
        if mistyped:
            expected = ", ".join(f"{key} ({accepted[key].get('type', 'any')})" for key in mistyped)
            return f"❌ Wrong argument types for {name}: {expected}"

        logger.debug(f"Calling tool {name} with {sorted(kwargs)}")
        return str(tool.function(**kwargs))
