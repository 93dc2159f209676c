"""LLM clients that drive the tutor's tool-calling loop."""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any, Protocol

from querytutor.exceptions import AgentError, ConfigurationError, ToolNotFoundError

if TYPE_CHECKING:
    from openai import OpenAI

    from querytutor.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1"
DEFAULT_MAX_ITERATIONS = 20


class AgentClient(Protocol):
    """Runs one agent turn: messages in, final assistant text out."""

    def run(self, messages: list[dict[str, Any]], registry: ToolRegistry) -> str: ...


def get_model_name() -> str:
    """Get the chat model from QUERYTUTOR_MODEL, falling back to the default."""
    return os.environ.get("QUERYTUTOR_MODEL") or DEFAULT_MODEL


class OpenAIAgentClient:
    """Agent client backed by OpenAI chat completions with function calling.

    Example:
        >>> client = OpenAIAgentClient()  # Uses OPENAI_API_KEY env var
        >>> client.run([{"role": "user", "content": "schema flights"}], registry)
    """

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        """Initialize OpenAI client.

        Args:
            model: Chat model name. Falls back to QUERYTUTOR_MODEL, then gpt-4.1.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            max_iterations: Model round-trips allowed per turn

        Raises:
            ConfigurationError: If no API key is available
        """
        from openai import OpenAI

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter.",
                {"env_var": "OPENAI_API_KEY"},
            )

        self._client: OpenAI = OpenAI(api_key=api_key)
        self._model = model or get_model_name()
        self._max_iterations = max_iterations

    @property
    def model(self) -> str:
        return self._model

    def run(self, messages: list[dict[str, Any]], registry: ToolRegistry) -> str:
        """Run the tool-calling loop until the model answers without tool calls.

        Args:
            messages: Chat messages (system prompt first)
            registry: Tools the model may call

        Returns:
            Final assistant text

        Raises:
            AgentError: If the API call fails or the iteration budget runs out
        """
        from openai import OpenAIError

        conversation = list(messages)
        tools = registry.to_openai_format()

        for iteration in range(self._max_iterations):
            try:
                response = self._client.chat.completions.create(
                    model=self._model,
                    messages=conversation,
                    tools=tools,
                )
            except OpenAIError as e:
                raise AgentError(f"OpenAI request failed: {e}", {"model": self._model}) from e

            message = response.choices[0].message
            if not message.tool_calls:
                return message.content or ""

            conversation.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )
            for call in message.tool_calls:
                logger.debug(f"Iteration {iteration + 1}: tool call {call.function.name}")
                conversation.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": run_tool_call(registry, call.function.name, call.function.arguments),
                    }
                )

        raise AgentError(
            f"Agent did not finish within {self._max_iterations} iterations",
            {"max_iterations": self._max_iterations},
        )


def run_tool_call(registry: ToolRegistry, name: str, raw_arguments: str | None) -> str:
    """Execute one model tool call; problems are reported back as text."""
    try:
        arguments = json.loads(raw_arguments) if raw_arguments else {}
    except json.JSONDecodeError:
        return f"❌ Arguments for {name} are not valid JSON"
    if not isinstance(arguments, dict):
        return f"❌ Arguments for {name} must be a JSON object"

    try:
        return registry.call(name, arguments)
    except ToolNotFoundError as e:
        logger.warning(e.message)
        return f"❌ {e.message}"
