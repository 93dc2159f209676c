"""Tool definitions for agent integrations."""

from __future__ import annotations

import inspect
import re
import types
from collections.abc import Callable
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

# Google-style docstring section headers
_SECTION_HEADER = re.compile(r"^(Args|Arguments|Parameters|Returns|Raises|Example|Examples):\s*$")
_ARG_LINE = re.compile(r"^(\s+)(\w+)(?:\s*\([^)]*\))?:\s*(.*)$")


class ToolDefinition(BaseModel):
    """Definition of a tool for agent consumption.

    Compatible with OpenAI and Anthropic tool formats.
    """

    name: str
    description: str
    parameters: dict[str, Any]
    function: Callable[..., Any] | None = None

    model_config = {"arbitrary_types_allowed": True}

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_anthropic_format(self) -> dict[str, Any]:
        """Convert to Anthropic Claude tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


def python_type_to_json_schema(python_type: Any) -> dict[str, Any]:
    """Convert a Python type hint to JSON Schema.

    ``X | None`` collapses to the schema of ``X``; other unions become ``anyOf``.
    """
    scalar_types: dict[Any, dict[str, Any]] = {
        str: {"type": "string"},
        int: {"type": "integer"},
        float: {"type": "number"},
        bool: {"type": "boolean"},
        list: {"type": "array"},
        dict: {"type": "object"},
        type(None): {"type": "null"},
    }
    if python_type in scalar_types:
        return dict(scalar_types[python_type])

    origin = get_origin(python_type)
    args = get_args(python_type)

    if origin in (Union, types.UnionType):
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1:
            return python_type_to_json_schema(non_none[0])
        return {"anyOf": [python_type_to_json_schema(a) for a in args]}

    if origin is Literal:
        return {"type": "string", "enum": [str(a) for a in args]}

    if origin is list:
        schema: dict[str, Any] = {"type": "array"}
        if args:
            schema["items"] = python_type_to_json_schema(args[0])
        return schema

    if origin is dict:
        return {"type": "object"}

    return {"type": "string"}


def split_docstring(doc: str | None) -> tuple[str, dict[str, str]]:
    """Split a Google-style docstring into summary text and per-argument descriptions.

    Args:
        doc: Raw docstring

    Returns:
        (text before the first section header, {arg name: description})
    """
    if not doc:
        return "", {}

    summary_lines: list[str] = []
    arg_descriptions: dict[str, str] = {}
    section: str | None = None
    current_arg: str | None = None
    arg_indent: int | None = None

    for line in inspect.cleandoc(doc).splitlines():
        header = _SECTION_HEADER.match(line)
        if header:
            section = header.group(1)
            current_arg = None
            arg_indent = None
            continue

        if section is None:
            summary_lines.append(line)
            continue
        if section not in ("Args", "Arguments", "Parameters") or not line.strip():
            continue

        indent = len(line) - len(line.lstrip())
        arg_match = _ARG_LINE.match(line)
        if arg_match and (arg_indent is None or indent <= arg_indent):
            arg_indent = indent
            current_arg = arg_match.group(2)
            arg_descriptions[current_arg] = arg_match.group(3).strip()
        elif current_arg is not None:
            arg_descriptions[current_arg] = f"{arg_descriptions[current_arg]} {line.strip()}".strip()

    return "\n".join(summary_lines).strip(), arg_descriptions


def function_to_tool_definition(
    func: Callable[..., Any],
    name: str | None = None,
    description: str | None = None,
) -> ToolDefinition:
    """Convert a Python function to a ToolDefinition.

    Parameter types come from type hints, parameter descriptions from the
    docstring's ``Args:`` section, and the tool description from the docstring
    summary unless overridden.

    Args:
        func: Function (or bound method) to convert
        name: Override function name
        description: Override description

    Returns:
        ToolDefinition for the function
    """
    tool_name = name or func.__name__
    summary, arg_docs = split_docstring(func.__doc__)
    tool_description = description or summary or f"Execute {tool_name}"

    sig = inspect.signature(func)
    hints = get_type_hints(func)

    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in sig.parameters.items():
        if param_name == "self":
            continue

        param_schema = python_type_to_json_schema(hints.get(param_name, str))
        if param_name in arg_docs:
            param_schema["description"] = arg_docs[param_name]

        if param.default is inspect.Parameter.empty:
            required.append(param_name)
        elif param.default is not None:
            param_schema["default"] = param.default

        properties[param_name] = param_schema

    parameters: dict[str, Any] = {
        "type": "object",
        "properties": properties,
    }
    if required:
        parameters["required"] = required

    return ToolDefinition(
        name=tool_name,
        description=tool_description.strip(),
        parameters=parameters,
        function=func,
    )
