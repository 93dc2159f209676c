"""Custom exceptions for querytutor.

All exceptions are designed with agent-first principles:
- Actionable error messages that tell what went wrong AND how to fix it
- Include context about available options when relevant
- Never include a stored challenge solution
"""

from __future__ import annotations

from typing import Any


class QueryTutorError(Exception):
    """Base exception for all querytutor errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict for agent consumption."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(QueryTutorError):
    """Required configuration (API key, schema path, ...) is missing."""

    pass


class SchemaLoadError(QueryTutorError):
    """The schema document or database could not be loaded."""

    def __init__(self, source: str, reason: str) -> None:
        message = f"Could not load schema from '{source}': {reason}"
        super().__init__(message, {"source": source, "reason": reason})
        self.source = source
        self.reason = reason


class TableNotFoundError(QueryTutorError):
    """Table does not exist in the loaded schema."""

    def __init__(self, table_name: str, available_tables: list[str] | None = None) -> None:
        available = available_tables or []
        if available:
            message = f"Table '{table_name}' not found in schema. Available tables: {', '.join(available)}"
        else:
            message = f"Table '{table_name}' not found in schema. The schema has no tables."

        super().__init__(message, {"table_name": table_name, "available_tables": available})
        self.table_name = table_name
        self.available_tables = available


class SqlParseError(QueryTutorError):
    """SQL text could not be parsed."""

    def __init__(self, sql: str, reason: str, message: str | None = None) -> None:
        message = message or f"Error parsing query: {reason}. Make sure it's valid SQL syntax."
        super().__init__(message, {"reason": reason})
        self.sql = sql
        self.reason = reason


class NotSelectError(SqlParseError):
    """SQL parsed but is not a SELECT statement."""

    def __init__(self, sql: str, statement_type: str) -> None:
        super().__init__(
            sql,
            f"not a SELECT statement ({statement_type})",
            message=f"Only SELECT queries are supported. Got: {statement_type}",
        )
        self.statement_type = statement_type


# === Challenge Errors ===


class ChallengeError(QueryTutorError):
    """Base class for challenge generation and validation errors."""

    pass


class InvalidDifficultyError(ChallengeError):
    """Unknown difficulty tier requested."""

    VALID_DIFFICULTIES = ["beginner", "intermediate", "advanced"]

    def __init__(self, difficulty: str | None) -> None:
        message = (
            f"Invalid difficulty '{difficulty}'. "
            f"Use: {', '.join(self.VALID_DIFFICULTIES)}"
        )
        super().__init__(
            message, {"difficulty": difficulty, "valid_difficulties": self.VALID_DIFFICULTIES}
        )
        self.difficulty = difficulty


class NoEligibleTableError(ChallengeError):
    """No table has the sample data a challenge tier needs."""

    def __init__(self, difficulty: str) -> None:
        message = (
            f"No tables with sample data found for a {difficulty} challenge. "
            "Add sample rows to the schema or load a different schema."
        )
        super().__init__(message, {"difficulty": difficulty})
        self.difficulty = difficulty


class NoForeignKeysError(ChallengeError):
    """No table declares a foreign key, so a join challenge is impossible."""

    def __init__(self) -> None:
        super().__init__(
            "No foreign key relationships found. Try beginner challenges instead.",
            {"suggested_difficulty": "beginner"},
        )


class MissingChallengeIdError(ChallengeError):
    """Challenge id was blank or absent."""

    def __init__(self) -> None:
        super().__init__("Missing challenge id. Please generate a challenge first.")


class UnknownChallengeIdError(ChallengeError):
    """No stored answer for the challenge id (never issued or already solved)."""

    def __init__(self, challenge_id: str) -> None:
        super().__init__(
            "Unknown challenge id. Please generate a new challenge.",
            {"challenge_id": challenge_id},
        )
        self.challenge_id = challenge_id


class MissingSqlError(ChallengeError):
    """Submitted SQL was blank."""

    def __init__(self) -> None:
        super().__init__("Please provide a SQL query to validate.")


# === Tool and Agent Errors ===


class ToolNotFoundError(QueryTutorError):
    """Agent asked for a tool that is not registered."""

    def __init__(self, tool_name: str, available_tools: list[str]) -> None:
        message = f"Tool '{tool_name}' not found. Available tools: {', '.join(available_tools)}"
        super().__init__(message, {"tool_name": tool_name, "available_tools": available_tools})
        self.tool_name = tool_name
        self.available_tools = available_tools


class AgentError(QueryTutorError):
    """The agent loop failed or did not finish."""

    pass
