"""querytutor - SQL tutoring and practice challenges grounded in a real schema.

Loads a database schema (Nemory YAML or a live database), analyzes queries
against it, and generates practice challenges whose solutions never leave
the server side. An LLM agent can drive everything through the tool registry.

Example:
    from querytutor import ChallengeService, SchemaProvider

    provider = SchemaProvider.from_yaml("nemory-schema.yaml")
    service = ChallengeService(provider)

    # Generate a challenge; only the question comes back
    challenge = service.generate_challenge("beginner")
    print(challenge.task)

    # Validate an answer; a passed challenge is retired
    verdict = service.validate_challenge_answer(challenge.id, "SELECT * FROM ...")
    print(verdict.message)

    # Or reflect a live database instead of YAML
    provider = SchemaProvider.from_database("sqlite:///airline.db")
"""

from querytutor.agent import OpenAIAgentClient, TutorController, TutorReply
from querytutor.challenges import AnswerStore, AnswerValidator, ChallengeGenerator, ChallengeService
from querytutor.core.types import (
    Catalog,
    Challenge,
    ChallengeAnswer,
    ChallengeVerdict,
    Column,
    Database,
    Difficulty,
    ForeignKey,
    Index,
    OptimizationSuggestion,
    QueryAnalysis,
    Schema,
    Table,
)
from querytutor.exceptions import (
    AgentError,
    ChallengeError,
    ConfigurationError,
    InvalidDifficultyError,
    MissingChallengeIdError,
    MissingSqlError,
    NoEligibleTableError,
    NoForeignKeysError,
    NotSelectError,
    QueryTutorError,
    SchemaLoadError,
    SqlParseError,
    TableNotFoundError,
    ToolNotFoundError,
    UnknownChallengeIdError,
)
from querytutor.query import QueryAnalyzer
from querytutor.schema import SchemaContextBuilder, SchemaProvider
from querytutor.tools import QueryTutorTools, ToolDefinition, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "SchemaProvider",
    "ChallengeService",
    "QueryAnalyzer",
    "TutorController",
    # Schema types
    "Database",
    "Catalog",
    "Schema",
    "Table",
    "Column",
    "ForeignKey",
    "Index",
    "SchemaContextBuilder",
    # Challenge engine
    "AnswerStore",
    "AnswerValidator",
    "ChallengeGenerator",
    "Challenge",
    "ChallengeAnswer",
    "ChallengeVerdict",
    "Difficulty",
    # Query tools
    "QueryAnalysis",
    "OptimizationSuggestion",
    # Agent
    "OpenAIAgentClient",
    "TutorReply",
    "QueryTutorTools",
    "ToolDefinition",
    "ToolRegistry",
    # Exceptions
    "QueryTutorError",
    "ConfigurationError",
    "SchemaLoadError",
    "TableNotFoundError",
    "SqlParseError",
    "NotSelectError",
    "ChallengeError",
    "InvalidDifficultyError",
    "NoEligibleTableError",
    "NoForeignKeysError",
    "MissingChallengeIdError",
    "UnknownChallengeIdError",
    "MissingSqlError",
    "ToolNotFoundError",
    "AgentError",
]
