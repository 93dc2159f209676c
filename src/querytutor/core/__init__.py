"""Core types for querytutor."""

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

__all__ = [
    "Catalog",
    "Challenge",
    "ChallengeAnswer",
    "ChallengeVerdict",
    "Column",
    "Database",
    "Difficulty",
    "ForeignKey",
    "Index",
    "OptimizationSuggestion",
    "QueryAnalysis",
    "Schema",
    "Table",
]
