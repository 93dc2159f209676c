"""Core types for querytutor.

Schema types mirror the Nemory YAML document (camelCase keys on the wire,
snake_case attributes in Python). All types are JSON-serializable for agent
consumption.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from querytutor.exceptions import InvalidDifficultyError

# Schema documents are read-only once loaded; unknown YAML keys are ignored.
_SCHEMA_MODEL_CONFIG: dict[str, Any] = {
    "populate_by_name": True,
    "frozen": True,
    "extra": "ignore",
}


def _sample_text(value: Any) -> str | None:
    """Render a YAML/database scalar the way it reads in the source document."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Column(BaseModel):
    """A table column."""

    name: str
    type: str = Field(..., description="Declared type, free text (e.g. 'varchar(50)', 'int')")
    nullable: bool = True
    description: str | None = None

    model_config = _SCHEMA_MODEL_CONFIG


class ForeignKey(BaseModel):
    """A single-column foreign key."""

    column_name: str = Field(..., alias="columnName")
    referenced_table: str = Field(..., alias="referencedTable")
    referenced_column: str = Field(..., alias="referencedColumn")

    model_config = _SCHEMA_MODEL_CONFIG


class Index(BaseModel):
    """A table index."""

    name: str
    columns: list[str]
    unique: bool = False

    model_config = _SCHEMA_MODEL_CONFIG


class Table(BaseModel):
    """A table with its columns, keys, indexes and sample rows."""

    name: str
    columns: list[Column]
    samples: list[dict[str, str | None]] | None = None
    primary_key: list[str] | None = Field(default=None, alias="primaryKey")
    foreign_keys: list[ForeignKey] | None = Field(default=None, alias="foreignKeys")
    indexes: list[Index] | None = None
    description: str | None = None

    model_config = _SCHEMA_MODEL_CONFIG

    @field_validator("samples", mode="before")
    @classmethod
    def _stringify_samples(cls, value: Any) -> Any:
        # YAML gives ints, dates and bools; samples are text like the rest of the schema
        if value is None:
            return None
        return [
            {str(k): _sample_text(v) for k, v in row.items()} if isinstance(row, dict) else row
            for row in value
        ]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def has_samples(self) -> bool:
        return bool(self.samples)

    @property
    def has_foreign_keys(self) -> bool:
        return bool(self.foreign_keys)


class Schema(BaseModel):
    """A named schema inside a catalog."""

    name: str
    tables: list[Table] = Field(default_factory=list)
    description: str | None = None

    model_config = _SCHEMA_MODEL_CONFIG


class Catalog(BaseModel):
    """A catalog grouping schemas."""

    name: str
    schemas: list[Schema] = Field(default_factory=list)
    description: str | None = None

    model_config = _SCHEMA_MODEL_CONFIG


class Database(BaseModel):
    """Root of a Nemory schema document."""

    database_id: str = Field(..., alias="databaseId")
    catalogs: list[Catalog] = Field(default_factory=list)

    model_config = _SCHEMA_MODEL_CONFIG


# === Challenge Types ===


class Difficulty(StrEnum):
    """Challenge difficulty tiers."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid difficulty values."""
        return [d.value for d in cls]

    @classmethod
    def parse(cls, value: str | Difficulty | None) -> Difficulty:
        """Match a difficulty case-insensitively.

        Raises:
            InvalidDifficultyError: If value is not one of the three tiers
        """
        if isinstance(value, Difficulty):
            return value
        if value is not None and not isinstance(value, str):
            raise InvalidDifficultyError(str(value))
        normalized = (value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidDifficultyError(value) from None


class Challenge(BaseModel):
    """A generated practice problem (output format).

    Never carries the canonical solution; that lives only in the answer store.
    """

    id: str = Field(..., description="Opaque challenge id (UUID string)")
    difficulty: Difficulty
    title: str
    task: str
    hints: list[str] = Field(default_factory=list)
    samples: dict[str, str | None] | None = Field(
        default=None, description="Sample data excerpt keyed by table name"
    )

    model_config = {"use_enum_values": True}


class ChallengeVerdict(BaseModel):
    """Result of validating a submitted answer."""

    id: str
    passed: bool
    message: str


class ChallengeAnswer(BaseModel):
    """A revealed solution (explicit give-up only)."""

    id: str
    solution: str


# === Query Tool Types ===


class QueryAnalysis(BaseModel):
    """Structural analysis of a SELECT query."""

    complexity: Literal["Beginner", "Intermediate", "Advanced"]
    concepts: list[str] = Field(default_factory=list)
    tables: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)


class OptimizationSuggestion(BaseModel):
    """Actionable optimization hint for a query."""

    title: str  # "Replace SELECT * with specific columns"
    reason: str
    action: str | None = None  # Copy-paste SQL, when there is one
    expected_gain: str | None = None
    priority: Literal["high", "medium", "low"] = "medium"
