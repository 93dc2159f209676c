"""Schema-driven SQL challenge generation.

Each challenge is built from a randomly chosen table of the loaded schema.
The canonical solution is written to the answer store under a fresh id and
only the question (task, hints, sample data) is returned.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol, TypeVar

from querytutor.core.types import Challenge, Difficulty, Table
from querytutor.exceptions import NoEligibleTableError, NoForeignKeysError, TableNotFoundError
from querytutor.schema.context import format_row

if TYPE_CHECKING:
    from querytutor.challenges.store import AnswerStore
    from querytutor.schema.provider import SchemaProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Declared types containing any of these are treated as numeric (literal left unquoted)
NUMERIC_TYPE_MARKERS = ("int", "decimal", "number", "float", "double", "real")


class RandomSource(Protocol):
    """Anything that can pick an element, e.g. ``random.Random``."""

    def choice(self, seq: Sequence[T]) -> T: ...


def is_numeric_type(column_type: str) -> bool:
    lowered = column_type.lower()
    return any(marker in lowered for marker in NUMERIC_TYPE_MARKERS)


def sql_literal(value: str, column_type: str) -> str:
    """Render a sample value as a SQL literal for the column type."""
    if is_numeric_type(column_type):
        return value
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def _default_id() -> str:
    return str(uuid.uuid4())


class ChallengeGenerator:
    """Generates beginner, intermediate and advanced SQL challenges.

    - beginner: filter one table on one column (SELECT ... WHERE)
    - intermediate: join a table to the table one of its foreign keys references
    - advanced: GROUP BY with COUNT(*), HAVING and ORDER BY
    """

    def __init__(
        self,
        provider: SchemaProvider,
        store: AnswerStore,
        rng: RandomSource | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            provider: Schema provider the challenges are built from
            store: Answer store receiving the canonical solutions
            rng: Random source for table/column picks (seed it for reproducible challenges)
            id_factory: Challenge id factory (random UUID4 strings by default)
        """
        self._provider = provider
        self._store = store
        self._rng: RandomSource = rng or random.Random()
        self._id_factory = id_factory or _default_id

    def generate(self, difficulty: str | Difficulty | None) -> Challenge:
        """Generate a challenge and store its solution.

        Args:
            difficulty: 'beginner', 'intermediate' or 'advanced' (case-insensitive)

        Returns:
            The challenge question, without its solution

        Raises:
            InvalidDifficultyError: If the difficulty is not a known tier
            NoEligibleTableError: If no table has sample rows (beginner, advanced)
            NoForeignKeysError: If no table has foreign keys (intermediate)
        """
        tier = Difficulty.parse(difficulty)
        challenge_id = self._id_factory()

        if tier is Difficulty.BEGINNER:
            challenge, solution = self._beginner(challenge_id)
        elif tier is Difficulty.INTERMEDIATE:
            challenge, solution = self._intermediate(challenge_id)
        else:
            challenge, solution = self._advanced(challenge_id)

        self._store.add(challenge_id, solution)
        logger.info(f"Generated {tier.value} challenge {challenge_id}")
        return challenge

    def _tables_with_samples(self, tier: Difficulty) -> list[Table]:
        tables = [t for t in self._provider.get_all_tables() if t.has_samples and t.columns]
        if not tables:
            raise NoEligibleTableError(tier.value)
        return tables

    def _beginner(self, challenge_id: str) -> tuple[Challenge, str]:
        table = self._rng.choice(self._tables_with_samples(Difficulty.BEGINNER))
        column = self._rng.choice(table.columns)
        first_row = (table.samples or [{}])[0]
        sample_value = first_row.get(column.name)

        if sample_value is None:
            solution = f"SELECT * FROM {table.name} WHERE {column.name} IS NULL;"
        else:
            literal = sql_literal(sample_value, column.type)
            solution = f"SELECT * FROM {table.name} WHERE {column.name} = {literal};"

        challenge = Challenge(
            id=challenge_id,
            difficulty=Difficulty.BEGINNER,
            title="BEGINNER CHALLENGE",
            task=(
                f"Write a query to find all records from '{table.name}' where "
                f"{column.name} equals a specific value."
            ),
            hints=[
                "Use SELECT ... FROM ... WHERE ...",
                f"The column '{column.name}' has type: {column.type}",
                f"Example value from sample data: {'NULL' if sample_value is None else sample_value}",
            ],
            samples={table.name: format_row(first_row)},
        )
        return challenge, solution

    def _intermediate(self, challenge_id: str) -> tuple[Challenge, str]:
        tables_with_fk = [t for t in self._provider.get_all_tables() if t.has_foreign_keys]
        if not tables_with_fk:
            raise NoForeignKeysError()

        table = self._rng.choice(tables_with_fk)
        fk = self._rng.choice(table.foreign_keys or [])
        ref_table = self._provider.get_table_by_name(fk.referenced_table)
        if ref_table is None:
            raise TableNotFoundError(fk.referenced_table, self._provider.list_table_names())

        on_clause = f"{table.name}.{fk.column_name} = {ref_table.name}.{fk.referenced_column}"
        solution = (
            f"SELECT {table.name}.*, {ref_table.name}.* FROM {table.name} "
            f"INNER JOIN {ref_table.name} ON {on_clause};"
        )

        challenge = Challenge(
            id=challenge_id,
            difficulty=Difficulty.INTERMEDIATE,
            title="INTERMEDIATE CHALLENGE",
            task=(
                f"Write a query that combines data from {table.name} and {ref_table.name} "
                f"to show {table.name} records with their related {ref_table.name} information."
            ),
            hints=[
                "Use a JOIN to combine tables",
                f"JOIN ON {on_clause}",
                "Decide: INNER JOIN (only matching) or LEFT JOIN (include all from left)?",
            ],
            samples={
                table.name: format_row(table.samples[0]) if table.samples else None,
                ref_table.name: format_row(ref_table.samples[0]) if ref_table.samples else None,
            },
        )
        return challenge, solution

    def _advanced(self, challenge_id: str) -> tuple[Challenge, str]:
        table = self._rng.choice(self._tables_with_samples(Difficulty.ADVANCED))
        group_col = next(
            (c for c in table.columns if "varchar" in c.type.lower()),
            table.columns[0],
        )

        solution = (
            f"SELECT {group_col.name}, COUNT(*) AS record_count FROM {table.name} "
            f"GROUP BY {group_col.name} HAVING COUNT(*) > 1 ORDER BY record_count DESC;"
        )

        rows = (table.samples or [])[:3]
        challenge = Challenge(
            id=challenge_id,
            difficulty=Difficulty.ADVANCED,
            title="ADVANCED CHALLENGE",
            task=(
                f"Group {table.name} by {group_col.name}, count records in each group, "
                "show only groups with more than 1 record, and order by count (highest first)."
            ),
            hints=[
                f"Use GROUP BY {group_col.name}",
                "Use COUNT(*) to count records and HAVING (not WHERE) to filter groups",
                "Use ORDER BY with DESC to put the biggest groups first",
            ],
            samples={table.name: "[" + ", ".join(format_row(r) for r in rows) + "]"},
        )
        return challenge, solution
