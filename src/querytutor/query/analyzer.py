"""Query analysis and optimization hints for the tutor tools.

Checks SELECT queries against the loaded schema and generates actionable
suggestions for students.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from querytutor.core.types import OptimizationSuggestion, QueryAnalysis
from querytutor.query import inspector

if TYPE_CHECKING:
    from querytutor.schema.provider import SchemaProvider

# Tables wider than this get a SELECT * warning
WIDE_TABLE_COLUMNS = 10
# Tables with more sample rows than this get a missing-WHERE warning
LARGE_TABLE_SAMPLES = 5


class QueryAnalyzer:
    """Analyzes SELECT queries against the schema.

    Reports the concepts a query uses, how complex it is, and schema-aware
    issues such as unknown tables or unfiltered scans.
    """

    def __init__(self, provider: SchemaProvider) -> None:
        """Initialize the analyzer.

        Args:
            provider: Schema provider used for table lookups
        """
        self._provider = provider

    def analyze(self, sql: str) -> QueryAnalysis:
        """Analyze query complexity, concepts and issues.

        Args:
            sql: SELECT query text

        Returns:
            QueryAnalysis for the query

        Raises:
            SqlParseError: If the query cannot be parsed or is not a SELECT
        """
        statement = inspector.parse_select(sql)
        tables = inspector.extract_table_names(statement)

        concepts = []
        if inspector.has_join(statement):
            concepts.append("JOIN")
        if inspector.has_group_by(statement):
            concepts.append("GROUP BY")
        if inspector.has_subquery(statement):
            concepts.append("Subquery")
        if inspector.has_window_function(statement):
            concepts.append("Window Functions")

        issues = []
        for table_name in tables:
            table = self._provider.get_table_by_name(table_name)
            if table is None:
                issues.append(f"⚠️ Table '{table_name}' not found in schema!")
                continue

            if inspector.has_select_star(statement) and len(table.columns) > WIDE_TABLE_COLUMNS:
                issues.append(
                    f"⚡ SELECT * fetches {len(table.columns)} columns from '{table_name}' "
                    "- specify columns instead"
                )

            if not inspector.has_where(statement) and len(table.samples or []) > LARGE_TABLE_SAMPLES:
                issues.append(f"💡 No WHERE clause - might return many rows from '{table_name}'")

        complexity: Literal["Beginner", "Intermediate", "Advanced"]
        if len(concepts) > 3:
            complexity = "Advanced"
        elif len(concepts) > 1:
            complexity = "Intermediate"
        else:
            complexity = "Beginner"

        return QueryAnalysis(complexity=complexity, concepts=concepts, tables=tables, issues=issues)

    def suggest_optimizations(self, sql: str) -> list[OptimizationSuggestion]:
        """Generate optimization suggestions for a query.

        Args:
            sql: SELECT query text

        Returns:
            List of suggestions (empty if the query looks fine)

        Raises:
            SqlParseError: If the query cannot be parsed or is not a SELECT
        """
        statement = inspector.parse_select(sql)
        tables = inspector.extract_table_names(statement)
        suggestions: list[OptimizationSuggestion] = []

        if inspector.has_select_star(statement):
            suggestions.append(
                OptimizationSuggestion(
                    title="Replace SELECT * with specific columns",
                    reason="Fetches unnecessary data, increases memory and network usage",
                    expected_gain="20-50% faster",
                    priority="medium",
                )
            )

        # Index hints for filtered columns that have no index
        seen: set[tuple[str, str]] = set()
        for qualifier, column_name in inspector.where_columns(statement):
            candidates = [qualifier] if qualifier in tables else tables
            for table_name in candidates:
                table = self._provider.get_table_by_name(table_name)
                if table is None or self._provider.get_column_info(table_name, column_name) is None:
                    continue
                key = (table_name, column_name.lower())
                if key in seen or self._provider.has_index(table_name, column_name):
                    continue
                seen.add(key)
                suggestions.append(
                    OptimizationSuggestion(
                        title=f"Consider adding index on {table_name}.{column_name}",
                        reason="Filtering on an unindexed column scans the whole table",
                        action=(
                            f"CREATE INDEX idx_{table_name}_{column_name} "
                            f"ON {table_name}({column_name});"
                        ),
                        expected_gain="50-90% faster for filtered queries",
                        priority="high",
                    )
                )

        if inspector.has_in_subquery(statement):
            suggestions.append(
                OptimizationSuggestion(
                    title="Replace IN subquery with JOIN",
                    reason="JOINs are better optimized by query planners",
                    expected_gain="3-10x faster on large datasets",
                    priority="medium",
                )
            )

        if inspector.has_join(statement):
            suggestions.append(
                OptimizationSuggestion(
                    title="Ensure JOIN columns have indexes",
                    reason="Indexes dramatically speed up JOIN operations",
                    action="Use get_table_schema to verify indexes exist",
                    priority="low",
                )
            )

        return suggestions
