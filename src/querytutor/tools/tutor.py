"""SQL tutor tools exposed to the LLM agent.

Every tool returns text the model can quote back to the student. Library
errors become messages instead of exceptions so one bad call does not end
the conversation.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from querytutor.exceptions import QueryTutorError
from querytutor.schema.context import format_row

if TYPE_CHECKING:
    from querytutor.challenges.service import ChallengeService
    from querytutor.query.analyzer import QueryAnalyzer
    from querytutor.schema.provider import SchemaProvider

logger = logging.getLogger(__name__)


class QueryTutorTools:
    """The tutor's toolset: analysis, schema lookup, optimization hints and challenges."""

    def __init__(
        self,
        provider: SchemaProvider,
        service: ChallengeService,
        analyzer: QueryAnalyzer,
    ) -> None:
        self._provider = provider
        self._service = service
        self._analyzer = analyzer

    def analyze_query(self, query: str) -> str:
        """Analyzes SQL query complexity, detects concepts used (JOIN, GROUP BY, etc.), and identifies potential issues like unknown tables or unfiltered scans.

        Args:
            query: The SQL SELECT query to analyze
        """
        try:
            analysis = self._analyzer.analyze(query)
        except QueryTutorError as e:
            return f"❌ {e.message}"

        lines = [
            "📊 QUERY ANALYSIS",
            "",
            f"Complexity Level: {analysis.complexity}",
            f"Concepts Used: {', '.join(analysis.concepts) or 'Basic SELECT'}",
            f"Tables Involved: {', '.join(analysis.tables)}",
            "",
        ]
        if analysis.issues:
            lines.append("⚠️ ISSUES DETECTED:")
            lines.extend(f"  • {issue}" for issue in analysis.issues)
        else:
            lines.append("✅ No issues detected - query looks good!")
        return "\n".join(lines)

    def get_table_schema(self, table_name: str) -> str:
        """Gets detailed schema information for a specific database table including columns, data types, foreign keys, indexes, and sample data.

        Args:
            table_name: The name of the table to look up
        """
        table = self._provider.get_table_by_name(table_name)
        if table is None:
            available = ", ".join(self._provider.list_table_names())
            return f"❌ Table '{table_name}' not found in schema. Available tables: {available}"

        lines = [f"📋 TABLE: {table.name}", "", "COLUMNS:"]
        for col in table.columns:
            nullable = "NULL" if col.nullable else "NOT NULL"
            desc = f" - {col.description}" if col.description else ""
            lines.append(f"  • {col.name}: {col.type} ({nullable}){desc}")
        lines.append("")

        if table.primary_key:
            lines.extend([f"🔑 PRIMARY KEY: {', '.join(table.primary_key)}", ""])

        if table.foreign_keys:
            lines.append("🔗 FOREIGN KEYS:")
            for fk in table.foreign_keys:
                lines.append(f"  • {fk.column_name} → {fk.referenced_table}.{fk.referenced_column}")
            lines.append("")

        if table.indexes:
            lines.append("⚡ INDEXES:")
            for idx in table.indexes:
                unique = " (UNIQUE)" if idx.unique else ""
                lines.append(f"  • {idx.name}: {', '.join(idx.columns)}{unique}")
            lines.append("")

        if table.samples:
            lines.append(f"📝 SAMPLE DATA ({len(table.samples)} rows):")
            lines.extend(f"  {format_row(row)}" for row in table.samples[:3])

        return "\n".join(lines).rstrip()

    def suggest_optimizations(self, query: str) -> str:
        """Analyzes a SQL query and suggests specific performance optimizations like adding indexes, replacing IN subqueries with JOINs, or avoiding SELECT *.

        Args:
            query: The SQL query to optimize
        """
        try:
            suggestions = self._analyzer.suggest_optimizations(query)
        except QueryTutorError as e:
            return f"❌ {e.message}"

        if not suggestions:
            return "✅ Query looks well-optimized! No obvious improvements needed."

        lines = ["🎯 OPTIMIZATION SUGGESTIONS", ""]
        for number, suggestion in enumerate(suggestions, 1):
            lines.append(f"{number}. {suggestion.title}")
            lines.append(f"   Reason: {suggestion.reason}")
            if suggestion.action:
                lines.append(f"   SQL: {suggestion.action}")
            if suggestion.expected_gain:
                lines.append(f"   Performance gain: {suggestion.expected_gain}")
            lines.append("")
        return "\n".join(lines).rstrip()

    def generate_challenge(self, difficulty: str) -> str:
        """Creates a SQL practice challenge from the actual database schema and returns ONLY the question as JSON (id, title, task, hints, samples). Never reveals the solution.

        Args:
            difficulty: Difficulty level: 'beginner', 'intermediate', or 'advanced'
        """
        try:
            challenge = self._service.generate_challenge(difficulty)
        except QueryTutorError as e:
            return json.dumps({"error": e.message})
        return challenge.model_dump_json()

    def validate_challenge_answer(self, challenge_id: str, sql: str) -> str:
        """Validates the student's SQL against the stored solution for a challenge id. Returns a short message starting with ✅ or ❌. Never reveals the solution.

        Args:
            challenge_id: The challenge id previously returned by generate_challenge
            sql: The student's SQL answer to validate
        """
        try:
            verdict = self._service.validate_challenge_answer(challenge_id, sql)
        except QueryTutorError as e:
            return f"❌ {e.message}"
        return verdict.message

    def reveal_challenge_answer(self, challenge_id: str) -> str:
        """Reveals the stored solution for a challenge id when the student explicitly gives up. Returns JSON with id and solution.

        Args:
            challenge_id: The challenge id previously returned by generate_challenge
        """
        try:
            answer = self._service.reveal_challenge_answer(challenge_id)
        except QueryTutorError as e:
            return json.dumps({"error": e.message})
        return answer.model_dump_json()
