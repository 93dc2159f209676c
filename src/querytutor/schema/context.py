"""Schema Context Builder for LLM prompts.

Renders the loaded schema as text an LLM can reason about:
- Database and schema names
- Columns with types, nullability and descriptions
- Primary keys, foreign keys and indexes
- Sample rows and relationships to other tables
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from querytutor.core.types import Table
    from querytutor.schema.provider import SchemaProvider

SEPARATOR = "━" * 34


def format_row(row: dict[str, str | None]) -> str:
    """Render a sample row as ``{col=value, ...}``."""
    return "{" + ", ".join(f"{k}={v}" for k, v in row.items()) + "}"


class SchemaContextBuilder:
    """Builds schema context text for LLM consumption.

    Example:
        builder = SchemaContextBuilder(provider)
        full = builder.build(["orders", "customers"])
        compact = builder.build_compact()
    """

    def __init__(self, provider: SchemaProvider, sample_rows: int = 2) -> None:
        """Initialize the builder.

        Args:
            provider: Schema provider to render
            sample_rows: Sample rows shown per table in the full context
        """
        self._provider = provider
        self._sample_rows = sample_rows

    def _resolve(self, table_names: list[str] | None) -> list[Table]:
        names = table_names or self._provider.list_table_names()
        tables = []
        for name in names:
            table = self._provider.get_table_by_name(name)
            if table is not None:
                tables.append(table)
        return tables

    def build(self, table_names: list[str] | None = None) -> str:
        """Build the full context. Unknown table names are skipped.

        Args:
            table_names: Tables to include (all tables if empty)

        Returns:
            Multi-line context text
        """
        lines = [
            "DATABASE SCHEMA CONTEXT",
            f"Database: {self._provider.database.database_id}",
            f"Schema: {self._provider.default_schema.name}",
            "",
        ]

        for table in self._resolve(table_names):
            lines.append(SEPARATOR)
            lines.append(f"📋 Table: {table.name}")
            if table.description:
                lines.append(table.description)
            lines.append("")

            lines.append("Columns:")
            for col in table.columns:
                null_text = "NULL" if col.nullable else "NOT NULL"
                desc = f" - {col.description}" if col.description else ""
                lines.append(f"  • {col.name}: {col.type} ({null_text}){desc}")
            lines.append("")

            if table.primary_key:
                lines.append(f"🔑 Primary Key: {', '.join(table.primary_key)}")
                lines.append("")

            if table.foreign_keys:
                lines.append("🔗 Foreign Keys:")
                for fk in table.foreign_keys:
                    lines.append(
                        f"  • {fk.column_name} → {fk.referenced_table}.{fk.referenced_column}"
                    )
                lines.append("")

            if table.indexes:
                lines.append("⚡ Indexes:")
                for idx in table.indexes:
                    unique_text = " (UNIQUE)" if idx.unique else ""
                    lines.append(f"  • {idx.name}: {', '.join(idx.columns)}{unique_text}")
                lines.append("")

            if table.samples:
                lines.append(f"📝 Sample Data ({len(table.samples)} rows):")
                for row in table.samples[: self._sample_rows]:
                    lines.append(f"  {format_row(row)}")
                lines.append("")

            related = self._provider.get_related_tables(table.name)
            if related:
                lines.append("🔄 Relationships:")
                for rel_table, relationship in related:
                    lines.append(f"  • {rel_table.name}: {relationship}")
                lines.append("")

        return "\n".join(lines)

    def build_compact(self, table_names: list[str] | None = None) -> str:
        """Build a compact one-line-per-table context.

        Format: ``orders(id:int PK, customer_id:int FK→customers)``
        followed by an ``Example:`` line with the first sample row.
        """
        lines = []
        for table in self._resolve(table_names):
            primary_key = table.primary_key or []
            fk_targets = {fk.column_name: fk.referenced_table for fk in table.foreign_keys or []}

            parts = []
            for col in table.columns:
                pk = " PK" if col.name in primary_key else ""
                fk = f" FK→{fk_targets[col.name]}" if col.name in fk_targets else ""
                parts.append(f"{col.name}:{col.type}{pk}{fk}")
            lines.append(f"{table.name}({', '.join(parts)})")

            if table.samples:
                lines.append(f"  Example: {format_row(table.samples[0])}")

        return "\n".join(lines)
