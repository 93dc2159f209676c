"""Schema provider: read-only view of a relational schema.

The schema comes from a Nemory YAML document (``databaseId`` ->
``catalogs`` -> ``schemas`` -> ``tables``) or from reflecting a live
database. Only the first schema of the first catalog is exposed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from querytutor.core.types import Column, Database, Schema, Table
from querytutor.exceptions import SchemaLoadError

logger = logging.getLogger(__name__)


class SchemaProvider:
    """Read-only access to the tables of a loaded schema.

    Example:
        provider = SchemaProvider.from_yaml("nemory-schema.yaml")
        orders = provider.get_table_by_name("orders")
        provider.has_index("orders", "customer_id")
    """

    def __init__(self, database: Database, source: str = "<memory>") -> None:
        """Initialize the provider.

        Args:
            database: Parsed schema document
            source: Where the schema came from (file path or database URL)

        Raises:
            SchemaLoadError: If the document has no catalog or no schema
        """
        if not database.catalogs:
            raise SchemaLoadError(source, "document has no catalogs")
        if not database.catalogs[0].schemas:
            raise SchemaLoadError(source, f"catalog '{database.catalogs[0].name}' has no schemas")

        self._database = database
        self._schema = database.catalogs[0].schemas[0]
        self._source = source
        self._tables_by_name = {t.name: t for t in self._schema.tables}

    @classmethod
    def from_yaml(cls, path: str | Path) -> SchemaProvider:
        """Load a schema from a Nemory YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            SchemaProvider for the file

        Raises:
            SchemaLoadError: If the file is missing or not a valid schema document
        """
        file_path = Path(path)
        if not file_path.exists():
            raise SchemaLoadError(str(path), "file not found")

        with file_path.open("r", encoding="utf-8") as f:
            return cls.from_yaml_string(f.read(), source=str(path))

    @classmethod
    def from_yaml_string(cls, text: str, source: str = "<string>") -> SchemaProvider:
        """Load a schema from YAML text."""
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SchemaLoadError(source, f"invalid YAML: {e}") from e

        if not isinstance(document, dict):
            raise SchemaLoadError(source, "expected a mapping at the document root")

        try:
            database = Database.model_validate(document)
        except ValidationError as e:
            raise SchemaLoadError(source, f"invalid schema document: {e}") from e

        provider = cls(database, source=source)
        logger.info(
            f"Loaded schema '{provider.default_schema.name}' from {source} "
            f"({len(provider.get_all_tables())} tables)"
        )
        return provider

    @classmethod
    def from_database(
        cls, url: str, sample_limit: int = 3, schema: str | None = None
    ) -> SchemaProvider:
        """Reflect a live database into a schema provider.

        Args:
            url: SQLAlchemy database URL
            sample_limit: Maximum sample rows to read per table
            schema: Database schema to reflect (dialect default if omitted)

        Returns:
            SchemaProvider over the reflected tables
        """
        from querytutor.schema.reflection import reflect_database

        database = reflect_database(url, sample_limit=sample_limit, schema=schema)
        return cls(database, source=database.database_id)

    @property
    def database(self) -> Database:
        return self._database

    @property
    def default_schema(self) -> Schema:
        return self._schema

    @property
    def source(self) -> str:
        return self._source

    def get_all_tables(self) -> list[Table]:
        """Return all tables in declared order."""
        return list(self._schema.tables)

    def list_table_names(self) -> list[str]:
        return [t.name for t in self._schema.tables]

    def get_table_by_name(self, table_name: str | None) -> Table | None:
        """Find a table by exact name."""
        if table_name is None:
            return None
        return self._tables_by_name.get(table_name)

    def get_table_row_count(self, table_name: str) -> int:
        """Number of sample rows known for a table."""
        table = self.get_table_by_name(table_name)
        return len(table.samples or []) if table else 0

    def get_sample_data(self, table_name: str, limit: int) -> list[dict[str, str | None]]:
        table = self.get_table_by_name(table_name)
        if table is None or not table.samples:
            return []
        return table.samples[:limit]

    def get_related_tables(self, table_name: str) -> list[tuple[Table, str]]:
        """Find tables related to the given table through foreign keys.

        Tables that reference ``table_name`` come first, then the tables
        ``table_name`` references.

        Returns:
            List of (table, relationship description) pairs
        """
        table = self.get_table_by_name(table_name)
        if table is None:
            return []

        related: list[tuple[Table, str]] = []
        for other in self._schema.tables:
            for fk in other.foreign_keys or []:
                if fk.referenced_table.lower() == table_name.lower():
                    related.append((other, f"referenced by {other.name}.{fk.column_name}"))

        for fk in table.foreign_keys or []:
            ref_table = self.get_table_by_name(fk.referenced_table)
            if ref_table is not None:
                related.append((ref_table, f"references {ref_table.name}.{fk.referenced_column}"))

        return related

    def get_column_info(self, table_name: str, column_name: str) -> Column | None:
        """Find a column by name (case-insensitive)."""
        table = self.get_table_by_name(table_name)
        if table is None:
            return None
        for column in table.columns:
            if column.name.lower() == column_name.lower():
                return column
        return None

    def has_index(self, table_name: str, column_name: str) -> bool:
        """Check whether any index on the table includes the column."""
        table = self.get_table_by_name(table_name)
        if table is None:
            return False
        return any(
            column.lower() == column_name.lower()
            for index in table.indexes or []
            for column in index.columns
        )

    def describe(self) -> str:
        """One-line summary of the loaded database."""
        return f"DB: {self._database.database_id} | Tables: {', '.join(self.list_table_names())}"
