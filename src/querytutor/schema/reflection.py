"""Reflect a live database into querytutor schema types.

Uses SQLAlchemy's inspector so any dialect SQLAlchemy supports can back the
tutor (SQLite and PostgreSQL are the tested ones).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import MetaData, create_engine, inspect, select
from sqlalchemy import Table as SATable
from sqlalchemy.engine import Connection, Inspector
from sqlalchemy.exc import CompileError, SQLAlchemyError

from querytutor.core.types import Catalog, Column, Database, ForeignKey, Index, Schema, Table
from querytutor.exceptions import SchemaLoadError

logger = logging.getLogger(__name__)


def _type_text(column_type: Any) -> str:
    try:
        return str(column_type)
    except CompileError:
        return type(column_type).__name__


def _reflect_table(
    inspector: Inspector,
    conn: Connection,
    metadata: MetaData,
    table_name: str,
    schema: str | None,
    sample_limit: int,
) -> Table:
    columns = [
        Column(
            name=col["name"],
            type=_type_text(col["type"]),
            nullable=bool(col.get("nullable", True)),
            description=col.get("comment"),
        )
        for col in inspector.get_columns(table_name, schema=schema)
    ]

    pk_columns = inspector.get_pk_constraint(table_name, schema=schema).get(
        "constrained_columns"
    )

    foreign_keys = [
        ForeignKey(
            column_name=local,
            referenced_table=fk["referred_table"],
            referenced_column=remote,
        )
        for fk in inspector.get_foreign_keys(table_name, schema=schema)
        for local, remote in zip(fk["constrained_columns"], fk["referred_columns"], strict=False)
    ]

    indexes: list[Index] = []
    for idx in inspector.get_indexes(table_name, schema=schema):
        # Expression indexes report None for their columns
        index_columns = [c for c in idx["column_names"] if c is not None]
        if not index_columns:
            continue
        indexes.append(
            Index(
                name=idx["name"] or f"idx_{table_name}_{'_'.join(index_columns)}",
                columns=index_columns,
                unique=bool(idx.get("unique", False)),
            )
        )

    description = None
    if _supports_comments(inspector):
        description = inspector.get_table_comment(table_name, schema=schema).get("text")

    samples: list[dict[str, Any]] = []
    if sample_limit > 0:
        sa_table = SATable(table_name, metadata, schema=schema, autoload_with=conn)
        result = conn.execute(select(sa_table).limit(sample_limit))
        samples = [dict(row) for row in result.mappings()]

    return Table(
        name=table_name,
        columns=columns,
        samples=samples or None,
        primary_key=pk_columns or None,
        foreign_keys=foreign_keys or None,
        indexes=indexes or None,
        description=description,
    )


def _supports_comments(inspector: Inspector) -> bool:
    return bool(getattr(inspector.dialect, "supports_comments", False))


def reflect_database(url: str, sample_limit: int = 3, schema: str | None = None) -> Database:
    """Reflect tables, keys, indexes and sample rows from a database.

    Args:
        url: SQLAlchemy database URL
        sample_limit: Maximum sample rows per table (0 disables sampling)
        schema: Database schema to reflect (dialect default if omitted)

    Returns:
        Database with a single catalog and schema

    Raises:
        SchemaLoadError: If the database cannot be reached or reflected
    """
    try:
        engine = create_engine(url)
    except SQLAlchemyError as e:
        raise SchemaLoadError(url, str(e)) from e

    safe_url = engine.url.render_as_string(hide_password=True)
    try:
        inspector = inspect(engine)
        metadata = MetaData()
        with engine.connect() as conn:
            tables = [
                _reflect_table(inspector, conn, metadata, name, schema, sample_limit)
                for name in inspector.get_table_names(schema=schema)
            ]
            schema_name = schema or inspector.default_schema_name or "main"
    except SQLAlchemyError as e:
        raise SchemaLoadError(safe_url, str(e)) from e
    finally:
        engine.dispose()

    logger.info(f"Reflected {len(tables)} tables from {safe_url}")
    database_name = engine.url.database
    return Database(
        database_id=Path(database_name).stem if database_name else engine.url.get_backend_name(),
        catalogs=[
            Catalog(
                name=engine.url.get_backend_name(),
                schemas=[Schema(name=schema_name, tables=tables)],
            )
        ],
    )
