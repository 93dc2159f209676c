"""MCP server for querytutor.

Exposes the SQL tutor tools over MCP so any MCP-capable assistant can run
challenges against a schema.
"""

from __future__ import annotations

import argparse
import logging
import sys

from mcp.server.fastmcp import FastMCP  # type: ignore[import-not-found]

from querytutor.challenges.service import ChallengeService
from querytutor.cli.context import get_database_url, get_schema_path
from querytutor.query.analyzer import QueryAnalyzer
from querytutor.schema.provider import SchemaProvider
from querytutor.tools.tutor import QueryTutorTools

logger = logging.getLogger(__name__)

# Create MCP server
mcp = FastMCP("querytutor")

# Global toolset (set during server startup); one challenge session per server process
_tools: QueryTutorTools | None = None


def get_tools() -> QueryTutorTools:
    """Get the tutor toolset."""
    if _tools is None:
        raise RuntimeError("Schema not loaded. Call create_server() first.")
    return _tools


# === Query Tools ===


@mcp.tool()
def analyze_query(query: str) -> str:
    """Analyze SQL query complexity, concepts used and potential issues.

    Args:
        query: The SQL SELECT query to analyze

    Returns:
        Text report with complexity level, concepts, tables and issues.
    """
    return get_tools().analyze_query(query)


@mcp.tool()
def get_table_schema(table_name: str) -> str:
    """Get columns, keys, indexes and sample data of a table.

    Args:
        table_name: The name of the table to look up
    """
    return get_tools().get_table_schema(table_name)


@mcp.tool()
def suggest_optimizations(query: str) -> str:
    """Suggest indexes and rewrites that would speed up a query.

    Args:
        query: The SQL query to optimize
    """
    return get_tools().suggest_optimizations(query)


# === Challenge Tools ===


@mcp.tool()
def generate_challenge(difficulty: str) -> str:
    """Create a SQL practice challenge from the schema.

    Returns only the question as JSON (id, title, task, hints, samples);
    the solution is kept server-side.

    Args:
        difficulty: 'beginner', 'intermediate', or 'advanced'
    """
    return get_tools().generate_challenge(difficulty)


@mcp.tool()
def validate_challenge_answer(challenge_id: str, sql: str) -> str:
    """Check a student's SQL against a challenge.

    Args:
        challenge_id: Id returned by generate_challenge
        sql: The student's SQL answer

    Returns:
        A message starting with ✅ (solved, the challenge is retired) or ❌.
    """
    return get_tools().validate_challenge_answer(challenge_id, sql)


@mcp.tool()
def reveal_challenge_answer(challenge_id: str) -> str:
    """Reveal the solution of a challenge. Only call when the student gives up.

    Args:
        challenge_id: Id returned by generate_challenge
    """
    return get_tools().reveal_challenge_answer(challenge_id)


def create_server(schema_path: str | None = None, database_url: str | None = None) -> FastMCP:
    """Create and configure the MCP server with a loaded schema.

    Args:
        schema_path: Nemory schema YAML (QUERYTUTOR_SCHEMA or nemory-schema.yaml if omitted)
        database_url: Reflect this live database instead of reading YAML

    Returns:
        Configured FastMCP server instance
    """
    global _tools
    database_url = get_database_url(database_url)
    if database_url:
        provider = SchemaProvider.from_database(database_url)
    else:
        provider = SchemaProvider.from_yaml(get_schema_path(schema_path))

    _tools = QueryTutorTools(provider, ChallengeService(provider), QueryAnalyzer(provider))
    logger.info(f"querytutor initialized with {provider.describe()}")
    return mcp


def main() -> None:
    """Entry point for running the MCP server."""
    # stdout carries the protocol
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    parser = argparse.ArgumentParser(description="querytutor MCP Server")
    parser.add_argument(
        "--schema",
        "-s",
        default=None,
        help="Nemory schema YAML (default: $QUERYTUTOR_SCHEMA or nemory-schema.yaml)",
    )
    parser.add_argument(
        "--database",
        "-d",
        default=None,
        help="Reflect a live database URL instead of a YAML schema",
    )
    args = parser.parse_args()

    create_server(schema_path=args.schema, database_url=args.database)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
