"""Unit tests for the querytutor MCP server integration.

FastMCP tools are plain functions once decorated, so they are called
directly; the MCP framework handles the transport layer.
"""

from __future__ import annotations

import json
from collections.abc import Generator

import pytest

# Skip entire module if mcp is not installed (optional dependency)
pytest.importorskip("mcp", reason="mcp not installed (install with: pip install querytutor[mcp])")

from querytutor.challenges.service import ChallengeService  # noqa: E402
from querytutor.integrations.mcp import server as mcp_server  # noqa: E402
from querytutor.query.analyzer import QueryAnalyzer  # noqa: E402
from querytutor.tools.tutor import QueryTutorTools  # noqa: E402


@pytest.fixture(autouse=True)
def set_mcp_tools(provider, id_factory) -> Generator[None, None, None]:
    """Inject a toolset into the MCP server global before each test."""
    service = ChallengeService(provider, id_factory=id_factory)
    mcp_server._tools = QueryTutorTools(provider, service, QueryAnalyzer(provider))
    yield
    mcp_server._tools = None


class TestQueryTools:
    def test_analyze_query(self) -> None:
        """Analyzes a query."""
        result = mcp_server.analyze_query("SELECT id FROM orders")
        assert result.startswith("📊 QUERY ANALYSIS")

    def test_get_table_schema(self) -> None:
        """Describes a table."""
        assert mcp_server.get_table_schema("customers").startswith("📋 TABLE: customers")

    def test_get_table_schema_unknown(self) -> None:
        """Unknown table is a message."""
        assert mcp_server.get_table_schema("nope").startswith("❌ Table 'nope' not found")

    def test_suggest_optimizations(self) -> None:
        """Suggests optimizations."""
        result = mcp_server.suggest_optimizations("SELECT * FROM orders")
        assert "Replace SELECT * with specific columns" in result


class TestChallengeTools:
    def test_full_challenge_flow(self) -> None:
        """Generate, miss, reveal, solve, then the id is gone."""
        challenge = json.loads(mcp_server.generate_challenge("beginner"))
        assert "solution" not in challenge

        miss = mcp_server.validate_challenge_answer(challenge["id"], "SELECT 1")
        assert miss.startswith("❌")

        answer = json.loads(mcp_server.reveal_challenge_answer(challenge["id"]))
        solved = mcp_server.validate_challenge_answer(challenge["id"], answer["solution"])
        assert solved.startswith("✅")

        again = mcp_server.validate_challenge_answer(challenge["id"], answer["solution"])
        assert again == "❌ Unknown challenge id. Please generate a new challenge."

    def test_generate_challenge_error(self) -> None:
        """Unknown difficulty returns an error payload."""
        assert "error" in json.loads(mcp_server.generate_challenge("expert"))


class TestServerSetup:
    def test_tools_required(self) -> None:
        """Tools fail before the schema is loaded."""
        mcp_server._tools = None
        with pytest.raises(RuntimeError, match="Schema not loaded"):
            mcp_server.analyze_query("SELECT 1")

    def test_create_server_from_yaml(self, schema_file, monkeypatch) -> None:
        """Creates the server from a YAML schema."""
        monkeypatch.delenv("QUERYTUTOR_DATABASE_URL", raising=False)
        server = mcp_server.create_server(schema_path=str(schema_file))
        assert server is mcp_server.mcp
        assert mcp_server.get_tools().get_table_schema("orders").startswith("📋 TABLE: orders")
