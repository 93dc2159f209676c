"""Tests for the querytutor CLI."""

import json

import pytest
from typer.testing import CliRunner

from querytutor.cli.main import app

runner = CliRunner()

ADVANCED_ANSWER = (
    "select category, count(*) as c from events "
    "group by category having count(*) > 1 order by c desc"
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("QUERYTUTOR_SCHEMA", raising=False)
    monkeypatch.delenv("QUERYTUTOR_DATABASE_URL", raising=False)


def invoke(schema_file, *args, json_output=False, input=None):
    options = ["--schema", str(schema_file)]
    if json_output:
        options.append("--json")
    return runner.invoke(app, [*options, *args], input=input)


class TestVersion:
    """Tests for the version command."""

    def test_version(self):
        """Prints the version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "querytutor v0.1.0" in result.output


class TestSchemaCommands:
    """Tests for schema commands."""

    def test_tables_json(self, schema_file):
        """Lists table names as JSON."""
        result = invoke(schema_file, "schema", "tables", json_output=True)
        assert result.exit_code == 0
        assert json.loads(result.output) == ["customers", "orders"]

    def test_tables_table(self, schema_file):
        """Lists tables in a rich table."""
        result = invoke(schema_file, "schema", "tables")
        assert result.exit_code == 0
        assert "shop (2 tables)" in result.output
        assert "customers" in result.output

    def test_show_json(self, schema_file):
        """Shows a table with relationships as JSON."""
        result = invoke(schema_file, "schema", "show", "orders", json_output=True)
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["name"] == "orders"
        assert data["related"] == [
            {"table": "customers", "relationship": "references customers.id"}
        ]

    def test_show_rich(self, schema_file):
        """Shows a table with rich output."""
        result = invoke(schema_file, "schema", "show", "orders")
        assert result.exit_code == 0
        assert "Table: orders" in result.output
        assert "customer_id → customers.id" in result.output

    def test_show_unknown_table(self, schema_file):
        """Unknown table exits 1 with the available tables."""
        result = invoke(schema_file, "schema", "show", "invoices", json_output=True)
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["error"] == "TableNotFoundError"
        assert data["context"]["available_tables"] == ["customers", "orders"]

    def test_context_compact(self, schema_file):
        """Renders the compact context."""
        result = invoke(schema_file, "schema", "context", "orders", "--compact")
        assert result.exit_code == 0
        assert result.output.startswith("orders(id:integer PK, customer_id:integer FK→customers")

    def test_context_json(self, schema_file):
        """Renders the full context as JSON."""
        result = invoke(schema_file, "schema", "context", json_output=True)
        assert result.exit_code == 0
        assert json.loads(result.output)["context"].startswith("DATABASE SCHEMA CONTEXT")

    def test_missing_schema_file(self, tmp_path):
        """Missing schema file exits 1."""
        result = invoke(tmp_path / "missing.yaml", "schema", "tables", json_output=True)
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "SchemaLoadError"

    def test_schema_from_environment(self, schema_file, monkeypatch):
        """Schema path comes from QUERYTUTOR_SCHEMA."""
        monkeypatch.setenv("QUERYTUTOR_SCHEMA", str(schema_file))
        result = runner.invoke(app, ["--json", "schema", "tables"])
        assert result.exit_code == 0
        assert json.loads(result.output) == ["customers", "orders"]


class TestQueryCommands:
    """Tests for query commands."""

    def test_analyze_json(self, schema_file):
        """Analyzes a query as JSON."""
        result = invoke(
            schema_file,
            "query",
            "analyze",
            "SELECT o.id FROM orders o JOIN customers c ON o.customer_id = c.id",
            json_output=True,
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["concepts"] == ["JOIN"]
        assert data["tables"] == ["orders", "customers"]

    def test_analyze_rich(self, schema_file):
        """Analyzes a query with rich output."""
        result = invoke(schema_file, "query", "analyze", "SELECT id FROM orders")
        assert result.exit_code == 0
        assert "Complexity: Beginner" in result.output
        assert "No issues detected" in result.output

    def test_analyze_rejects_non_select(self, schema_file):
        """Non-SELECT input exits 1."""
        result = invoke(schema_file, "query", "analyze", "DROP TABLE orders", json_output=True)
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "NotSelectError"

    def test_analyze_needs_sql(self, schema_file):
        """Analyze without SQL exits 1."""
        result = invoke(schema_file, "query", "analyze")
        assert result.exit_code == 1

    def test_optimize_from_file(self, schema_file, tmp_path):
        """Reads the query from --file."""
        sql_file = tmp_path / "query.sql"
        sql_file.write_text("SELECT * FROM orders WHERE status = 'Pending'")

        result = invoke(schema_file, "query", "optimize", "--file", str(sql_file), json_output=True)
        assert result.exit_code == 0
        titles = [s["title"] for s in json.loads(result.output)]
        assert titles == [
            "Replace SELECT * with specific columns",
            "Consider adding index on orders.status",
        ]


class TestChallengeCommands:
    """Tests for the interactive challenge command."""

    def test_solve_after_a_miss(self, events_schema_file):
        """Keeps prompting until the answer passes."""
        result = invoke(
            events_schema_file,
            "challenge",
            "play",
            "advanced",
            input=f"SELECT 1\n{ADVANCED_ANSWER}\n",
        )
        assert result.exit_code == 0
        assert "ADVANCED CHALLENGE" in result.output
        assert "❌ Not quite." in result.output
        assert "✅ Correct! You solved the challenge." in result.output

    def test_give_up_shows_solution(self, events_schema_file):
        """Giving up reveals the solution."""
        result = invoke(
            events_schema_file, "challenge", "play", "beginner", "--seed", "3", input="give up\n"
        )
        assert result.exit_code == 0
        assert "Solution" in result.output
        assert "SELECT * FROM events WHERE" in result.output

    def test_blank_line_quits(self, schema_file):
        """Blank input ends the session."""
        result = invoke(schema_file, "challenge", "play", input="\n")
        assert result.exit_code == 0
        assert "Bye! The challenge stays unsolved." in result.output

    def test_invalid_difficulty(self, schema_file):
        """Unknown difficulty exits 1."""
        result = invoke(schema_file, "challenge", "play", "expert", json_output=True)
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "InvalidDifficultyError"

    def test_no_foreign_keys(self, events_schema_file):
        """Intermediate without foreign keys exits 1."""
        result = invoke(events_schema_file, "challenge", "play", "intermediate", json_output=True)
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "NoForeignKeysError"


class TestChatCommand:
    """Tests for the chat command that need no model round-trip."""

    def test_requires_api_key(self, schema_file, monkeypatch):
        """Chat needs an API key."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        result = invoke(schema_file, "chat", json_output=True)
        assert result.exit_code == 1
        assert json.loads(result.output)["error"] == "ConfigurationError"

    def test_local_commands(self, schema_file, events_schema_file, monkeypatch):
        """Slash commands run without the model."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        result = invoke(
            schema_file,
            "chat",
            input=f"/clear\n/schema {events_schema_file}\n/quit\n",
        )
        assert result.exit_code == 0
        assert "DB: shop | Tables: customers, orders" in result.output
        assert "✓ Conversation cleared" in result.output
        assert "✓ Schema loaded" in result.output
        assert "DB: analytics | Tables: events" in result.output
