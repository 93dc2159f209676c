"""Query analysis commands."""

from pathlib import Path
from typing import Annotated

import typer

from querytutor.cli.context import CLIContext
from querytutor.cli.output import OutputFormatter

# Create query subcommand group
app = typer.Typer(help="Analyze and optimize SQL queries against the schema")


def _read_sql(sql: str | None, from_file: str | None) -> str:
    if from_file:
        return Path(from_file).read_text()
    if sql:
        return sql
    raise typer.BadParameter("Either provide SQL or use --file")


@app.command("analyze")
def query_analyze(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL SELECT query to analyze"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
) -> None:
    """Show complexity, concepts, tables and issues of a query.

    Examples:

        querytutor query analyze "SELECT * FROM flights"
        querytutor query analyze --file query.sql
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        analysis = cli_ctx.get_analyzer().analyze(_read_sql(sql, from_file))
        formatter.print_analysis(analysis)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


@app.command("optimize")
def query_optimize(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL SELECT query to optimize"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
) -> None:
    """Suggest indexes and rewrites for a query.

    Examples:

        querytutor query optimize "SELECT * FROM flights WHERE status = 'Delayed'"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        suggestions = cli_ctx.get_analyzer().suggest_optimizations(_read_sql(sql, from_file))
        formatter.print_suggestions(suggestions)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
