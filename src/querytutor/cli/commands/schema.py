"""Schema inspection commands."""

from typing import Annotated

import typer

from querytutor.cli.context import CLIContext
from querytutor.cli.output import OutputFormatter
from querytutor.exceptions import TableNotFoundError
from querytutor.schema.context import SchemaContextBuilder

# Create schema subcommand group
app = typer.Typer(help="Inspect the tutor's database schema")


@app.command("tables")
def schema_tables(ctx: typer.Context) -> None:
    """List all tables in the schema."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        provider = cli_ctx.get_provider()
        tables = provider.get_all_tables()

        if cli_ctx.json_output:
            formatter.print_data(provider.list_table_names())
        else:
            table_data = [
                {
                    "Name": table.name,
                    "Columns": len(table.columns),
                    "Samples": len(table.samples or []),
                    "Foreign Keys": len(table.foreign_keys or []),
                }
                for table in tables
            ]
            formatter.print_table(
                f"{provider.database.database_id} ({len(tables)} tables)",
                table_data,
                ["Name", "Columns", "Samples", "Foreign Keys"],
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


@app.command("show")
def schema_show(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
) -> None:
    """Show columns, keys, indexes, relationships and samples of a table."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        provider = cli_ctx.get_provider()
        table = provider.get_table_by_name(table_name)
        if table is None:
            raise TableNotFoundError(table_name, provider.list_table_names())
        formatter.print_table_info(table, provider.get_related_tables(table.name))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


@app.command("context")
def schema_context(
    ctx: typer.Context,
    tables: Annotated[
        list[str] | None,
        typer.Argument(help="Tables to include (all if omitted)"),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", "-c", help="One line per table"),
    ] = False,
) -> None:
    """Print the LLM schema context block.

    Examples:

        querytutor schema context
        querytutor schema context flights airports --compact
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        builder = SchemaContextBuilder(cli_ctx.get_provider())
        text = builder.build_compact(tables) if compact else builder.build(tables)
        if cli_ctx.json_output:
            formatter.print_data({"context": text})
        else:
            typer.echo(text)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
