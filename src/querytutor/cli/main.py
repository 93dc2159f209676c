"""querytutor CLI - Main entry point."""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

import querytutor
from querytutor.cli.context import CLIContext, get_database_url, get_schema_path
from querytutor.cli.output import console

# Create main Typer app
app = typer.Typer(
    name="querytutor",
    help="querytutor - SQL tutoring and practice challenges over your own schema",
    no_args_is_help=True,
)

# Store CLI context globally (will be set in callback)
state: dict[str, CLIContext] = {}


def configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    schema: Annotated[
        str | None,
        typer.Option(
            "--schema",
            "-s",
            envvar="QUERYTUTOR_SCHEMA",
            help="Nemory schema YAML file",
        ),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="QUERYTUTOR_DATABASE_URL",
            help="Reflect the schema from a live database URL instead of YAML",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug output",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    configure_logging(verbose)

    cli_ctx = CLIContext(
        schema_path=get_schema_path(schema),
        database_url=get_database_url(database),
        json_output=json_output,
        verbose=verbose,
    )

    # Store in Typer context for command access
    ctx.obj = cli_ctx
    state["cli_ctx"] = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"querytutor v{querytutor.__version__}")


# Register command groups
from querytutor.cli.commands import challenge, chat, query, schema  # noqa: E402

app.add_typer(schema.app, name="schema")
app.add_typer(query.app, name="query")
app.add_typer(challenge.app, name="challenge")

# Register chat as a standalone command (not a group)
app.command(name="chat")(chat.chat_command)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
