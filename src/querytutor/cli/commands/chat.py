"""Conversational tutor session."""

import typer

from querytutor.agent.client import OpenAIAgentClient
from querytutor.agent.controller import TutorController, TutorReply
from querytutor.cli.context import CLIContext
from querytutor.cli.output import OutputFormatter, console
from querytutor.schema.provider import SchemaProvider

HELP_TEXT = """\
Commands:
  analyze: <sql>        explain complexity and issues
  optimize: <sql>       suggest indexes and rewrites
  schema <table>        describe a table
  challenge <level>     beginner, intermediate or advanced
  /schema <path>        switch to another schema YAML
  /clear                forget the conversation
  /quit                 leave"""


def render_reply(reply: TutorReply) -> None:
    for info in reply.info:
        console.print(info, style="dim")
    if reply.error:
        console.print(reply.error, style="red")
    if reply.response:
        console.print(f"\n🤖 {reply.response}\n")


def chat_command(ctx: typer.Context) -> None:
    """Chat with the SQL tutor (needs OPENAI_API_KEY).

    Examples:

        querytutor chat
        querytutor --schema aviation.yaml chat
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        controller = TutorController(cli_ctx.get_provider(), OpenAIAgentClient())
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    console.print(f"[bold]🎓 SQL Query Tutor[/bold]  {controller.current_db_info()}")
    console.print(HELP_TEXT, style="dim")

    while True:
        line = typer.prompt("you", default="", show_default=False).strip()
        command = line.lower()

        if command in ("/quit", "/exit"):
            return
        if command == "/clear":
            controller.clear_history()
            formatter.print_success("Conversation cleared")
            continue
        if command.startswith("/schema"):
            path = line[len("/schema") :].strip()
            if not path:
                console.print(f"Current schema: {controller.provider.source}")
                continue
            try:
                controller.change_schema(SchemaProvider.from_yaml(path))
            except Exception as e:
                formatter.print_error(e)
                continue
            formatter.print_success("Schema loaded", {"schema": controller.current_db_info()})
            continue

        reply = controller.send_input(line)
        if reply is not None:
            render_reply(reply)
