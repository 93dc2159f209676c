"""Interactive challenge practice."""

import random
from typing import Annotated

import typer

from querytutor.challenges.service import ChallengeService
from querytutor.cli.context import CLIContext
from querytutor.cli.output import OutputFormatter
from querytutor.exceptions import QueryTutorError

GIVE_UP_WORDS = ("give up", "giveup", "/giveup")

# Create challenge subcommand group
app = typer.Typer(help="Practice SQL with challenges generated from the schema")


@app.command("play")
def challenge_play(
    ctx: typer.Context,
    difficulty: Annotated[
        str,
        typer.Argument(help="beginner, intermediate or advanced"),
    ] = "beginner",
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed the generator for a reproducible challenge"),
    ] = None,
) -> None:
    """Generate a challenge and check your answers until you solve it.

    Type 'give up' to see the solution, or an empty line to quit.

    Examples:

        querytutor challenge play beginner
        querytutor challenge play advanced --seed 7
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        if seed is not None:
            service = ChallengeService(cli_ctx.get_provider(), rng=random.Random(seed))
        else:
            service = cli_ctx.get_service()
        challenge = service.generate_challenge(difficulty)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    formatter.print_challenge(challenge)

    while True:
        answer = typer.prompt("SQL", default="", show_default=False).strip()
        if not answer:
            typer.echo("Bye! The challenge stays unsolved.")
            return

        try:
            if answer.lower() in GIVE_UP_WORDS:
                formatter.print_answer(service.reveal_challenge_answer(challenge.id))
                return

            verdict = service.validate_challenge_answer(challenge.id, answer)
        except QueryTutorError as e:
            formatter.print_error(e)
            raise typer.Exit(code=1)

        formatter.print_verdict(verdict)
        if verdict.passed:
            return
