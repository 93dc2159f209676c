"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from querytutor.core.types import (
    Challenge,
    ChallengeAnswer,
    ChallengeVerdict,
    OptimizationSuggestion,
    QueryAnalysis,
    Table,
)
from querytutor.exceptions import QueryTutorError

console = Console()

PRIORITY_EMOJI = {"high": "🔴", "medium": "🟡", "low": "🟢"}


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def _dump(self, data: Any) -> None:
        print(json.dumps(data, default=str, indent=2, ensure_ascii=False))

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print data as Rich table or JSON array.

        Args:
            title: Table title
            data: List of row dictionaries
            columns: Column names to display
        """
        if self.json_mode:
            self._dump(data)
        else:
            table = RichTable(title=title, show_header=True, header_style="bold magenta")
            for col in columns:
                table.add_column(col)
            for row in data:
                table.add_row(*[str(row.get(col, "")) for col in columns])
            console.print(table)

    def print_table_info(self, table: Table, related: list[tuple[Table, str]] | None = None) -> None:
        """Print a schema table with columns, keys, indexes and samples.

        Args:
            table: Table to display
            related: (table, relationship) pairs from the schema provider
        """
        if self.json_mode:
            data = table.model_dump()
            if related is not None:
                data["related"] = [{"table": t.name, "relationship": rel} for t, rel in related]
            self._dump(data)
            return

        console.print(f"\n[bold]Table:[/bold] {table.name}")
        if table.description:
            console.print(f"Description: {table.description}")
        if table.primary_key:
            console.print(f"Primary key: {', '.join(table.primary_key)}")

        console.print(f"\n[bold]Columns ({len(table.columns)}):[/bold]")
        columns_table = RichTable(show_header=True, header_style="bold cyan")
        columns_table.add_column("Name")
        columns_table.add_column("Type")
        columns_table.add_column("Nullable")
        columns_table.add_column("Description")
        for col in table.columns:
            columns_table.add_row(
                col.name,
                col.type,
                "✓" if col.nullable else "",
                col.description or "",
            )
        console.print(columns_table)

        if table.foreign_keys:
            console.print(f"\n[bold]Foreign keys ({len(table.foreign_keys)}):[/bold]")
            for fk in table.foreign_keys:
                console.print(f"  {fk.column_name} → {fk.referenced_table}.{fk.referenced_column}")

        if table.indexes:
            console.print(f"\n[bold]Indexes ({len(table.indexes)}):[/bold]")
            for idx in table.indexes:
                unique = " [dim](unique)[/dim]" if idx.unique else ""
                console.print(f"  {idx.name}: {', '.join(idx.columns)}{unique}")

        if related:
            console.print(f"\n[bold]Related tables ({len(related)}):[/bold]")
            for other, relationship in related:
                console.print(f"  {other.name}: {relationship}")

        if table.samples:
            console.print(f"\n[bold]Sample rows ({len(table.samples)}):[/bold]")
            names = table.column_names
            samples_table = RichTable(show_header=True, header_style="bold cyan")
            for name in names:
                samples_table.add_column(name)
            for row in table.samples:
                samples_table.add_row(*[_cell(row.get(name)) for name in names])
            console.print(samples_table)

    def print_challenge(self, challenge: Challenge) -> None:
        if self.json_mode:
            self._dump(challenge.model_dump())
            return

        body = [challenge.task, ""]
        body.extend(f"💡 {hint}" for hint in challenge.hints)
        if challenge.samples:
            body.append("")
            body.extend(f"📝 {name}: {sample}" for name, sample in challenge.samples.items())
        console.print(
            Panel(
                "\n".join(body),
                title=f"[bold]{challenge.title}[/bold]",
                subtitle=f"id {challenge.id}",
                border_style="cyan",
            )
        )

    def print_verdict(self, verdict: ChallengeVerdict) -> None:
        if self.json_mode:
            self._dump(verdict.model_dump())
        else:
            console.print(verdict.message, style="green" if verdict.passed else "yellow")

    def print_answer(self, answer: ChallengeAnswer) -> None:
        if self.json_mode:
            self._dump(answer.model_dump())
        else:
            console.print(Panel(answer.solution, title="[bold]Solution[/bold]", border_style="magenta"))

    def print_analysis(self, analysis: QueryAnalysis) -> None:
        """Print complexity, concepts, tables and issues of a query.

        Args:
            analysis: Result of QueryAnalyzer.analyze
        """
        if self.json_mode:
            self._dump(analysis.model_dump())
            return

        console.print(f"\n[bold]Complexity:[/bold] {analysis.complexity}")
        console.print(f"[bold]Concepts:[/bold] {', '.join(analysis.concepts) or 'Basic SELECT'}")
        console.print(f"[bold]Tables:[/bold] {', '.join(analysis.tables)}")
        if analysis.issues:
            console.print("\n⚠️  Issues:")
            for issue in analysis.issues:
                console.print(f"  • {issue}")
        else:
            console.print("\n✓ No issues detected", style="green")

    def print_suggestions(self, suggestions: list[OptimizationSuggestion]) -> None:
        if self.json_mode:
            self._dump([s.model_dump() for s in suggestions])
            return

        if not suggestions:
            console.print("✓ Query looks well-optimized", style="green")
            return

        console.print("\n💡 Optimization Hints:")
        for suggestion in suggestions:
            emoji = PRIORITY_EMOJI.get(suggestion.priority, "ℹ️")
            console.print(f"  {emoji} {suggestion.title}: {suggestion.reason}")
            if suggestion.action:
                console.print(f"     Action: {suggestion.action}", style="dim")
            if suggestion.expected_gain:
                console.print(f"     Gain: {suggestion.expected_gain}", style="dim")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message.

        Args:
            message: Success message
            details: Optional details to display
        """
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            self._dump(output)
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message.

        Args:
            error: Exception to display
        """
        if self.json_mode:
            if isinstance(error, QueryTutorError):
                self._dump(error.to_dict())
            else:
                self._dump({"error": str(error)})
        else:
            error_text = str(error)
            if isinstance(error, QueryTutorError) and error.context:
                context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)

    def print_data(self, data: Any) -> None:
        if self.json_mode:
            self._dump(data)
        else:
            console.print(data)


def _cell(value: str | None) -> str:
    return "NULL" if value is None else value
