"""Output formatting for the dreamdup CLI."""

import json
import sys
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dreamdup.schemas.report import DuplicateCheckReport


class OutputFormatter:
    """Formats reports as rich tables, JSON or YAML."""

    def __init__(self, force_color: bool = False):
        """Initialize formatter."""
        self.console = Console(force_terminal=force_color or None, file=sys.stdout)
        self.err_console = Console(force_terminal=force_color or None, file=sys.stderr)

    def format_json(self, data: Any, indent: int = 2) -> str:
        return json.dumps(data, indent=indent, ensure_ascii=False)

    def format_yaml(self, data: Any) -> str:
        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def print_report(self, report: DuplicateCheckReport, output_format: str = "table") -> None:
        """Print a duplicate check report in the requested format."""
        data = report.model_dump(mode="json")
        if output_format == "json":
            click.echo(self.format_json(data))
            return
        if output_format == "yaml":
            click.echo(self.format_yaml(data), nl=False)
            return

        if report.skipped:
            self.print_warning(f"Duplicate check skipped: {escape(report.reason or '')}")
            return

        if not report.matches:
            self.print_success(
                f"No similar keywords for '{escape(report.query)}' "
                f"({report.corpus_size} checked, threshold {report.threshold:.0%})"
            )
            return

        table = Table(
            title=f"Similar keywords for '{escape(report.query)}'",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("ID", style="cyan")
        table.add_column("Keyword")
        table.add_column("Slug", style="dim")
        table.add_column("Similarity", justify="right", style="red")
        for match in report.matches:
            table.add_row(
                escape(str(match.id)),
                escape(match.keyword),
                escape(match.slug),
                f"{match.similarity}%",
            )
        self.console.print(table)

    def print_stats(self, stats: dict[str, Any]) -> None:
        """Print key/value statistics in a table."""
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        for key, value in stats.items():
            table.add_row(key.replace("_", " ").title(), str(value))
        self.console.print(table)

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        self.err_console.print(f"[red]✗[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}")
