"""Rich-powered console output for ctxgraph."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ctxgraph import __version__
from ctxgraph.graph.models import ContextInsensitiveEdge, ContextSensitiveEdge


class Console:
    """Terminal output for ctxgraph using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def banner(self) -> None:
        """Show the ctxgraph banner."""
        self.console.print(
            Panel(
                f"[bold cyan]ctxgraph[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]Call graphs from context transition tables[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def show_stats(self, stats: dict) -> None:
        """Display call graph statistics in a table."""
        table = Table(title="Call Graph Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")

        table.add_row("Procedures", str(stats.get("procedures", 0)))
        table.add_row("Contexts", str(stats.get("contexts", 0)))
        table.add_row("Call Sites", str(stats.get("call_sites", 0)))
        table.add_row("Context-Sensitive Edges", str(stats.get("edges", 0)))
        table.add_row(
            "Context-Insensitive Edges", str(stats.get("context_insensitive_edges", 0))
        )
        table.add_row("Collapsed Edges", str(stats.get("collapsed_edges", 0)))

        edge_kinds = stats.get("edge_kinds", {})
        if edge_kinds:
            table.add_section()
            for kind, count in sorted(edge_kinds.items(), key=lambda x: -x[1]):
                table.add_row(f"  {kind} edges", str(count))

        self.console.print(table)

    def show_cs_edges(self, edges: Iterable[ContextSensitiveEdge], title: str) -> None:
        table = Table(title=title, border_style="cyan")
        table.add_column("Source", style="bold")
        table.add_column("Context", style="dim")
        table.add_column("Call", style="cyan")
        table.add_column("Kind")
        table.add_column("Target", style="bold")
        table.add_column("Target Context", style="dim")
        for e in edges:
            table.add_row(
                escape(str(e.source)), escape(str(e.source_context)), escape(str(e.instruction)),
                e.kind.value, escape(str(e.target)), escape(str(e.target_context)),
            )
        self.console.print(table)

    def show_ci_edges(self, edges: Iterable[ContextInsensitiveEdge], title: str) -> None:
        table = Table(title=title, border_style="cyan")
        table.add_column("Source", style="bold")
        table.add_column("Call", style="cyan")
        table.add_column("Kind")
        table.add_column("Target", style="bold")
        for e in edges:
            table.add_row(
                escape(str(e.source)), escape(str(e.instruction)),
                e.kind.value, escape(str(e.target)),
            )
        self.console.print(table)
