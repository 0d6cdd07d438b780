"""Main Typer application - registers all CLI commands.

Entry point: ``logrelay`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from logrelay.cli.commands.demo import demo_cmd

app = typer.Typer(
    name="logrelay",
    help="logrelay: contextual log routing with colored prefixes and fan-out sinks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="demo", help="Route sample concurrent traffic through a live pipeline.")(demo_cmd)


@app.command(name="levels", help="Show how emitter levels map to sink levels.")
def levels_cmd() -> None:
    """Print the source → sink level table."""
    from rich.console import Console
    from rich.table import Table

    from logrelay.models.levels import DEFAULT_SINK_LEVEL, LEVEL_MAP

    table = Table(title="Level mapping")
    table.add_column("Emitter level", style="cyan")
    table.add_column("Sink level", style="green")
    for source, sink in LEVEL_MAP.items():
        table.add_row(source, sink.value)
    table.add_row("[dim](anything else)[/dim]", DEFAULT_SINK_LEVEL.value)

    Console().print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
