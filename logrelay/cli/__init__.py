"""logrelay CLI - Typer-based developer tooling.

Provides the ``logrelay`` command with a ``demo`` subcommand that routes
sample traffic through a live pipeline, and a ``levels`` subcommand
that prints the level-mapping table.
"""
