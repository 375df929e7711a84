"""CLI command for vector store diagnostics."""

from typing import Annotated

import typer

from statement_rag.cli.common import build_manager, configure_logging, console
from statement_rag.errors import StatementRAGError


def stats(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Show the active vector store backend and chunk count."""
    configure_logging(verbose)
    manager = build_manager()
    try:
        total = manager.count()
    except StatementRAGError as e:
        console.print(f"[bold red]Cannot read store:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        manager.close()
    console.print(f"Backend: {manager.backend}")
    console.print(f"Total in store: {total} chunks")
