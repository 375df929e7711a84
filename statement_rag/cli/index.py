"""CLI commands for indexing and deleting statement chunks."""

from pathlib import Path
from typing import Annotated

import typer

from statement_rag.cli.common import build_manager, configure_logging, console, load_statement
from statement_rag.errors import StatementRAGError


def index(
    statement_file: Annotated[
        Path,
        typer.Argument(help="Statement JSON produced by the extraction step"),
    ],
    reindex: Annotated[
        bool,
        typer.Option("--reindex", help="Delete existing chunks and index again"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Chunk, embed and store a statement."""
    configure_logging(verbose)
    statement, source_id = load_statement(statement_file)
    manager = build_manager()

    try:
        with console.status("[bold green]Indexing statement..."):
            if reindex:
                result = manager.reindex_statement_data(statement, source_id)
            else:
                result = manager.index_statement_data(statement, source_id)
    except StatementRAGError as e:
        console.print(f"[bold red]Indexing failed:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        manager.close()

    console.print(f"[bold]Source ID:[/bold] {source_id}")
    if result.skipped:
        console.print("[yellow]Already indexed, nothing to do.[/yellow]")
        return
    console.print("[bold green]Indexing complete![/bold green]")
    console.print(f"  Chunks created: {result.chunks_created}")
    console.print(f"  Chunks stored: {result.chunks_stored}")
    console.print(f"  Chunks dropped: {result.chunks_dropped}")
    console.print(f"  Backend: {manager.backend}")


def delete(
    statement_file: Annotated[
        Path,
        typer.Argument(help="Statement JSON whose chunks should be removed"),
    ],
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Delete all chunks stored for a statement."""
    configure_logging(verbose)
    _, source_id = load_statement(statement_file)
    manager = build_manager()
    try:
        removed = manager.delete_statement_data(source_id)
    except StatementRAGError as e:
        console.print(f"[bold red]Delete failed:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        manager.close()
    console.print(f"Deleted {removed} chunks for {source_id}")
