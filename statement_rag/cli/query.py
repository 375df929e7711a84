"""CLI command for retrieving the chunks relevant to a question."""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from statement_rag.cli.common import build_manager, configure_logging, console, load_statement
from statement_rag.errors import StatementRAGError


def query(
    statement_file: Annotated[
        Path,
        typer.Argument(help="Statement JSON to ask about"),
    ],
    question: Annotated[
        str,
        typer.Argument(help="Your question about the statement"),
    ],
    context: Annotated[
        bool,
        typer.Option("--context", help="Print the assembled LLM context instead of a table"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
):
    """Retrieve the statement chunks most relevant to a question.

    The statement is indexed first if it has not been already.
    """
    configure_logging(verbose)
    statement, source_id = load_statement(statement_file)
    manager = build_manager()

    try:
        with console.status("[bold green]Retrieving..."):
            manager.index_statement_data(statement, source_id)
            if context:
                text = manager.retrieve_context(question, source_id)
            else:
                results = manager.retrieve_relevant_chunks_with_scores(question, source_id)
    except StatementRAGError as e:
        console.print(f"[bold red]Retrieval failed:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        manager.close()

    if context:
        console.print(text, markup=False)
        return

    table = Table(title=f"Chunks for: {question}")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Type")
    table.add_column("Content")
    for rank, result in enumerate(results, start=1):
        table.add_row(
            str(rank),
            f"{result.score:.3f}",
            result.chunk.chunk_type or "",
            result.chunk.content,
        )
    console.print(table)
