"""Helpers shared by the CLI commands."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console

from config.settings import get_settings
from statement_rag.errors import StatementRAGError
from statement_rag.models.statement import generate_source_id
from statement_rag.pipeline.manager import StatementRAGManager

console = Console()


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)


def load_statement(path: Path) -> tuple[dict, str]:
    """Read a statement JSON file and derive its source ID."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Cannot read statement file {path}:[/bold red] {e}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(f"[bold red]{path} does not contain a statement object.[/bold red]")
        raise typer.Exit(1)
    return data, generate_source_id(data)


def build_manager() -> StatementRAGManager:
    try:
        return StatementRAGManager(get_settings())
    except (StatementRAGError, ValueError) as e:
        console.print(f"[bold red]Cannot start the RAG manager:[/bold red] {e}")
        raise typer.Exit(1)
