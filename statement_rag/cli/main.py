"""statement-rag CLI entry point."""

import typer

from statement_rag.cli.index import delete, index
from statement_rag.cli.query import query
from statement_rag.cli.stats import stats

app = typer.Typer(
    name="statement-rag",
    help="Retrieve the parts of a bank statement relevant to a question.",
)

app.command(name="index")(index)
app.command(name="query")(query)
app.command(name="delete")(delete)
app.command(name="stats")(stats)


if __name__ == "__main__":
    app()
