import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from codex_explorer.cli.ask import ask
from codex_explorer.cli.index import index_app
from codex_explorer.cli.parse import parse
from codex_explorer.cli.serve import serve_app
from codex_explorer.config import get_settings
from codex_explorer.tracing import configure_tracing

app = typer.Typer(
    name="codex-explorer",
    help="Codex Explorer CLI: index a source tree and ask questions about it.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich; DEBUG shows the pipeline trace."""
    settings = get_settings()
    configure_tracing(settings.trace_max_json)
    level = logging.DEBUG if verbose or settings.trace_pipeline else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def _main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline stages at DEBUG level.")] = False,
) -> None:
    configure_logging(verbose)


app.add_typer(index_app, name="index")
app.command("parse")(parse)
app.command("ask")(ask)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
