from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from codex_explorer.config import Settings, get_settings
from codex_explorer.core.index import IndexNotFoundError
from codex_explorer.core.ports.oracle import DecisionOracle
from codex_explorer.core.session import create_ask_session
from codex_explorer.graph.machine import run_graph
from codex_explorer.models import AskResult
from codex_explorer.oracle.litellm_adapter import oracle_from_settings

console = Console()


def _get_oracle(settings: Settings) -> DecisionOracle | None:
    return oracle_from_settings(settings)


def _print_result(result: AskResult) -> None:
    console.print(result.answer)
    if result.followups:
        console.print("\n[bold]Followups[/bold]")
        for item in result.followups:
            console.print(f"  - {item}")
    if result.trace is not None:
        parsed = sorted(result.trace.all_parsed())
        console.print(f"\n[dim]iterations={result.trace.iterations + 1} parsed={parsed}[/dim]")


def ask(
    question: Annotated[str, typer.Argument(help="Question about the code base.")],
    project_root: Annotated[
        Path | None,
        typer.Option("--project-root", help="Index this tree in a temporary session instead of PROJECT_ROOT."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON.")] = False,
) -> None:
    """Answer a question about the configured project."""
    settings = get_settings()
    oracle = _get_oracle(settings)
    if oracle is None:
        console.print("[yellow]No LLM configured; using deterministic fallbacks.[/yellow]")

    try:
        if project_root is None:
            result = run_graph(question, settings, oracle)
        else:
            with create_ask_session(project_root, c_header_as_cpp=settings.c_header_as_cpp) as session:
                result = run_graph(
                    question, settings, oracle, project_root=session.project_root, index_path=session.index_path
                )
    except IndexNotFoundError as e:
        console.print(f"[red]{e}[/red] (run 'codex-explorer index build' first)")
        raise typer.Exit(code=1) from e

    if as_json:
        console.print_json(result.model_dump_json(by_alias=True))
    else:
        _print_result(result)
