from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from codex_explorer.config import get_settings
from codex_explorer.core.index import IndexNotFoundError, build_filtered_index, load_filtered_index, write_filtered_index

index_app = typer.Typer(help="Build and inspect the filtered signature index.")
console = Console()


@index_app.command("build")
def build(
    root: Annotated[Path | None, typer.Option(help="Project root to index (default: PROJECT_ROOT).")] = None,
    output: Annotated[Path | None, typer.Option(help="Index file to write (default: FILTERED_AST_PATH).")] = None,
) -> None:
    """Walk the project and write the signature index."""
    settings = get_settings()
    project_root = (root or settings.project_root).resolve()
    target = output or settings.filtered_ast_path
    if not project_root.is_dir():
        console.print(f"[red]Project root not found:[/red] {project_root}")
        raise typer.Exit(code=1)

    index = build_filtered_index(project_root, settings.c_header_as_cpp)
    write_filtered_index(index, target)
    signatures = sum(len(item.ast) for item in index.index)
    console.print(f"[green]Indexed[/green] {len(index.files)} files ({signatures} signatures)")
    console.print(f"[green]Wrote[/green] {target}")


@index_app.command("show")
def show(
    path: Annotated[Path | None, typer.Option(help="Index file to read (default: FILTERED_AST_PATH).")] = None,
    limit: Annotated[int, typer.Option(help="Max rows to return.")] = 50,
) -> None:
    """List indexed files with their signature counts."""
    target = path or get_settings().filtered_ast_path
    try:
        index = load_filtered_index(target)
    except IndexNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(show_lines=False)
    for header in ("file", "lang", "signatures"):
        table.add_column(header)
    for item in index.index[:limit]:
        table.add_row(item.file, item.lang, str(len(item.ast)))
    console.print(table)
    console.print(f"({len(index.files)} files, generated {index.generated_at})")
