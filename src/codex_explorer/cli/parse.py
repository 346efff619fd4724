import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from codex_explorer.config import get_settings
from codex_explorer.core.ast import PathOutsideProjectError, parse_file_to_ast, resolve_in_project
from codex_explorer.core.languages import UnsupportedExtensionError

console = Console()


def parse(
    files: Annotated[list[str], typer.Argument(help="Project-relative paths of files to parse.")],
    root: Annotated[Path | None, typer.Option(help="Project root (default: PROJECT_ROOT).")] = None,
) -> None:
    """Print detailed ASTs for the given files as JSON."""
    settings = get_settings()
    project_root = (root or settings.project_root).resolve()

    results = []
    for rel in files:
        try:
            abs_path = resolve_in_project(project_root, rel)
            ast = parse_file_to_ast(abs_path, project_root, settings.c_header_as_cpp)
        except (PathOutsideProjectError, UnsupportedExtensionError, FileNotFoundError) as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1) from e
        results.append(ast.model_dump(by_alias=True))
    console.print_json(json.dumps({"detailedAsts": results}, ensure_ascii=False))
