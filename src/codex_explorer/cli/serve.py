from typing import Annotated

import typer
from rich.console import Console

from codex_explorer.config import get_settings

serve_app = typer.Typer(help="Start servers.")
# stdout carries the MCP stdio transport.
console = Console(stderr=True)


@serve_app.command("api")
def api(
    host: str = "127.0.0.1",
    port: Annotated[int | None, typer.Option(help="Port to bind (default: PORT).")] = None,
) -> None:
    """Start the FastAPI REST API server."""
    import uvicorn

    from codex_explorer.api.app import create_app

    settings = get_settings()
    app = create_app()
    bind_port = port or settings.port
    console.print(f"[green]Starting API server on {host}:{bind_port}[/green]")
    console.print(f"  Index:   {settings.filtered_ast_path}")
    uvicorn.run(app, host=host, port=bind_port)


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
) -> None:
    """Start the MCP server."""
    from codex_explorer.mcp.server import create_mcp_server
    from codex_explorer.oracle.litellm_adapter import oracle_from_settings

    settings = get_settings()
    server = create_mcp_server(settings, oracle_from_settings(settings))
    console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
