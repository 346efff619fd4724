"""FastMCP server exposing codex-explorer tools."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from codex_explorer.config import Settings
from codex_explorer.core.ast import load_detailed_asts
from codex_explorer.core.index import IndexNotFoundError, load_filtered_index
from codex_explorer.core.ports.oracle import DecisionOracle
from codex_explorer.core.session import create_ask_session
from codex_explorer.graph.machine import run_graph


def create_mcp_server(settings: Settings, oracle: DecisionOracle | None = None) -> FastMCP:
    """Create a FastMCP server bound to the given settings and oracle."""

    mcp = FastMCP(
        "codex-explorer",
        instructions="Answer questions about a source tree using signature indexes, pruned ASTs and code slices.",
    )

    @mcp.tool()
    def ask(question: str, project_root: str | None = None) -> dict[str, Any]:
        """Answer a question about the project; optionally index another root for this call only."""
        if project_root is None:
            result = run_graph(question, settings, oracle)
        else:
            with create_ask_session(project_root, c_header_as_cpp=settings.c_header_as_cpp) as session:
                result = run_graph(
                    question, settings, oracle, project_root=session.project_root, index_path=session.index_path
                )
        return result.model_dump(by_alias=True)

    @mcp.tool()
    def filtered_index(limit: int = 200) -> dict[str, Any]:
        """Return the project-wide signature index (first ``limit`` files)."""
        try:
            index = load_filtered_index(settings.filtered_ast_path)
        except IndexNotFoundError as e:
            return {"error": str(e)}
        payload = index.model_dump(by_alias=True)
        payload["index"] = payload["index"][:limit]
        return payload

    @mcp.tool()
    def parse_files(files: list[str]) -> list[dict[str, Any]]:
        """Parse project files into detailed ASTs; unreadable or unsupported files are skipped."""
        asts, _ = load_detailed_asts(files, settings.project_root, settings.c_header_as_cpp)
        return [ast.model_dump(by_alias=True) for ast in asts]

    return mcp
