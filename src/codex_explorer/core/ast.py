import logging
import os
from pathlib import Path
from typing import cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from codex_explorer.core.languages import detect_language_from_path
from codex_explorer.models import AstNode, DetailedAst, Position

logger = logging.getLogger(__name__)

SAMPLE_CHARS = 200
# UTF-8 needs at most 4 bytes per character.
_SAMPLE_BYTES = SAMPLE_CHARS * 4


class PathOutsideProjectError(ValueError):
    """Raised when a requested path resolves outside the project root."""


def relative_path(abs_path: Path, project_root: Path) -> str:
    """Project-relative path with forward slashes."""
    return Path(os.path.relpath(Path(abs_path).resolve(), Path(project_root).resolve())).as_posix()


def resolve_in_project(project_root: Path, rel: str) -> Path:
    root = project_root.resolve()
    candidate = (root / rel).resolve()
    if candidate != root and root not in candidate.parents:
        raise PathOutsideProjectError(f"Path escapes project root: {rel}")
    return candidate


def _sample(source_bytes: bytes, node: Node) -> str:
    end = min(node.end_byte, node.start_byte + _SAMPLE_BYTES)
    return source_bytes[node.start_byte : end].decode("utf-8", errors="ignore")[:SAMPLE_CHARS]


def _to_model(source_bytes: bytes, node: Node) -> AstNode:
    return AstNode(
        type=node.type,
        start_position=Position(row=node.start_point[0], column=node.start_point[1]),
        end_position=Position(row=node.end_point[0], column=node.end_point[1]),
        sample=_sample(source_bytes, node),
    )


def convert_tree(source_bytes: bytes, root: Node) -> AstNode:
    """Project a tree-sitter tree onto named ``AstNode`` objects.

    Anonymous tokens are dropped. The walk keeps its own stack, so deeply
    nested sources do not hit the interpreter recursion limit.
    """
    root_model = _to_model(source_bytes, root)
    stack: list[tuple[Node, AstNode]] = [(root, root_model)]
    while stack:
        node, model = stack.pop()
        for child in node.named_children:
            child_model = _to_model(source_bytes, child)
            model.children.append(child_model)
            stack.append((child, child_model))
    return root_model


def parse_source_to_ast(source_bytes: bytes, language: str, file_path: str) -> DetailedAst:
    parser = get_parser(cast(SupportedLanguage, language))
    tree = parser.parse(source_bytes)
    return DetailedAst(file_path=file_path, language=language, root=convert_tree(source_bytes, tree.root_node))


def parse_file_to_ast(abs_path: str | Path, project_root: str | Path, c_header_as_cpp: bool = False) -> DetailedAst:
    """Parse one source file into a detailed tree.

    Raises ``UnsupportedExtensionError`` when the extension has no grammar.
    """
    file_path = Path(abs_path)
    language = detect_language_from_path(file_path, c_header_as_cpp)

    try:
        source_bytes = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {abs_path}") from None

    return parse_source_to_ast(source_bytes, language, relative_path(file_path, Path(project_root)))


def load_detailed_asts(
    rel_files: list[str], project_root: str | Path, c_header_as_cpp: bool = False
) -> tuple[list[DetailedAst], list[str]]:
    """Parse the requested files, skipping any that fail or repeat an earlier request.

    Returns the trees and the relative paths that were parsed.
    """
    root = Path(project_root)
    asts: list[DetailedAst] = []
    parsed: list[str] = []
    for rel in rel_files:
        try:
            abs_path = resolve_in_project(root, rel)
            if not abs_path.is_file() or relative_path(abs_path, root) in parsed:
                continue
            ast = parse_file_to_ast(abs_path, root, c_header_as_cpp)
        except (OSError, ValueError, LookupError) as e:
            logger.warning("Parse error: %s: %s", rel, e)
            continue
        asts.append(ast)
        parsed.append(ast.file_path)
    return asts, parsed
