"""Reduce detailed trees to the nodes a prompt actually needs.

Both slice modes return a copy of the input whose root is a synthetic
``root`` node; the input tree is never modified.
"""

from __future__ import annotations

from collections.abc import Iterable

from codex_explorer.models import AstNode, DetailedAst, Position, SliceHints


def _synthetic_root(children: list[AstNode]) -> AstNode:
    return AstNode(
        type="root",
        start_position=Position(row=0, column=0),
        end_position=Position(row=0, column=0),
        sample="",
        children=children,
    )


def slice_by_hints(ast: DetailedAst, hints: SliceHints) -> DetailedAst:
    """Collect nodes matching ``hint_types`` or containing any of ``symbols``.

    Pre-order walk; stops as soon as ``max_nodes`` nodes were collected. The
    matches are flattened under the synthetic root.
    """
    hint_types = set(hints.hint_types)
    symbols = [s for s in hints.symbols if s]
    picked: list[AstNode] = []

    stack: list[AstNode] = [ast.root]
    while stack and len(picked) < hints.max_nodes:
        node = stack.pop()
        if node.type in hint_types or (node.sample and any(sym in node.sample for sym in symbols)):
            picked.append(node)
        stack.extend(reversed(node.children))

    return ast.model_copy(update={"root": _synthetic_root(picked)})


def _parse_path(path: str) -> list[int] | None:
    indices: list[int] = []
    for part in path.split("."):
        if not part:
            continue
        if not (part.isascii() and part.isdigit()):
            return None
        indices.append(int(part))
    return indices


def _node_at(root: AstNode, indices: list[int]) -> AstNode | None:
    node = root
    for idx in indices:
        if idx >= len(node.children):
            return None
        node = node.children[idx]
    return node


def slice_by_paths(ast: DetailedAst, paths: Iterable[str]) -> DetailedAst:
    """Pick subtrees addressed by dotted child-index paths such as ``"0.3.2"``.

    Paths with a non-numeric segment or an out-of-range index are skipped.
    """
    picked: list[AstNode] = []
    for path in paths:
        indices = _parse_path(path)
        if indices is None:
            continue
        node = _node_at(ast.root, indices)
        if node is not None:
            picked.append(node)
    return ast.model_copy(update={"root": _synthetic_root(picked)})


def is_non_empty_slice(ast: DetailedAst) -> bool:
    return len(ast.root.children) > 0
