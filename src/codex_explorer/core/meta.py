import math
from collections.abc import Callable, Iterable
from typing import NamedTuple

from codex_explorer.models import AstNode, DetailedAst


class TypeCount(NamedTuple):
    type: str
    count: int


def summarize_ast(node: AstNode) -> tuple[int, int]:
    """Return (total sample characters, total node count) for a subtree."""
    chars = 0
    nodes = 0
    stack = [node]
    while stack:
        cur = stack.pop()
        chars += len(cur.sample)
        nodes += 1
        stack.extend(cur.children)
    return chars, nodes


def estimate_tokens_for_asts(asts: Iterable[DetailedAst]) -> int:
    """Approximate prompt cost: ``ceil(chars / 4) + ceil(nodes / 10)``."""
    chars = 0
    nodes = 0
    for ast in asts:
        c, n = summarize_ast(ast.root)
        chars += c
        nodes += n
    return math.ceil(chars / 4) + math.ceil(nodes / 10)


def count_nodes_quick(root: AstNode, cap: int = 5000) -> int:
    count = 0
    stack = [root]
    while stack and count < cap:
        node = stack.pop()
        count += 1
        stack.extend(node.children)
    return count


def type_frequencies(
    root: AstNode,
    stop_types: set[str] | frozenset[str] | None = None,
    normalize: Callable[[str], str] | None = None,
) -> dict[str, int]:
    stop = stop_types or frozenset()
    freq: dict[str, int] = {}
    stack = [root]
    while stack:
        node = stack.pop()
        node_type = normalize(node.type) if normalize else node.type
        if node_type and node_type not in stop:
            freq[node_type] = freq.get(node_type, 0) + 1
        stack.extend(node.children)
    return freq


def top_k_types(
    root: AstNode,
    k: int = 5,
    stop_types: set[str] | frozenset[str] | None = None,
    normalize: Callable[[str], str] | None = None,
    with_counts: bool = False,
) -> list[str] | list[TypeCount]:
    """Most frequent node types, by descending count.

    Ties keep the order in which the types were first counted.
    """
    freq = type_frequencies(root, stop_types, normalize)
    ranked = sorted(freq.items(), key=lambda item: item[1], reverse=True)[: max(k, 0)]
    if with_counts:
        return [TypeCount(t, c) for t, c in ranked]
    return [t for t, _ in ranked]


def describe_asts(asts: Iterable[DetailedAst]) -> list[dict[str, object]]:
    """Per-file metadata sent to the oracle instead of whole trees."""
    return [
        {"file": ast.file_path, "approxNodes": count_nodes_quick(ast.root), "topTypes": top_k_types(ast.root, 5)}
        for ast in asts
    ]
