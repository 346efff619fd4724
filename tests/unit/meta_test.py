"""Tests for tree metrics and token budgets."""

import math

from codex_explorer.config import Settings
from codex_explorer.core.ast import parse_source_to_ast
from codex_explorer.core.budget import (
    BASE_PROMPT_TOKENS,
    calc_ast_budget,
    calc_code_budget,
    estimate_fixed_prompt_tokens,
    usable_budget,
)
from codex_explorer.core.meta import (
    TypeCount,
    count_nodes_quick,
    describe_asts,
    estimate_tokens_for_asts,
    summarize_ast,
    top_k_types,
    type_frequencies,
)
from codex_explorer.models import AstNode, DetailedAst, Position


def _node(type_: str, *children: AstNode, sample: str = "") -> AstNode:
    return AstNode(
        type=type_,
        start_position=Position(row=0, column=0),
        end_position=Position(row=0, column=0),
        sample=sample,
        children=list(children),
    )


def _tree() -> AstNode:
    return _node(
        "program",
        _node("function_declaration", _node("identifier", sample="ab"), sample="abcd"),
        _node("function_declaration", _node("identifier", sample="cd")),
        _node("comment", sample="12345678"),
    )


class TestSummaries:
    def test_summarize_counts_chars_and_nodes(self) -> None:
        assert summarize_ast(_tree()) == (16, 6)

    def test_estimate_tokens(self) -> None:
        ast = DetailedAst(file_path="a.ts", language="typescript", root=_tree())
        assert estimate_tokens_for_asts([ast]) == math.ceil(16 / 4) + math.ceil(6 / 10)
        assert estimate_tokens_for_asts([ast, ast]) == math.ceil(32 / 4) + math.ceil(12 / 10)

    def test_estimate_tokens_empty(self) -> None:
        assert estimate_tokens_for_asts([]) == 0

    def test_count_nodes_quick_respects_cap(self) -> None:
        assert count_nodes_quick(_tree()) == 6
        assert count_nodes_quick(_tree(), cap=3) == 3

    def test_estimate_grows_with_sampleless_tree(self) -> None:
        ast = DetailedAst(file_path="a.ts", language="typescript", root=_tree())
        bare = DetailedAst(file_path="b.ts", language="typescript", root=_node("program", _node("identifier")))
        base = estimate_tokens_for_asts([ast])
        assert estimate_tokens_for_asts([ast, bare]) >= base
        assert estimate_tokens_for_asts([bare]) >= estimate_tokens_for_asts([])


class TestTypeRanking:
    def test_frequencies(self) -> None:
        freq = type_frequencies(_tree())
        assert freq["function_declaration"] == 2
        assert freq["identifier"] == 2
        assert freq["program"] == 1

    def test_stop_types_and_normalize(self) -> None:
        freq = type_frequencies(_tree(), stop_types={"comment"}, normalize=str.upper)
        assert "COMMENT" in freq
        freq = type_frequencies(_tree(), stop_types={"comment"})
        assert "comment" not in freq

    def test_top_k_orders_by_count(self) -> None:
        top = top_k_types(_tree(), k=2)
        assert set(top) == {"function_declaration", "identifier"}

    def test_top_k_with_counts(self) -> None:
        top = top_k_types(_tree(), k=1, with_counts=True)
        assert len(top) == 1
        assert isinstance(top[0], TypeCount)
        assert top[0].count == 2

    def test_top_k_counts_sum_to_node_count(self) -> None:
        src = b"struct A { int f(int x); };\nint A::f(int x) { return x + 1; }\nint g() { return 2; }\n"
        root = parse_source_to_ast(src, "cpp", "acc.cpp").root
        counts = top_k_types(root, k=10_000, with_counts=True)
        assert sum(c.count for c in counts) == summarize_ast(root)[1]  # type: ignore[union-attr]
        assert [c.count for c in counts] == sorted((c.count for c in counts), reverse=True)  # type: ignore[union-attr]

    def test_top_k_zero(self) -> None:
        assert top_k_types(_tree(), k=0) == []

    def test_describe_asts(self) -> None:
        ast = DetailedAst(file_path="a.ts", language="typescript", root=_tree())
        meta = describe_asts([ast])
        assert meta[0]["file"] == "a.ts"
        assert meta[0]["approxNodes"] == 6
        assert len(meta[0]["topTypes"]) == 4  # type: ignore[arg-type]


class TestBudgets:
    def test_usable_budget_disabled_without_context(self) -> None:
        assert usable_budget(0, 1500, 100, 0.8) == 0

    def test_usable_budget_never_negative(self) -> None:
        assert usable_budget(1000, 1500, 100, 0.8) == 0

    def test_usable_budget_applies_safety(self) -> None:
        assert usable_budget(10_000, 1500, 500, 0.5) == 4000

    def test_fixed_prompt_tokens(self) -> None:
        files = ["a.ts"]
        listing = math.ceil(len('{"files":["a.ts"]}') / 4)
        base = BASE_PROMPT_TOKENS + 1 + listing
        assert estimate_fixed_prompt_tokens("abcd", files) == base
        assert estimate_fixed_prompt_tokens("abcd", files, pruned=True) == base + 50
        assert estimate_fixed_prompt_tokens("abcd", files, pruned=True, dropped_all=True) == base + 80

    def test_file_listing_is_capped(self) -> None:
        many = [f"f{i}.ts" for i in range(500)]
        assert estimate_fixed_prompt_tokens("", many) == estimate_fixed_prompt_tokens("", many[:200])

    def test_ast_budget(self, settings: Settings, make_settings) -> None:
        assert calc_ast_budget(settings, "q", ["a.ts"]) == 0
        sized = make_settings(model_ctx_tokens=8000, output_tokens_budget=1000, prompt_safety=0.5)
        overhead = estimate_fixed_prompt_tokens("q", ["a.ts"], pruned=True)
        assert calc_ast_budget(sized, "q", ["a.ts"]) == math.floor((8000 - 1000 - overhead) * 0.5)

    def test_code_budget_reserves_extra(self, make_settings) -> None:
        sized = make_settings(model_ctx_tokens=8000, output_tokens_budget=1000, code_safety=1.0, prompt_safety=1.0)
        ast_budget = calc_ast_budget(sized, "q", [], pruned=False)
        assert calc_code_budget(sized, "q", []) == ast_budget - 200
