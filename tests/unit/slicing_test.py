"""Tests for predicate and path slicing."""

from codex_explorer.core.slicing import is_non_empty_slice, slice_by_hints, slice_by_paths
from codex_explorer.models import AstNode, DetailedAst, Position, SliceHints


def _node(type_: str, *children: AstNode, sample: str = "") -> AstNode:
    return AstNode(
        type=type_,
        start_position=Position(row=0, column=0),
        end_position=Position(row=0, column=0),
        sample=sample,
        children=list(children),
    )


def _tree() -> DetailedAst:
    root = _node(
        "program",
        _node("function_declaration", _node("identifier", sample="alpha"), sample="function alpha() {}"),
        _node(
            "class_declaration",
            _node("method_definition", _node("property_identifier", sample="beta"), sample="beta() {}"),
            sample="class Beta { beta() {} }",
        ),
        _node("function_declaration", _node("identifier", sample="gamma"), sample="function gamma() {}"),
    )
    return DetailedAst(file_path="a.ts", language="typescript", root=root)


class TestSliceByHints:
    def test_matches_types_in_pre_order(self) -> None:
        sliced = slice_by_hints(_tree(), SliceHints(hint_types=["function_declaration", "method_definition"]))
        assert sliced.root.type == "root"
        assert [c.sample for c in sliced.root.children] == [
            "function alpha() {}",
            "beta() {}",
            "function gamma() {}",
        ]

    def test_matches_symbols_by_substring(self) -> None:
        sliced = slice_by_hints(_tree(), SliceHints(symbols=["gamma"]))
        assert [c.type for c in sliced.root.children] == ["function_declaration", "identifier"]

    def test_caps_at_max_nodes(self) -> None:
        sliced = slice_by_hints(_tree(), SliceHints(hint_types=["function_declaration"], max_nodes=1))
        assert len(sliced.root.children) == 1
        assert sliced.root.children[0].sample == "function alpha() {}"

    def test_no_match_is_empty(self) -> None:
        sliced = slice_by_hints(_tree(), SliceHints(symbols=["delta"]))
        assert not is_non_empty_slice(sliced)

    def test_empty_symbol_matches_nothing(self) -> None:
        assert not is_non_empty_slice(slice_by_hints(_tree(), SliceHints(symbols=[""])))

    def test_input_is_not_modified(self) -> None:
        tree = _tree()
        slice_by_hints(tree, SliceHints(hint_types=["identifier"]))
        assert tree.root.type == "program"
        assert len(tree.root.children) == 3

    def test_keeps_file_metadata(self) -> None:
        sliced = slice_by_hints(_tree(), SliceHints(hint_types=["identifier"]))
        assert sliced.file_path == "a.ts"
        assert sliced.language == "typescript"


class TestSliceByPaths:
    def test_picks_addressed_subtrees(self) -> None:
        sliced = slice_by_paths(_tree(), ["1.0", "2"])
        assert [c.type for c in sliced.root.children] == ["method_definition", "function_declaration"]
        assert sliced.root.children[0].children[0].sample == "beta"

    def test_skips_invalid_and_out_of_range_paths(self) -> None:
        sliced = slice_by_paths(_tree(), ["9", "0.5", "x.1", "1.a"])
        assert not is_non_empty_slice(sliced)

    def test_empty_segments_are_ignored(self) -> None:
        sliced = slice_by_paths(_tree(), ["1..0"])
        assert [c.type for c in sliced.root.children] == ["method_definition"]

    def test_empty_path_selects_root(self) -> None:
        sliced = slice_by_paths(_tree(), [""])
        assert sliced.root.children[0].type == "program"
