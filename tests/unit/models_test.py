"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from codex_explorer.models import (
    AskResult,
    AstNode,
    ClassSignature,
    CodeSlice,
    FileIndexItem,
    FilteredIndex,
    FunctionSignature,
    Position,
    PruneMode,
    PrunePlan,
    SliceHints,
    TraceBuffer,
)


class TestPositionModel:
    def test_position_requires_row(self) -> None:
        with pytest.raises(ValidationError):
            Position(column=0)  # type: ignore[call-arg]

    def test_position_serializes_to_dict(self) -> None:
        assert Position(row=10, column=20).model_dump() == {"row": 10, "column": 20}


class TestAstNodeModel:
    def test_serializes_camel_case_positions(self) -> None:
        node = AstNode(
            type="identifier",
            start_position=Position(row=1, column=2),
            end_position=Position(row=1, column=5),
            sample="foo",
        )
        data = node.model_dump(by_alias=True)
        assert data["startPosition"] == {"row": 1, "column": 2}
        assert data["endPosition"] == {"row": 1, "column": 5}
        assert data["children"] == []

    def test_parses_nested_children_from_json(self) -> None:
        payload = {
            "type": "program",
            "startPosition": {"row": 0, "column": 0},
            "endPosition": {"row": 3, "column": 0},
            "children": [
                {
                    "type": "function_declaration",
                    "startPosition": {"row": 0, "column": 0},
                    "endPosition": {"row": 2, "column": 1},
                    "sample": "function a() {}",
                }
            ],
        }
        node = AstNode.model_validate(payload)
        assert node.sample == ""
        assert node.children[0].type == "function_declaration"
        assert node.children[0].children == []


class TestSignatures:
    def test_index_item_discriminates_on_type(self) -> None:
        item = FileIndexItem.model_validate(
            {
                "file": "a.cpp",
                "lang": "cpp",
                "ast": [
                    {"type": "function", "name": "f", "params": ["int a"]},
                    {"type": "class", "name": "C", "methods": [{"type": "method", "name": "m", "params": []}]},
                ],
            }
        )
        assert isinstance(item.ast[0], FunctionSignature)
        assert isinstance(item.ast[1], ClassSignature)
        assert item.ast[1].methods[0].name == "m"

    def test_rejects_unknown_signature_type(self) -> None:
        with pytest.raises(ValidationError):
            FileIndexItem.model_validate({"file": "a.js", "lang": "js", "ast": [{"type": "enum", "name": "E"}]})

    def test_where_is_omitted_for_js_functions(self) -> None:
        sig = FunctionSignature(name="f", params=["a"])
        assert sig.where is None

    def test_filtered_index_round_trips_generated_at(self) -> None:
        index = FilteredIndex(root="/p", files=[], index=[], generated_at="2024-01-01T00:00:00+00:00")
        assert index.model_dump(by_alias=True)["generatedAt"] == "2024-01-01T00:00:00+00:00"


class TestSliceHints:
    def test_defaults(self) -> None:
        hints = SliceHints()
        assert hints.symbols == []
        assert hints.hint_types == []
        assert hints.max_nodes == 200

    @pytest.mark.parametrize("key", ["hintTypes", "hint_types", "types"])
    def test_accepts_type_aliases(self, key: str) -> None:
        hints = SliceHints.model_validate({key: ["function_declaration"], "maxNodes": 5})
        assert hints.hint_types == ["function_declaration"]
        assert hints.max_nodes == 5

    def test_serializes_camel_case(self) -> None:
        data = SliceHints(hint_types=["x"], max_nodes=3).model_dump(by_alias=True)
        assert data == {"symbols": [], "hintTypes": ["x"], "maxNodes": 3}


class TestPrunePlan:
    def test_parses_oracle_json(self) -> None:
        plan = PrunePlan.model_validate(
            {
                "mode": "KEEP_SOME",
                "keep_full": ["a.ts"],
                "slice": [{"file": "b.ts", "by": {"types": ["class_declaration"]}, "paths": ["0.1"]}],
                "drop": ["c.ts"],
                "rationale": "only a and part of b matter",
                "extra": "ignored",
            }
        )
        assert plan.mode is PruneMode.KEEP_SOME
        assert plan.slice[0].by is not None
        assert plan.slice[0].by.hint_types == ["class_declaration"]
        assert plan.slice[0].paths == ["0.1"]

    def test_rejects_unknown_mode(self) -> None:
        with pytest.raises(ValidationError):
            PrunePlan.model_validate({"mode": "KEEP_EVERYTHING"})

    def test_empty_plan_defaults(self) -> None:
        plan = PrunePlan()
        assert plan.mode is PruneMode.KEEP_SOME
        assert plan.keep_full == [] and plan.slice == [] and plan.drop == []


class TestCodeSlice:
    def test_camel_case_lines(self) -> None:
        code_slice = CodeSlice.model_validate({"file": "a.ts", "startLine": 3, "endLine": 9, "code": "x"})
        assert code_slice.start_line == 3
        assert code_slice.model_dump(by_alias=True)["endLine"] == 9
        assert code_slice.rationale is None


class TestTraceBuffer:
    def test_records_per_iteration(self) -> None:
        trace = TraceBuffer()
        trace.record_requested(["a.ts"])
        trace.record_parsed(["a.ts"])
        trace.iterations = 1
        trace.record_parsed(["b.ts"])
        assert trace.files_requested == [["a.ts"]]
        assert trace.files_parsed == [["a.ts"], ["b.ts"]]
        assert trace.all_parsed() == {"a.ts", "b.ts"}

    def test_fills_skipped_iterations(self) -> None:
        trace = TraceBuffer(iterations=2)
        trace.record_requested(["x"])
        assert trace.files_requested == [[], [], ["x"]]


class TestAskResult:
    def test_serializes_camel_case(self) -> None:
        data = AskResult(answer="42", want_files=["a.ts"], trace=TraceBuffer()).model_dump(by_alias=True)
        assert data["wantFiles"] == ["a.ts"]
        assert data["modeUsed"] == "slice"
        assert data["trace"]["filesParsed"] == []
