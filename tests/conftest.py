"""Shared fixtures and helpers for tests."""

from dataclasses import replace
from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from codex_explorer.config import Settings
from codex_explorer.core.index import build_filtered_index, write_filtered_index

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Sample project
# ---------------------------------------------------------------------------

ACC_CPP = """\
struct Account {
  int sum(int a, int b) const;
};

int Account::sum(int a, int b) const { return a + b; }

namespace Util {
int to_value(bool include) { return include ? 1 : 0; }
}
"""

GREETER_TS = """\
export function greet(name: string): string {
  return `Hello, ${name}`;
}

export class Greeter {
  constructor(private prefix: string) {}
  hello(name: string) {
    return this.prefix + greet(name);
  }
}

const shout = (text: string) => text.toUpperCase();
"""

UTIL_JS = """\
function add(a, b) {
  return a + b;
}

function sub(a, b) {
  return a - b;
}
"""

STYLE_CSS = "body { color: red; }\n"


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A small mixed-language project with an excluded build directory."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "acc.cpp").write_text(ACC_CPP)
    (root / "src" / "greeter.ts").write_text(GREETER_TS)
    (root / "src" / "util.js").write_text(UTIL_JS)
    (root / "src" / "style.css").write_text(STYLE_CSS)
    (root / "README.md").write_text("# sample\n")
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "node_modules" / "lib" / "index.js").write_text("function hidden() {}\n")
    (root / "dist").mkdir()
    (root / "dist" / "bundle.js").write_text("function bundled() {}\n")
    return root


@pytest.fixture
def settings(tmp_path: Path, project_root: Path) -> Settings:
    """Settings pointing at the sample project, with no LLM configured."""
    return Settings(project_root=project_root, filtered_ast_path=tmp_path / "data" / "filtered_ast.json")


@pytest.fixture
def indexed_settings(settings: Settings) -> Settings:
    """Settings whose filtered index has already been written."""
    write_filtered_index(build_filtered_index(settings.project_root), settings.filtered_ast_path)
    return settings


@pytest.fixture
def make_settings(settings: Settings):
    def _make(**changes: object) -> Settings:
        return replace(settings, **changes)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def cpp_parser() -> Parser:
    """Return a tree-sitter parser for C++."""
    return get_parser("cpp")


@pytest.fixture
def typescript_parser() -> Parser:
    """Return a tree-sitter parser for TypeScript."""
    return get_parser("typescript")

