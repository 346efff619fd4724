"""Context-window derived budgets for tree and code prompts."""

import json
import math
from collections.abc import Sequence

from codex_explorer.config import Settings

BASE_PROMPT_TOKENS = 1200
CODE_PROMPT_EXTRA_TOKENS = 200
_MAX_LISTED_FILES = 200


def usable_budget(context_window: int, output_reserve: int, overhead: int, safety: float) -> int:
    """Tokens left for prompt payload; 0 means the budget is disabled."""
    if context_window <= 0:
        return 0
    usable = context_window - output_reserve - overhead
    return max(0, math.floor(usable * safety))


def _files_overhead(files: Sequence[str]) -> int:
    listing = json.dumps({"files": list(files[:_MAX_LISTED_FILES])}, separators=(",", ":"))
    return math.ceil(len(listing) / 4)


def estimate_fixed_prompt_tokens(
    question: str, files: Sequence[str], pruned: bool = False, dropped_all: bool = False
) -> int:
    """Overhead of everything in a tree prompt except the trees themselves."""
    base = BASE_PROMPT_TOKENS
    base += math.ceil(len(question or "") / 4)
    base += _files_overhead(files)
    if pruned:
        base += 50
    if dropped_all:
        base += 30
    return base


def calc_ast_budget(
    settings: Settings, question: str, files: Sequence[str], pruned: bool = True, dropped_all: bool = False
) -> int:
    overhead = estimate_fixed_prompt_tokens(question, files, pruned, dropped_all)
    return usable_budget(settings.model_ctx_tokens, settings.output_tokens_budget, overhead, settings.prompt_safety)


def calc_code_budget(settings: Settings, question: str, files: Sequence[str]) -> int:
    overhead = (
        BASE_PROMPT_TOKENS + math.ceil(len(question or "") / 4) + _files_overhead(files) + CODE_PROMPT_EXTRA_TOKENS
    )
    return usable_budget(settings.model_ctx_tokens, settings.output_tokens_budget, overhead, settings.code_safety)
