import logging
from collections.abc import Sequence
from dataclasses import dataclass

from codex_explorer.config import Settings
from codex_explorer.core.budget import calc_ast_budget
from codex_explorer.core.meta import estimate_tokens_for_asts
from codex_explorer.core.slicing import is_non_empty_slice, slice_by_hints, slice_by_paths
from codex_explorer.models import DetailedAst, PruneMode, PrunePlan, PruneTraceItem, SliceRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PruneResult:
    pruned: list[DetailedAst]
    dropped_all: bool
    applied_plan: PrunePlan
    trace_item: PruneTraceItem


def score_for_question(ast: DetailedAst, question: str) -> int:
    query = (question or "").lower()
    score = 0
    if query and query in ast.file_path.lower():
        score += 3
    score += min(3, len(ast.root.children))
    return score


def rank_and_trim(asts: Sequence[DetailedAst], question: str, k: int) -> list[DetailedAst]:
    """Keep the ``k`` best-scoring trees, highest score first."""
    if k <= 0 or len(asts) <= k:
        return list(asts)
    ranked = sorted(asts, key=lambda a: score_for_question(a, question), reverse=True)
    return ranked[:k]


def trim_to_token_budget(asts: Sequence[DetailedAst], budget: int) -> list[DetailedAst]:
    """Longest prefix of ``asts`` whose estimated cost fits in ``budget``.

    Whole files only; the first file that would overflow ends the prefix.
    A budget of 0 or less disables trimming.
    """
    if budget <= 0:
        return list(asts)
    kept: list[DetailedAst] = []
    used = 0
    for ast in asts:
        cost = estimate_tokens_for_asts([ast])
        if used + cost > budget:
            break
        kept.append(ast)
        used += cost
    return kept


def _apply_slice_rule(ast: DetailedAst, rule: SliceRule) -> DetailedAst:
    sliced = ast
    if rule.by is not None:
        sliced = slice_by_hints(sliced, rule.by)
    if rule.paths:
        sliced = slice_by_paths(sliced, rule.paths)
    return sliced


def enforce_limits(
    asts: list[DetailedAst], question: str, index_files: Sequence[str], settings: Settings
) -> list[DetailedAst]:
    """Server-side caps: file count first, then the token budget."""
    if not settings.prune_server_enforce_limits:
        return asts
    pruned = asts
    if settings.prompt_max_files > 0 and len(pruned) > settings.prompt_max_files:
        pruned = rank_and_trim(pruned, question, settings.prompt_max_files)
    dynamic_budget = calc_ast_budget(settings, question, index_files, pruned=True, dropped_all=False)
    if dynamic_budget > 0:
        pruned = trim_to_token_budget(pruned, dynamic_budget)
    elif settings.max_ast_tokens > 0:
        pruned = trim_to_token_budget(pruned, settings.max_ast_tokens)
    return pruned


def apply_prune_plan(
    asts: Sequence[DetailedAst],
    plan: PrunePlan,
    *,
    question: str,
    index_files: Sequence[str],
    settings: Settings,
) -> PruneResult:
    """Apply a prune plan to the detailed trees, then enforce hard caps.

    Per file, the first matching rule wins: ``drop``, then ``keep_full``, then
    a slice rule. Files the plan does not mention are dropped.
    """
    planned = [a.file_path for a in asts]
    before = estimate_tokens_for_asts(asts)

    if plan.mode is PruneMode.DROP_ALL and settings.prune_allow_drop_all:
        return PruneResult(
            pruned=[],
            dropped_all=True,
            applied_plan=PrunePlan(mode=PruneMode.DROP_ALL, drop=planned, rationale=plan.rationale),
            trace_item=PruneTraceItem(
                mode=PruneMode.DROP_ALL,
                planned_files=planned,
                kept_files=[],
                dropped_files=planned,
                est_tokens_before=before,
                est_tokens_after=0,
            ),
        )

    keep_full = set(plan.keep_full)
    drop = set(plan.drop)
    slice_rules = {rule.file: rule for rule in plan.slice}

    kept: list[DetailedAst] = []
    dropped: list[str] = []
    for ast in asts:
        file = ast.file_path
        if file in drop:
            dropped.append(file)
        elif file in keep_full:
            kept.append(ast)
        elif file in slice_rules:
            sliced = _apply_slice_rule(ast, slice_rules[file])
            if is_non_empty_slice(sliced):
                kept.append(sliced)
            else:
                dropped.append(file)
        else:
            dropped.append(file)

    pruned = enforce_limits(kept, question, index_files, settings)
    after = estimate_tokens_for_asts(pruned)
    kept_files = [a.file_path for a in pruned]
    logger.debug("Prune kept %d/%d files (%d -> %d tokens)", len(pruned), len(planned), before, after)

    applied_drop = list(dict.fromkeys([*dropped, *plan.drop]))
    return PruneResult(
        pruned=pruned,
        dropped_all=not pruned,
        applied_plan=plan.model_copy(update={"drop": applied_drop}),
        trace_item=PruneTraceItem(
            mode=plan.mode,
            planned_files=planned,
            kept_files=kept_files,
            dropped_files=[f for f in planned if f not in set(kept_files)],
            est_tokens_before=before,
            est_tokens_after=after,
        ),
    )
