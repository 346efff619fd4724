import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import cast

from codex_explorer.models import PromptMode


def _env_flag(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int = 0) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    project_root: Path
    filtered_ast_path: Path
    regenerate_filtered: bool = False
    c_header_as_cpp: bool = False

    trace_pipeline: bool = False
    trace_max_json: int = 2000

    prompt_mode: PromptMode = "slice"
    # Read for compatibility; the loop control permits one extra iteration regardless.
    max_loops: int = 1

    prune_allow_drop_all: bool = True
    prune_server_enforce_limits: bool = True
    prompt_max_files: int = 0
    max_ast_tokens: int = 0

    model_ctx_tokens: int = 0
    output_tokens_budget: int = 1500
    prompt_safety: float = 0.8

    code_max_files: int = 6
    code_max_bytes: int = 200_000
    code_safety: float = 0.8
    max_code_tokens: int = 0

    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_timeout: int = 60

    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        cwd = Path.cwd()
        mode = os.getenv("PROMPT_MODE", "slice").strip().lower()
        return cls(
            project_root=Path(os.getenv("PROJECT_ROOT") or cwd / "project").resolve(),
            filtered_ast_path=Path(os.getenv("FILTERED_AST_PATH") or cwd / "data" / "filtered_ast.json").resolve(),
            regenerate_filtered=_env_flag("REGENERATE_FILTERED"),
            c_header_as_cpp=_env_flag("C_HEADER_AS_CPP"),
            trace_pipeline=_env_flag("TRACE_PIPELINE"),
            trace_max_json=_env_int("TRACE_MAX_JSON", 2000),
            prompt_mode=cast(PromptMode, mode if mode in ("slice", "full") else "slice"),
            max_loops=_env_int("MAX_LOOPS", 1),
            prune_allow_drop_all=_env_flag("PRUNE_ALLOW_DROP_ALL", True),
            prune_server_enforce_limits=_env_flag("PRUNE_SERVER_ENFORCE_LIMITS", True),
            prompt_max_files=_env_int("PROMPT_MAX_FILES", 0),
            max_ast_tokens=_env_int("MAX_AST_TOKENS", 0),
            model_ctx_tokens=_env_int("MODEL_CTX_TOKENS", 0),
            output_tokens_budget=_env_int("OUTPUT_TOKENS_BUDGET", 1500),
            prompt_safety=_env_float("PROMPT_SAFETY", 0.8),
            code_max_files=_env_int("CODE_MAX_FILES", 6),
            code_max_bytes=_env_int("CODE_MAX_BYTES", 200_000),
            code_safety=_env_float("CODE_SAFETY", 0.8),
            max_code_tokens=_env_int("MAX_CODE_TOKENS", 0),
            llm_api_key=(os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY") or "").strip(),
            llm_model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            llm_timeout=_env_int("LLM_TIMEOUT", 60),
            port=_env_int("PORT", 8000),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
