from __future__ import annotations

from fastapi import Depends

from codex_explorer.config import Settings, get_settings
from codex_explorer.core.ports.oracle import DecisionOracle
from codex_explorer.oracle.litellm_adapter import oracle_from_settings

_oracle: DecisionOracle | None = None
_oracle_ready = False


def get_settings_dep() -> Settings:
    return get_settings()


def get_oracle(settings: Settings = Depends(get_settings_dep)) -> DecisionOracle | None:
    """Return the configured oracle, creating it lazily on first call.

    None means no LLM is configured and the pipeline runs its fallbacks.
    """
    global _oracle, _oracle_ready  # noqa: PLW0603
    if not _oracle_ready:
        _oracle = oracle_from_settings(settings)
        _oracle_ready = True
    return _oracle


def reset_oracle() -> None:
    global _oracle, _oracle_ready  # noqa: PLW0603
    _oracle = None
    _oracle_ready = False
