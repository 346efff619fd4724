"""LiteLLM-backed decision oracle.

Implements the ``DecisionOracle`` protocol for any provider LiteLLM routes to
(OpenAI, Anthropic, local servers, ...).
"""

from __future__ import annotations

import logging
from typing import Any

import litellm

from codex_explorer.config import Settings

logger = logging.getLogger(__name__)

# Unsupported params are dropped instead of raising (o-series models etc.).
litellm.drop_params = True


class LiteLLMOracle:
    def __init__(self, model: str, api_key: str | None = None, timeout: int = 60, temperature: float | None = None):
        self.model = model
        self.api_key = api_key or None
        self.timeout = timeout
        self.temperature = temperature

    def invoke(self, system: str, user: str) -> str:
        kwargs: dict[str, Any] = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        response = litellm.completion(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            api_key=self.api_key,
            timeout=self.timeout,
            **kwargs,
        )
        content = response.choices[0].message.content
        return content or ""


def oracle_from_settings(settings: Settings) -> LiteLLMOracle | None:
    """Build the configured oracle, or None to run the deterministic fallbacks."""
    if not settings.llm_api_key:
        return None
    logger.info("Using LLM oracle %s", settings.llm_model)
    return LiteLLMOracle(settings.llm_model, api_key=settings.llm_api_key, timeout=settings.llm_timeout)
