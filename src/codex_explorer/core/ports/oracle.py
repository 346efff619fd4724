import json
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class DecisionOracle(Protocol):
    """Language-model decision point: a system prompt and a JSON user prompt in, text out."""

    def invoke(self, system: str, user: str) -> str: ...


def ask_json(oracle: DecisionOracle, system: str, payload: dict[str, Any]) -> tuple[dict[str, Any] | None, str]:
    """Send ``payload`` as JSON and try to read a JSON object back.

    Returns ``(parsed, raw_text)``; ``parsed`` is None when the call failed or
    the reply is not a JSON object, so callers can fall back deterministically.
    """
    user = json.dumps(payload, ensure_ascii=False, default=str)
    try:
        raw = oracle.invoke(system, user)
    except Exception:
        logger.exception("Oracle call failed")
        return None, ""
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return None, raw or ""
    if not isinstance(parsed, dict):
        return None, raw
    return parsed, raw
