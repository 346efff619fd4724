"""Tests for the oracle port and the LiteLLM adapter."""

import json
from types import SimpleNamespace
from unittest.mock import patch

from codex_explorer.config import Settings
from codex_explorer.core.ports.oracle import ask_json
from codex_explorer.oracle.litellm_adapter import LiteLLMOracle, oracle_from_settings


class EchoOracle:
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.user = ""

    def invoke(self, system: str, user: str) -> str:
        self.user = user
        return self.reply


class FailingOracle:
    def invoke(self, system: str, user: str) -> str:
        raise TimeoutError("slow")


class TestAskJson:
    def test_parses_object(self) -> None:
        oracle = EchoOracle('{"a": 1}')
        parsed, raw = ask_json(oracle, "sys", {"question": "질문"})
        assert parsed == {"a": 1}
        assert raw == '{"a": 1}'
        assert json.loads(oracle.user) == {"question": "질문"}
        assert "질문" in oracle.user

    def test_non_json(self) -> None:
        assert ask_json(EchoOracle("plain text"), "sys", {}) == (None, "plain text")

    def test_non_object(self) -> None:
        assert ask_json(EchoOracle("[1]"), "sys", {}) == (None, "[1]")

    def test_transport_error(self) -> None:
        assert ask_json(FailingOracle(), "sys", {}) == (None, "")


def _response(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestLiteLLMOracle:
    def test_invoke_sends_system_and_user(self) -> None:
        oracle = LiteLLMOracle("gpt-4o-mini", api_key="k", timeout=5)
        with patch("codex_explorer.oracle.litellm_adapter.litellm.completion", return_value=_response("hi")) as mock:
            assert oracle.invoke("sys", "usr") == "hi"
        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [{"role": "system", "content": "sys"}, {"role": "user", "content": "usr"}]
        assert kwargs["api_key"] == "k"
        assert kwargs["timeout"] == 5
        assert "temperature" not in kwargs

    def test_temperature_is_forwarded(self) -> None:
        oracle = LiteLLMOracle("m", temperature=0.0)
        with patch("codex_explorer.oracle.litellm_adapter.litellm.completion", return_value=_response("x")) as mock:
            oracle.invoke("s", "u")
        assert mock.call_args.kwargs["temperature"] == 0.0

    def test_empty_content(self) -> None:
        with patch("codex_explorer.oracle.litellm_adapter.litellm.completion", return_value=_response(None)):
            assert LiteLLMOracle("m").invoke("s", "u") == ""


class TestOracleFromSettings:
    def test_none_without_key(self, settings: Settings) -> None:
        assert oracle_from_settings(settings) is None

    def test_built_with_key(self, make_settings) -> None:
        oracle = oracle_from_settings(make_settings(llm_api_key="sk-test", llm_model="m", llm_timeout=9))
        assert isinstance(oracle, LiteLLMOracle)
        assert oracle.model == "m"
        assert oracle.timeout == 9
