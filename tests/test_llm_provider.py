from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from shopagent.core.errors import LLMUnavailable
from shopagent.core.http import build_http_client
from shopagent.core.models.chat import ChatMessage
from shopagent.core.models.llm_openai_compat import OpenAICompatClient
from shopagent.core.models.llm_provider import LLMConfig, ShopAgentLLM


def test_config_defaults_to_off_without_api_key() -> None:
    config = LLMConfig.from_env()

    assert config.provider == "off"
    assert config.model == "gpt-4o-mini"
    assert config.temperature == 0.2
    assert ShopAgentLLM(config=config).enabled is False


def test_api_key_turns_the_openai_provider_on(monkeypatch) -> None:
    monkeypatch.delenv("SHOPAGENT_LLM_PROVIDER", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-live")

    llm = ShopAgentLLM()

    assert llm.config.provider == "openai"
    assert llm.config.api_key == "sk-live"
    assert llm.enabled is True


def test_complete_refuses_when_disabled() -> None:
    with pytest.raises(LLMUnavailable) as excinfo:
        asyncio.run(ShopAgentLLM().complete([ChatMessage.user("hi")]))

    assert excinfo.value.status == 503


def _compat(handler) -> OpenAICompatClient:
    client = build_http_client(transport=httpx.MockTransport(handler))
    return OpenAICompatClient(url="http://llm.local/v1/chat/completions", model="m", api_key="sk-1", client=client)


def _config() -> LLMConfig:
    return LLMConfig(
        provider="openai", model="m", url="http://llm.local/v1/chat/completions", api_key="sk-1",
        timeout_s=1.0, temperature=0.3, max_tokens=None,
    )


def test_chat_completion_posts_messages_with_bearer_auth() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "hello there"}}]})

    llm = ShopAgentLLM(config=_config(), compat=_compat(handler))

    output = asyncio.run(llm.complete([ChatMessage.system("be brief"), ChatMessage.user("hi")]))

    assert output == "hello there"
    assert seen["auth"] == "Bearer sk-1"
    assert seen["body"]["model"] == "m"
    assert seen["body"]["temperature"] == 0.3
    assert seen["body"]["messages"] == [{"role": "system", "content": "be brief"}, {"role": "user", "content": "hi"}]


def test_upstream_failure_becomes_llm_unavailable() -> None:
    llm = ShopAgentLLM(config=_config(), compat=_compat(lambda request: httpx.Response(500)))

    with pytest.raises(LLMUnavailable):
        asyncio.run(llm.complete([ChatMessage.user("hi")]))
