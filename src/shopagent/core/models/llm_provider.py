from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass

from shopagent.core.config import get_float_env, get_int_env, get_str_env
from shopagent.core.errors import LLMUnavailable
from shopagent.core.http import ShopAgentHTTPError

from .chat import ChatMessage
from .llm_openai_compat import OpenAICompatClient


@dataclass
class LLMConfig:
    provider: str
    model: str
    url: str
    api_key: str | None
    timeout_s: float
    temperature: float
    max_tokens: int | None

    @classmethod
    def from_env(cls) -> "LLMConfig":
        api_key = os.getenv("SHOPAGENT_LLM_API_KEY") or os.getenv("OPENAI_API_KEY") or None
        default_provider = "openai" if api_key else "off"
        max_tokens = get_int_env("SHOPAGENT_LLM_MAX_TOKENS", 0)
        return cls(
            provider=get_str_env("SHOPAGENT_LLM_PROVIDER", default_provider).casefold(),
            model=get_str_env("SHOPAGENT_LLM_MODEL", "gpt-4o-mini"),
            url=get_str_env("SHOPAGENT_LLM_URL", "https://api.openai.com/v1/chat/completions"),
            api_key=api_key,
            timeout_s=get_float_env("SHOPAGENT_LLM_TIMEOUT_S", 45.0),
            temperature=get_float_env("SHOPAGENT_LLM_TEMPERATURE", 0.2),
            max_tokens=max_tokens if max_tokens > 0 else None,
        )


class ShopAgentLLM:
    """Chat-completion capability: ordered messages in, free-form text out."""

    def __init__(self, config: LLMConfig | None = None, compat: OpenAICompatClient | None = None) -> None:
        self.config = config or LLMConfig.from_env()
        self._compat = compat or OpenAICompatClient(
            url=self.config.url,
            model=self.config.model,
            api_key=self.config.api_key,
            timeout_s=self.config.timeout_s,
        )
        self.logger = logging.getLogger("shopagent.llm")

    @property
    def enabled(self) -> bool:
        if self.config.provider == "off":
            return False
        if self.config.provider == "openai":
            return bool(self.config.api_key)
        return True

    async def aclose(self) -> None:
        await self._compat.aclose()

    async def complete(self, messages: list[ChatMessage], *, mode: str = "text") -> str:
        if not self.enabled:
            raise LLMUnavailable("Language model is not configured")

        start = time.perf_counter()
        try:
            output = await self._compat.chat_completion(
                messages,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except ShopAgentHTTPError as exc:
            self._log_call(mode, start, ok=False, message_count=len(messages))
            raise LLMUnavailable(f"Language model request failed: {exc}") from exc
        self._log_call(mode, start, ok=True, message_count=len(messages))
        return output

    def _log_call(self, mode: str, start: float, *, ok: bool, message_count: int) -> None:
        self.logger.info(
            "llm_call",
            extra={
                "extra_fields": {
                    "provider": self.config.provider,
                    "model": self.config.model,
                    "mode": mode,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "ok": ok,
                    "message_count": message_count,
                }
            },
        )
