from __future__ import annotations

import httpx

from shopagent.core.http import build_http_client, request_json

from .chat import ChatMessage


class OpenAICompatClient:
    def __init__(
        self,
        url: str,
        model: str,
        api_key: str | None = None,
        timeout_s: float = 45.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.model = model
        self.api_key = api_key
        self._client = client or build_http_client(timeout_s=timeout_s)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def chat_completion(self, messages: list[ChatMessage], temperature: float, max_tokens: int | None = None) -> str:
        payload: dict[str, object] = {
            "model": self.model,
            "messages": [message.model_dump() for message in messages],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else None
        data = await request_json(self._client, "POST", self.url, headers=headers, json=payload)
        choices = (data or {}).get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return str(message.get("content") or "")
