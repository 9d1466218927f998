from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from chatrelay.models import ChatTurn

COMPLETIONS_PATH = "/chat/completions"


class ChatCompletionError(Exception):
    pass


def build_http_client(base_url: str, api_key: str, timeout_sec: float) -> httpx.AsyncClient:
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout_sec,
        headers=headers,
    )


class ChatCompletionClient:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self._logger = logging.getLogger("llm_client")

    async def complete(self, model: str, temperature: float, messages: Sequence[ChatTurn]) -> str:
        payload = {
            "model": model,
            "temperature": temperature,
            "messages": [turn.to_dict() for turn in messages],
        }
        self._logger.info(
            "LLM request model=%s temperature=%s messages=%s",
            model,
            temperature,
            len(payload["messages"]),
        )
        resp = await self._client.post(COMPLETIONS_PATH, json=payload)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError:
            raise ChatCompletionError("Completion response is not JSON") from None
        return self._extract_content(data)

    @staticmethod
    def _extract_content(data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise ChatCompletionError("Completion response has no choices[0].message.content") from None
        if not isinstance(content, str):
            raise ChatCompletionError("Completion content is not a string")
        return content

    async def aclose(self) -> None:
        await self._client.aclose()
