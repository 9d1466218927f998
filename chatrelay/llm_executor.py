from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import httpx

from chatrelay.llm_client import ChatCompletionClient, ChatCompletionError
from chatrelay.models import ChatTurn


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response is not None and exc.response.status_code >= 500
    if isinstance(exc, ChatCompletionError):
        return False
    return isinstance(exc, httpx.TransportError)


class LLMExecutor:
    def __init__(self, client: ChatCompletionClient, retry_delay_sec: float = 0.5) -> None:
        self._client = client
        self._retry_delay_sec = retry_delay_sec
        self._logger = logging.getLogger("llm_executor")

    async def complete_with_retries(
        self,
        model: str,
        temperature: float,
        messages: Sequence[ChatTurn],
        retries: int = 2,
    ) -> str:
        attempt = 0
        last_exc: Exception | None = None
        while attempt <= retries:
            try:
                response_text = await self._client.complete(model, temperature, messages)
                self._logger.info("LLM response received model=%s chars=%s", model, len(response_text))
                return response_text
            except (httpx.HTTPError, ChatCompletionError) as exc:
                last_exc = exc
                if not _is_retryable(exc):
                    break
                self._logger.exception("LLM request failed attempt=%s", attempt + 1)
                if attempt == retries:
                    break
                await asyncio.sleep(self._retry_delay_sec * (attempt + 1))
                attempt += 1
        raise last_exc if last_exc else RuntimeError("LLM request failed")
