from __future__ import annotations

import asyncio
import logging

import httpx

from chatrelay.llm_client import ChatCompletionError
from chatrelay.llm_executor import LLMExecutor
from chatrelay.models import ChatTurn, UserPreferences
from chatrelay.transport import MessageSender
from chatrelay.utils import display_name, split_message

GREETING_TEXT = "Hello, {name}! Send me a message to start chatting."
GREETING_ANONYMOUS_TEXT = "Hello! Send me a message to start chatting."
STOPPED_TEXT = "This conversation has ended. Send a new message to start another one."
FAILURE_TEXT = "Sorry, the model did not answer. Please try again later."


class ChatService:
    """Per-user conversation state and the calls to the completion backend.

    Preferences survive ``/stop``; conversation history does not. History
    lives in memory only and is capped at ``history_limit`` turns.
    """

    def __init__(
        self,
        executor: LLMExecutor,
        sender: MessageSender,
        *,
        default_model: str,
        default_temperature: float,
        history_limit: int = 20,
        system_prompt: str = "",
    ) -> None:
        self._executor = executor
        self._sender = sender
        self._default_model = default_model
        self._default_temperature = default_temperature
        self._history_limit = max(history_limit, 1)
        self._system_prompt = system_prompt
        self._preferences: dict[int, UserPreferences] = {}
        self._history: dict[int, list[ChatTurn]] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._logger = logging.getLogger("chat")

    def preferences(self, user_id: int) -> UserPreferences:
        prefs = self._preferences.get(user_id)
        if prefs is None:
            prefs = UserPreferences(model_name=self._default_model, temperature=self._default_temperature)
            self._preferences[user_id] = prefs
        return prefs

    def history(self, user_id: int) -> list[ChatTurn]:
        return list(self._history.get(user_id, []))

    async def on_start(self, user_id: int, first_name: str | None, last_name: str | None) -> None:
        async with self._lock(user_id):
            self._history.pop(user_id, None)
        name = display_name(first_name, last_name)
        self._logger.info("Conversation started user_id=%s", user_id)
        text = GREETING_TEXT.format(name=name) if name else GREETING_ANONYMOUS_TEXT
        await self._sender.send_message(user_id, text)

    async def on_stop(self, user_id: int) -> None:
        async with self._lock(user_id):
            self._history.pop(user_id, None)
        self._logger.info("Conversation stopped user_id=%s", user_id)
        await self._sender.send_message(user_id, STOPPED_TEXT)

    async def on_message(self, user_id: int, text: str) -> None:
        async with self._lock(user_id):
            prefs = self.preferences(user_id)
            history = self._history.setdefault(user_id, [])
            history.append(ChatTurn(role="user", content=text))
            try:
                reply = await self._executor.complete_with_retries(
                    prefs.model_name,
                    prefs.temperature,
                    self._build_messages(history),
                )
            except (httpx.HTTPError, ChatCompletionError):
                self._logger.exception("Completion failed user_id=%s model=%s", user_id, prefs.model_name)
                history.pop()
                await self._sender.send_message(user_id, FAILURE_TEXT)
                return
            history.append(ChatTurn(role="assistant", content=reply))
            self._trim(user_id)
        for chunk in split_message(reply):
            await self._sender.send_message(user_id, chunk)

    async def set_model_name(self, user_id: int, model_name: str) -> None:
        self.preferences(user_id).model_name = model_name
        self._logger.info("Model set user_id=%s model=%s", user_id, model_name)

    async def set_temperature(self, user_id: int, temperature: float) -> None:
        self.preferences(user_id).temperature = temperature
        self._logger.info("Temperature set user_id=%s temperature=%s", user_id, temperature)

    def _build_messages(self, history: list[ChatTurn]) -> list[ChatTurn]:
        if not self._system_prompt:
            return list(history)
        return [ChatTurn(role="system", content=self._system_prompt), *history]

    def _trim(self, user_id: int) -> None:
        history = self._history.get(user_id)
        if history and len(history) > self._history_limit:
            del history[: len(history) - self._history_limit]

    def _lock(self, user_id: int) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock
