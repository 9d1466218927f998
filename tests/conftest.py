"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from typing import Any

import pytest

from chatrelay.dispatcher import Dispatcher

ALLOWED_USER = 1001
STRANGER = 2002


class FakeTransport:
    """Records every outbound call instead of talking to Telegram."""

    def __init__(self) -> None:
        self.messages: list[tuple[int, str]] = []
        self.menus: list[tuple[int, str, Any]] = []
        self.answered: list[str] = []

    async def send_message(self, user_id: int, text: str) -> None:
        self.messages.append((user_id, text))

    async def send_menu(self, user_id: int, prompt: str, reply_markup: Any) -> None:
        self.menus.append((user_id, prompt, reply_markup))

    async def answer_callback(self, callback_id: str) -> None:
        self.answered.append(callback_id)

    @property
    def total_sends(self) -> int:
        return len(self.messages) + len(self.menus)


class RecordingBackend:
    """Chat backend double that only records invocations."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def on_start(self, user_id: int, first_name: str | None, last_name: str | None) -> None:
        self.calls.append(("on_start", (user_id, first_name, last_name)))

    async def on_stop(self, user_id: int) -> None:
        self.calls.append(("on_stop", (user_id,)))

    async def on_message(self, user_id: int, text: str) -> None:
        self.calls.append(("on_message", (user_id, text)))

    async def set_model_name(self, user_id: int, model_name: str) -> None:
        self.calls.append(("set_model_name", (user_id, model_name)))

    async def set_temperature(self, user_id: int, temperature: float) -> None:
        self.calls.append(("set_temperature", (user_id, temperature)))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def dispatcher(transport: FakeTransport, backend: RecordingBackend) -> Dispatcher:
    return Dispatcher(transport, {ALLOWED_USER}, backend)
