"""Tests for the chat service behind the dispatcher."""

from __future__ import annotations

import json

import httpx
import pytest

from chatrelay.chat import FAILURE_TEXT, STOPPED_TEXT, ChatService
from chatrelay.llm_client import ChatCompletionClient
from chatrelay.llm_executor import LLMExecutor
from chatrelay.models import ChatTurn
from tests.conftest import FakeTransport

USER = 7


class FakeLLM:
    """Completion endpoint double recording the request bodies it receives."""

    def __init__(self, replies: list[httpx.Response] | None = None) -> None:
        self.requests: list[dict] = []
        self._replies = replies

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self._replies:
            return self._replies.pop(0)
        answer = f"echo: {body['messages'][-1]['content']}"
        return httpx.Response(200, json={"choices": [{"message": {"content": answer}}]})


def _service(llm: FakeLLM, sender: FakeTransport, **kwargs) -> ChatService:
    http_client = httpx.AsyncClient(base_url="http://llm.test", transport=httpx.MockTransport(llm))
    executor = LLMExecutor(ChatCompletionClient(http_client), retry_delay_sec=0)
    options = {"default_model": "gpt-4o", "default_temperature": 0.7}
    options.update(kwargs)
    return ChatService(executor, sender, **options)


@pytest.mark.asyncio
async def test_message_round_trip_uses_preferences() -> None:
    llm, sender = FakeLLM(), FakeTransport()
    service = _service(llm, sender)

    await service.set_model_name(USER, "MAI-DS-R1")
    await service.set_temperature(USER, 0.3)
    await service.on_message(USER, "hello")

    assert llm.requests[0]["model"] == "MAI-DS-R1"
    assert llm.requests[0]["temperature"] == pytest.approx(0.3)
    assert sender.messages == [(USER, "echo: hello")]
    assert service.history(USER) == [
        ChatTurn(role="user", content="hello"),
        ChatTurn(role="assistant", content="echo: hello"),
    ]


@pytest.mark.asyncio
async def test_history_is_sent_with_system_prompt() -> None:
    llm, sender = FakeLLM(), FakeTransport()
    service = _service(llm, sender, system_prompt="Be brief.")

    await service.on_message(USER, "one")
    await service.on_message(USER, "two")

    assert [m["role"] for m in llm.requests[1]["messages"]] == ["system", "user", "assistant", "user"]
    assert llm.requests[1]["messages"][0]["content"] == "Be brief."


@pytest.mark.asyncio
async def test_history_is_trimmed() -> None:
    llm, sender = FakeLLM(), FakeTransport()
    service = _service(llm, sender, history_limit=2)

    await service.on_message(USER, "one")
    await service.on_message(USER, "two")

    assert [turn.content for turn in service.history(USER)] == ["two", "echo: two"]


@pytest.mark.asyncio
async def test_stop_clears_history_but_keeps_preferences() -> None:
    llm, sender = FakeLLM(), FakeTransport()
    service = _service(llm, sender)

    await service.set_model_name(USER, "gpt-4.1")
    await service.on_message(USER, "hello")
    await service.on_stop(USER)

    assert service.history(USER) == []
    assert service.preferences(USER).model_name == "gpt-4.1"
    assert sender.messages[-1] == (USER, STOPPED_TEXT)


@pytest.mark.asyncio
async def test_start_resets_and_greets_by_name() -> None:
    llm, sender = FakeLLM(), FakeTransport()
    service = _service(llm, sender)

    await service.on_message(USER, "hello")
    await service.on_start(USER, "Ada", "Lovelace")

    assert service.history(USER) == []
    assert "Ada Lovelace" in sender.messages[-1][1]


@pytest.mark.asyncio
async def test_start_without_name() -> None:
    llm, sender = FakeLLM(), FakeTransport()
    service = _service(llm, sender)

    await service.on_start(USER, None, None)

    assert sender.messages == [(USER, "Hello! Send me a message to start chatting.")]


@pytest.mark.asyncio
async def test_completion_failure_sends_apology_and_rolls_back() -> None:
    llm = FakeLLM(replies=[httpx.Response(400, json={"error": "bad request"})])
    sender = FakeTransport()
    service = _service(llm, sender)

    await service.on_message(USER, "hello")

    assert sender.messages == [(USER, FAILURE_TEXT)]
    assert service.history(USER) == []


@pytest.mark.asyncio
async def test_non_json_reply_sends_apology_and_rolls_back() -> None:
    llm = FakeLLM(replies=[httpx.Response(200, text="<html>gateway</html>")])
    sender = FakeTransport()
    service = _service(llm, sender)

    await service.on_message(USER, "hello")

    assert sender.messages == [(USER, FAILURE_TEXT)]
    assert service.history(USER) == []


@pytest.mark.asyncio
async def test_long_reply_is_split() -> None:
    long_reply = "a" * 5000
    llm = FakeLLM(replies=[httpx.Response(200, json={"choices": [{"message": {"content": long_reply}}]})])
    sender = FakeTransport()
    service = _service(llm, sender)

    await service.on_message(USER, "write a lot")

    assert [len(text) for _, text in sender.messages] == [4096, 904]


def test_default_preferences() -> None:
    service = _service(FakeLLM(), FakeTransport(), default_model="gpt-4.1-mini", default_temperature=0.5)

    prefs = service.preferences(USER)

    assert prefs.model_name == "gpt-4.1-mini"
    assert prefs.temperature == pytest.approx(0.5)
