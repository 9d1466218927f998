from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chatrelay.chat import ChatService
from chatrelay.dispatcher import Dispatcher
from chatrelay.llm_client import ChatCompletionClient
from chatrelay.transport import TelegramTransport


@dataclass
class RuntimeContext:
    transport: TelegramTransport
    dispatcher: Dispatcher
    chat_service: ChatService
    llm_client: ChatCompletionClient

    def to_bot_data(self) -> dict[str, Any]:
        return {"runtime": self}
