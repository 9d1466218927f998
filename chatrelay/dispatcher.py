from __future__ import annotations

import logging
from typing import AbstractSet, Protocol

from telegram import InlineKeyboardMarkup

from chatrelay.menus import MODELS_PROMPT, TEMPERATURE_PROMPT, build_models_keyboard, build_temperature_keyboard
from chatrelay.models import (
    CallbackEvent,
    Command,
    InboundEvent,
    InvalidTemperature,
    ModelSelection,
    TemperatureSelection,
    TextMessage,
    classify_text,
)
from chatrelay.payloads import parse_callback_payload
from chatrelay.transport import MessageSender

UNAUTHORIZED_TEXT = "Sorry, you are not allowed to use this bot."
TEXT_ONLY_TEXT = "This bot only accepts text messages. Please do not send images, stickers or other files."
INVALID_TEMPERATURE_TEXT = "Invalid temperature value: {raw}"
MODEL_SET_TEXT = "Model switched to: {name}"
TEMPERATURE_SET_TEXT = "Temperature set to: {value:g}"


class Transport(MessageSender, Protocol):
    async def send_menu(self, user_id: int, prompt: str, reply_markup: InlineKeyboardMarkup) -> None: ...

    async def answer_callback(self, callback_id: str) -> None: ...


class ChatBackend(Protocol):
    async def on_start(self, user_id: int, first_name: str | None, last_name: str | None) -> None: ...

    async def on_stop(self, user_id: int) -> None: ...

    async def on_message(self, user_id: int, text: str) -> None: ...

    async def set_model_name(self, user_id: int, model_name: str) -> None: ...

    async def set_temperature(self, user_id: int, temperature: float) -> None: ...


class Dispatcher:
    """Routes inbound events to the chat backend or to a menu reply.

    Text events are checked against the allow-list before anything else.
    Callback events are always acknowledged first so the client stops its
    loading indicator; callbacks from users outside the allow-list are then
    ignored without a reply.
    """

    def __init__(self, transport: Transport, allow_list: AbstractSet[int], backend: ChatBackend) -> None:
        self._transport = transport
        self._allow_list = frozenset(allow_list)
        self._backend = backend
        self._logger = logging.getLogger("dispatcher")

    def is_allowed(self, user_id: int) -> bool:
        return user_id in self._allow_list

    async def handle_event(self, event: InboundEvent) -> None:
        if isinstance(event, TextMessage):
            await self.handle_text(event)
        elif isinstance(event, CallbackEvent):
            await self.handle_callback(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

    async def handle_text(self, message: TextMessage) -> None:
        user_id = message.user_id
        if not self.is_allowed(user_id):
            self._logger.warning("Rejected message from user_id=%s", user_id)
            await self._transport.send_message(user_id, UNAUTHORIZED_TEXT)
            return
        if message.text is None:
            await self._transport.send_message(user_id, TEXT_ONLY_TEXT)
            return

        text = message.text
        command = classify_text(text)
        self._logger.debug("user_id=%s command=%s", user_id, command.name)
        if command is Command.START:
            await self._backend.on_start(user_id, message.first_name, message.last_name)
        elif command is Command.STOP:
            await self._backend.on_stop(user_id)
        elif command is Command.MODELS:
            await self._transport.send_menu(user_id, MODELS_PROMPT, build_models_keyboard())
        elif command is Command.TEMPERATURE:
            await self._transport.send_menu(user_id, TEMPERATURE_PROMPT, build_temperature_keyboard())
        elif command is Command.UNKNOWN_SLASH:
            self._logger.debug("Dropped unknown command from user_id=%s: %r", user_id, text)
        else:
            await self._backend.on_message(user_id, text)

    async def handle_callback(self, event: CallbackEvent) -> None:
        await self._transport.answer_callback(event.callback_id)
        user_id = event.user_id
        if not self.is_allowed(user_id):
            self._logger.warning("Ignored callback from user_id=%s", user_id)
            return

        payload = parse_callback_payload(event.payload)
        if isinstance(payload, ModelSelection):
            await self._backend.set_model_name(user_id, payload.name)
            await self._transport.send_message(user_id, MODEL_SET_TEXT.format(name=payload.name))
        elif isinstance(payload, TemperatureSelection):
            await self._backend.set_temperature(user_id, payload.value)
            await self._transport.send_message(user_id, TEMPERATURE_SET_TEXT.format(value=payload.value))
        elif isinstance(payload, InvalidTemperature):
            self._logger.warning("Invalid temperature payload from user_id=%s: %r", user_id, payload.raw)
            await self._transport.send_message(user_id, INVALID_TEMPERATURE_TEXT.format(raw=payload.raw))
        else:
            self._logger.debug("Unrecognized callback payload from user_id=%s: %r", user_id, payload.raw)
