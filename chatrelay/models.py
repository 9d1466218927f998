from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class TextMessage:
    user_id: int
    text: str | None
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class CallbackEvent:
    user_id: int
    callback_id: str
    payload: str


InboundEvent = Union[TextMessage, CallbackEvent]


class Command(Enum):
    START = "/start"
    STOP = "/stop"
    MODELS = "/models"
    TEMPERATURE = "/temperature"
    UNKNOWN_SLASH = "unknown_slash"
    PLAIN_TEXT = "plain_text"


COMMAND_PREFIX = "/"
RESERVED_COMMANDS = {
    Command.START.value: Command.START,
    Command.STOP.value: Command.STOP,
    Command.MODELS.value: Command.MODELS,
    Command.TEMPERATURE.value: Command.TEMPERATURE,
}


def classify_text(text: str) -> Command:
    command = RESERVED_COMMANDS.get(text)
    if command is not None:
        return command
    if text.startswith(COMMAND_PREFIX):
        return Command.UNKNOWN_SLASH
    return Command.PLAIN_TEXT


@dataclass(frozen=True)
class ModelSelection:
    name: str


@dataclass(frozen=True)
class TemperatureSelection:
    value: float


@dataclass(frozen=True)
class InvalidTemperature:
    raw: str


@dataclass(frozen=True)
class UnrecognizedPayload:
    raw: str


CallbackPayload = Union[ModelSelection, TemperatureSelection, InvalidTemperature, UnrecognizedPayload]


@dataclass
class UserPreferences:
    model_name: str
    temperature: float


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}
