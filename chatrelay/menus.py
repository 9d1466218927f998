from __future__ import annotations

from dataclasses import dataclass

from telegram import BotCommand, InlineKeyboardButton, InlineKeyboardMarkup

MODEL_PAYLOAD_PREFIX = "model:"
TEMPERATURE_PAYLOAD_PREFIX = "temp:"

MODELS_PROMPT = "Choose a model:"
TEMPERATURE_PROMPT = "Choose a temperature:"


@dataclass(frozen=True)
class MenuChoice:
    label: str
    value: str


# Order is the ranking shown to users.
MODEL_CHOICES: tuple[MenuChoice, ...] = (
    MenuChoice("GPT 4.1", "gpt-4.1"),
    MenuChoice("GPT 4.1 Mini(L)", "gpt-4.1-mini"),
    MenuChoice("GPT 4o", "gpt-4o"),
    MenuChoice("Deepseek v3 0324", "DeepSeek-V3-0324"),
    MenuChoice("Meta 4 Scout", "Llama-4-Scout-17B-16E-Instruct"),
    MenuChoice("Meta 4 Maverick", "Llama-4-Maverick-17B-128E-Instruct-FP8"),
    MenuChoice("Phi 4 Multimodal(L)", "Phi-4-multimodal-instruct"),
    MenuChoice("MAI-DS-R1", "MAI-DS-R1"),
)

TEMPERATURE_CHOICES: tuple[MenuChoice, ...] = (
    MenuChoice("Most precise 0.1", "0.1"),
    MenuChoice("Precise 0.3", "0.3"),
    MenuChoice("Balanced 0.5", "0.5"),
    MenuChoice("Creative 0.7", "0.7"),
    MenuChoice("Most creative 1.0", "1"),
)

BOT_COMMANDS: tuple[BotCommand, ...] = (
    BotCommand("start", "Start a conversation"),
    BotCommand("stop", "End the current conversation"),
    BotCommand("models", "Choose a model"),
    BotCommand("temperature", "Choose a temperature"),
)


def _single_button_rows(choices: tuple[MenuChoice, ...], prefix: str) -> InlineKeyboardMarkup:
    keyboard = [
        [InlineKeyboardButton(text=choice.label, callback_data=f"{prefix}{choice.value}")]
        for choice in choices
    ]
    return InlineKeyboardMarkup(keyboard)


def build_models_keyboard() -> InlineKeyboardMarkup:
    return _single_button_rows(MODEL_CHOICES, MODEL_PAYLOAD_PREFIX)


def build_temperature_keyboard() -> InlineKeyboardMarkup:
    return _single_button_rows(TEMPERATURE_CHOICES, TEMPERATURE_PAYLOAD_PREFIX)
