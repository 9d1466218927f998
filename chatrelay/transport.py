from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from telegram import BotCommand, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError


class MessageSender(Protocol):
    async def send_message(self, user_id: int, text: str) -> None: ...


class TelegramTransport:
    """Outbound side of the bridge.

    Every call is best effort: Telegram errors are logged here and never
    reach the caller, so callers get no result and cannot observe failure.
    """

    def __init__(self, bot: Any) -> None:
        self._bot = bot
        self._logger = logging.getLogger("transport")

    async def send_message(self, user_id: int, text: str) -> None:
        await self._send(user_id, text, reply_markup=None)

    async def send_menu(self, user_id: int, prompt: str, reply_markup: InlineKeyboardMarkup) -> None:
        await self._send(user_id, prompt, reply_markup=reply_markup)

    async def answer_callback(self, callback_id: str) -> None:
        try:
            await self._bot.answer_callback_query(callback_query_id=callback_id)
        except TelegramError:
            self._logger.exception("Failed to answer callback query id=%s", callback_id)

    async def set_commands(self, commands: Iterable[BotCommand]) -> None:
        try:
            await self._bot.set_my_commands(list(commands))
        except TelegramError:
            self._logger.exception("Failed to register bot commands")

    async def _send(self, user_id: int, text: str, reply_markup: InlineKeyboardMarkup | None) -> None:
        try:
            try:
                await self._bot.send_message(
                    chat_id=user_id,
                    text=text,
                    parse_mode=ParseMode.MARKDOWN,
                    reply_markup=reply_markup,
                )
            except BadRequest as exc:
                if not _is_markup_error(exc):
                    raise
                self._logger.warning("Markdown rejected for user_id=%s, resending as plain text", user_id)
                await self._bot.send_message(chat_id=user_id, text=text, reply_markup=reply_markup)
        except TelegramError:
            self._logger.exception("Failed to send message to user_id=%s", user_id)


def _is_markup_error(exc: BadRequest) -> bool:
    return "can't parse entities" in str(exc).lower()
