from __future__ import annotations

import logging

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from chatrelay.models import CallbackEvent, TextMessage
from chatrelay.runtime import RuntimeContext

logger = logging.getLogger("bot")


def _runtime(context: ContextTypes.DEFAULT_TYPE) -> RuntimeContext:
    return context.application.bot_data["runtime"]


def event_from_message(update: Update) -> TextMessage | None:
    message = update.message
    if not message:
        return None
    user = message.from_user
    return TextMessage(
        user_id=message.chat.id,
        text=message.text,
        first_name=user.first_name if user else None,
        last_name=user.last_name if user else None,
    )


def event_from_callback(update: Update) -> CallbackEvent | None:
    query = update.callback_query
    if not query:
        return None
    user_id = query.message.chat.id if query.message else query.from_user.id
    return CallbackEvent(user_id=user_id, callback_id=query.id, payload=query.data or "")


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    event = event_from_message(update)
    if event is None:
        return
    logger.info("message user_id=%s has_text=%s", event.user_id, event.text is not None)
    await _runtime(context).dispatcher.handle_event(event)


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    event = event_from_callback(update)
    if event is None:
        return
    logger.info("callback user_id=%s data=%r", event.user_id, event.payload)
    await _runtime(context).dispatcher.handle_event(event)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Unhandled error while processing update: %r", update, exc_info=context.error)


def handle_polling_error(error: TelegramError) -> None:
    logger.error("Polling error occurred: %s", error, exc_info=error)
