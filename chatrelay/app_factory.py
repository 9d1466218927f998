from __future__ import annotations

from typing import Any

from telegram.ext import Application, ApplicationBuilder, CallbackQueryHandler, MessageHandler, filters

from chatrelay.chat import ChatService
from chatrelay.config import AppConfig
from chatrelay.dispatcher import Dispatcher
from chatrelay.handlers import handle_callback, handle_error, handle_message
from chatrelay.llm_client import ChatCompletionClient, build_http_client
from chatrelay.llm_executor import LLMExecutor
from chatrelay.runtime import RuntimeContext
from chatrelay.transport import TelegramTransport


def register_handlers(application: Application) -> None:
    application.add_handler(CallbackQueryHandler(handle_callback))
    application.add_handler(MessageHandler(filters.UpdateType.MESSAGE, handle_message))
    application.add_error_handler(handle_error)


def build_runtime(config: AppConfig, bot: Any) -> RuntimeContext:
    transport = TelegramTransport(bot)
    llm_client = ChatCompletionClient(
        build_http_client(config.llm_base_url, config.llm_api_key, config.llm_timeout_sec)
    )
    chat_service = ChatService(
        LLMExecutor(llm_client),
        transport,
        default_model=config.llm_default_model,
        default_temperature=config.llm_default_temperature,
        history_limit=config.llm_history_limit,
        system_prompt=config.llm_system_prompt,
    )
    dispatcher = Dispatcher(transport, config.allowed_user_ids, chat_service)
    return RuntimeContext(
        transport=transport,
        dispatcher=dispatcher,
        chat_service=chat_service,
        llm_client=llm_client,
    )


def build_application(config: AppConfig) -> tuple[Application, RuntimeContext]:
    application = ApplicationBuilder().token(config.telegram_token).concurrent_updates(True).build()
    runtime = build_runtime(config, application.bot)
    application.bot_data.update(runtime.to_bot_data())
    register_handlers(application)
    return application, runtime
