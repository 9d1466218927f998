from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from telegram import Update

from chatrelay.app_factory import build_application
from chatrelay.config import load_config, load_environment
from chatrelay.handlers import handle_polling_error
from chatrelay.menus import BOT_COMMANDS


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger("bot")


async def main() -> None:
    env_values = load_environment(Path(__file__).with_name(".env"))
    config = load_config(env_values)
    application, runtime = build_application(config)

    try:
        await application.initialize()
        await runtime.transport.set_commands(BOT_COMMANDS)
        await application.start()
        await application.updater.start_polling(
            allowed_updates=[Update.MESSAGE, Update.CALLBACK_QUERY],
            error_callback=handle_polling_error,
        )
        logger.info(
            "Relay bot started as @%s allowed_users=%s",
            application.bot.username,
            len(config.allowed_user_ids),
        )
        await asyncio.Event().wait()
    finally:
        if application.updater.running:
            await application.updater.stop()
        if application.running:
            await application.stop()
        await application.shutdown()
        await runtime.llm_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
