# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import json
import signal
import sys

from loguru import logger
from telegram import Update
from telegram.ext import MessageHandler, filters

from polybot.handlers import handle_message
from polybot.task_manager import get_active_tasks_count, wait_for_all_tasks
from settings import settings, LOG_DIR
from triggers.auto_translation import close_translation_resources
from utils import init_log

init_log(
    runtime=LOG_DIR.joinpath("runtime.log"),
    error=LOG_DIR.joinpath("error.log"),
    serialize=LOG_DIR.joinpath("serialize.log"),
)


async def drain_pending_translations(application):
    """退出前等待仍在进行中的翻译任务，再释放服务方连接"""
    if pending := get_active_tasks_count():
        logger.info(f"仍有 {pending} 个翻译任务未完成，等待结束后退出")
        await wait_for_all_tasks(timeout=settings.HTTP_REQUEST_TIMEOUT)
    await close_translation_resources()


def main() -> None:
    """Start the bot."""
    sp = settings.model_dump(mode='json')

    s = json.dumps(sp, indent=2, ensure_ascii=False)
    logger.success(f"Loading settings: {s}")

    if settings.routing_table:
        routes = {k: [i.value for i in v] for k, v in settings.routing_table.items()}
        logger.info(f"Loaded language routes: {routes}")

    application = settings.get_default_application()
    application.post_shutdown = drain_pending_translations

    # Only plain text messages in group chats are translated
    application.add_handler(
        MessageHandler(filters.ChatType.GROUPS & filters.TEXT & ~filters.COMMAND, handle_message)
    )

    # Setting up a graceful shutdown
    def shutdown_handler(signum, frame):
        logger.info("Receiving a shutdown signal, stopping the bot...")
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    application.run_polling(allowed_updates=[Update.MESSAGE])


if __name__ == "__main__":
    main()
