# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : The group message handler feeding the auto translation pipeline.
"""
from loguru import logger
from telegram import Message, Update, User
from telegram.constants import ChatType
from telegram.ext import ContextTypes

from models import InboundMessage
from polybot.services.response_service import TelegramTransport
from polybot.task_manager import non_blocking_handler
from triggers.auto_translation import process_translation_event

GROUP_CHAT_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)


def is_real_bot(user: User | None) -> bool:
    """检测是否为真正的机器人用户

    匿名管理员和频道消息同样带有 is_bot 标记，但用户名不以 bot 结尾，这类消息仍需翻译。
    """
    if not user or not user.is_bot:
        return False

    if user.username:
        return user.username.lower().endswith("bot")

    if user.id < 0:
        return False

    first_name = (user.first_name or "").lower()
    if any(keyword in first_name for keyword in ["anonymous", "admin", "group", "channel"]):
        return False

    return True


def to_inbound_message(message: Message) -> InboundMessage | None:
    """把 Telegram 消息转换为入站事件，不需要翻译时返回 None"""
    if not message or message.chat.type not in GROUP_CHAT_TYPES:
        return None

    text = (message.text or "").strip()
    if not text:
        return None

    if text.startswith("/"):
        logger.debug("[自动翻译] 跳过：命令消息")
        return None

    if is_real_bot(message.from_user):
        logger.debug("[自动翻译] 跳过：识别为真正的机器人")
        return None

    sender = message.from_user or message.sender_chat
    return InboundMessage(
        text=text,
        sender_id=str(sender.id) if sender else "",
        group_id=str(message.chat.id),
        reply_handle=message.message_id,
    )


@non_blocking_handler("handle_message")
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    inbound = to_inbound_message(update.effective_message)
    if inbound is None:
        return

    logger.info(f"[自动翻译] 开始处理消息: {inbound.text[:50]}...")
    await process_translation_event(inbound, TelegramTransport(context.bot))
