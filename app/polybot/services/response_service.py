# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Service for sending translation replies to Telegram.
"""
from html import escape
from typing import List

from loguru import logger
from telegram import Bot
from telegram.constants import ParseMode

from models import InboundMessage, OutboundMessage, StructuredMessage


def render_structured_html(message: StructuredMessage) -> str:
    parts = [f"<b>{escape(message.title)}</b>"]
    for section in message.sections:
        label, text = escape(section.label), escape(section.text)
        parts.append(f"<b>{label}</b>\n<blockquote>{text}</blockquote>")
    return "\n\n".join(parts)


class TelegramTransport:
    """把出站消息依次回复到触发消息所在的群组，失败只记录日志"""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def _send_message(
        self,
        chat_id: int | str,
        text: str,
        reply_to_message_id: int | None = None,
        parse_mode: str | None = None,
    ) -> bool:
        """优先回复原消息，失败时直接发送到群组"""
        try:
            await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_to_message_id=reply_to_message_id,
                parse_mode=parse_mode,
            )
            return True
        except Exception as reply_error:
            if reply_to_message_id is None:
                logger.error(f"发送消息失败({parse_mode}): {reply_error}")
                return False
            logger.warning(f"回复原消息失败: {reply_error}，尝试发送到群组")

        try:
            await self.bot.send_message(chat_id=chat_id, text=text, parse_mode=parse_mode)
            return True
        except Exception as send_error:
            logger.error(f"发送消息到群组也失败({parse_mode}): {send_error}")
            return False

    async def deliver(self, inbound: InboundMessage, messages: List[OutboundMessage]) -> bool:
        delivered = True
        for message in messages:
            if isinstance(message, StructuredMessage):
                sent = await self._send_message(
                    inbound.group_id,
                    render_structured_html(message),
                    reply_to_message_id=inbound.reply_handle,
                    parse_mode=ParseMode.HTML,
                )
                if not sent:
                    logger.warning("结构化消息发送失败，改发纯文本摘要")
                    sent = await self._send_message(
                        inbound.group_id, message.alt_text, reply_to_message_id=inbound.reply_handle
                    )
            else:
                sent = await self._send_message(
                    inbound.group_id, message.text, reply_to_message_id=inbound.reply_handle
                )
            delivered = delivered and sent

        return delivered
