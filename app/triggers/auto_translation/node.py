# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能的核心业务逻辑
"""
from enum import Enum
from functools import lru_cache
from typing import List, Protocol, Sequence

from loguru import logger

from models import InboundMessage, OutboundMessage
from polybot.services.message_formatter import FormatterLimits, MessageFormatter
from polybot.task_manager import gather_isolated
from settings import settings
from triggers.auto_translation.orchestrator import TranslationOrchestrator, create_orchestrator


class MessageTransport(Protocol):
    async def deliver(self, inbound: InboundMessage, messages: List[OutboundMessage]) -> bool: ...


class EventState(str, Enum):
    """单条消息的处理阶段

    语言检测与译文标准化发生在编排器内部，归入 TRANSLATING 阶段。
    """

    RECEIVED = "received"
    SANITIZED = "sanitized"
    TRANSLATING = "translating"
    FORMATTING = "formatting"
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


def _enter(inbound: InboundMessage, state: EventState) -> EventState:
    logger.debug(f"[自动翻译] group={inbound.group_id} message={inbound.reply_handle} -> {state.value}")
    return state


@lru_cache(maxsize=1)
def get_orchestrator() -> TranslationOrchestrator:
    return create_orchestrator(settings)


@lru_cache(maxsize=1)
def get_formatter() -> MessageFormatter:
    return MessageFormatter(FormatterLimits.from_settings(settings))


async def close_translation_resources() -> None:
    """关闭已创建的编排器持有的网络连接"""
    if get_orchestrator.cache_info().currsize:
        await get_orchestrator().aclose()
        get_orchestrator.cache_clear()


async def process_translation_event(
    inbound: InboundMessage,
    transport: MessageTransport,
    *,
    orchestrator: TranslationOrchestrator | None = None,
    formatter: MessageFormatter | None = None,
) -> EventState:
    """处理一条入站消息：翻译、排版并回复

    全部翻译失败时回复致歉消息。任何异常都在此处消化，不会影响同批次的其他消息。
    """
    orchestrator = orchestrator or get_orchestrator()
    formatter = formatter or get_formatter()

    state = _enter(inbound, EventState.RECEIVED)
    text = inbound.text.strip()
    if not text:
        logger.debug(f"[自动翻译] 跳过空消息: group={inbound.group_id}")
        return EventState.SKIPPED

    state = _enter(inbound, EventState.SANITIZED)
    try:
        state = _enter(inbound, EventState.TRANSLATING)
        result = await orchestrator.translate(text, inbound.group_id)

        state = _enter(inbound, EventState.FORMATTING)
        if result.is_empty:
            logger.warning(f"[自动翻译] 翻译结果为空，回复致歉消息: {text[:30]}...")
        messages = formatter.format_translations(
            result.source_language, result.translations, text
        )

        delivered = await transport.deliver(inbound, messages)
        if not delivered:
            logger.error(f"[自动翻译] 消息投递失败: group={inbound.group_id}")
            return EventState.FAILED

        if result.is_empty:
            return EventState.FAILED

        tier = result.detection_tier.value if result.detection_tier else "unknown"
        logger.info(
            f"已为用户 {inbound.sender_id} 的 {result.source_language.value} 消息执行自动翻译 "
            f"(语言判定: {tier})"
        )
        return EventState.DELIVERED

    except Exception as e:
        logger.exception(f"[自动翻译] 处理失败({state.value}): {e}")
        return EventState.FAILED


async def process_translation_batch(
    events: Sequence[InboundMessage], transport: MessageTransport, **kwargs
) -> List[EventState]:
    """并发处理同一批次的消息，互不阻塞"""
    outcomes = await gather_isolated(
        [process_translation_event(event, transport, **kwargs) for event in events]
    )
    return [
        outcome if isinstance(outcome, EventState) else EventState.FAILED for outcome in outcomes
    ]
