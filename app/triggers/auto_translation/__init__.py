# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能模块
"""

from .node import (
    EventState,
    MessageTransport,
    close_translation_resources,
    process_translation_event,
    process_translation_batch,
)
from .orchestrator import TranslationOrchestrator, create_orchestrator

__all__ = [
    "EventState",
    "MessageTransport",
    "close_translation_resources",
    "process_translation_event",
    "process_translation_batch",
    "TranslationOrchestrator",
    "create_orchestrator",
]
