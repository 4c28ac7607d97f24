# -*- coding: utf-8 -*-
"""
Message formatting service for translation replies
"""
import re
from dataclasses import dataclass
from html import escape
from typing import Dict, List

from loguru import logger
from pydantic import ValidationError

from models import (
    LanguageCode,
    MessageSection,
    OutboundMessage,
    StructuredMessage,
    TextMessage,
    get_language_label,
)
from settings import Settings
from utils import truncate_text

TRANSLATION_TITLE = "🌍 Translation"
ALT_TEXT_HEADER = "多言語翻訳結果"
FAILURE_MESSAGE = "翻訳に失敗しました。もう一度お試しください。"

# 句末标点或换行之后切分，切分点保留在前一句末尾
SENTENCE_BOUNDARY_PATTERN = re.compile(r"(?<=[.!?。！？．\n])")

# 每段在渲染后额外占用的标记长度: "\n\n<b></b>\n<blockquote></blockquote>"
SECTION_MARKUP_LENGTH = 35


@dataclass(frozen=True)
class FormatterLimits:
    short_threshold: int = 500
    section_max_length: int = 1000
    max_sections: int = 10
    alt_text_max_length: int = 400
    chunk_limit: int = 1500
    message_limit: int = 4096
    max_messages: int = 5

    @classmethod
    def from_settings(cls, config: Settings) -> "FormatterLimits":
        return cls(
            short_threshold=config.SHORT_TRANSLATION_THRESHOLD,
            section_max_length=config.SECTION_MAX_LENGTH,
            max_sections=config.MAX_SECTIONS,
            alt_text_max_length=config.ALT_TEXT_MAX_LENGTH,
            chunk_limit=config.TEXT_CHUNK_LIMIT,
            message_limit=config.TEXT_MESSAGE_LIMIT,
            max_messages=config.MAX_MESSAGES_PER_REPLY,
        )


def split_sentences(text: str) -> List[str]:
    return [part for part in SENTENCE_BOUNDARY_PATTERN.split(text) if part]


def split_into_chunks(text: str, limit: int) -> List[str]:
    """
    将文本切分为不超过 limit 的有序分片

    优先在句子边界切分，单句超长时按固定长度切分。所有分片按顺序拼接后与原文一致。
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if len(text) <= limit:
        return [text] if text else []

    chunks: List[str] = []
    buffer = ""
    for sentence in split_sentences(text):
        if len(buffer) + len(sentence) <= limit:
            buffer += sentence
            continue

        if buffer:
            chunks.append(buffer)
        while len(sentence) > limit:
            chunks.append(sentence[:limit])
            sentence = sentence[limit:]
        buffer = sentence

    if buffer:
        chunks.append(buffer)
    return chunks


class MessageFormatter:
    """将翻译结果打包为有数量上限的出站消息列表"""

    def __init__(self, limits: FormatterLimits = FormatterLimits()):
        self.limits = limits

    def format_translations(
        self,
        source_language: LanguageCode,
        translations: Dict[LanguageCode, str],
        original_text: str,
    ) -> List[OutboundMessage]:
        if not translations:
            return [TextMessage(text=FAILURE_MESSAGE)]

        if self._fits_short_form(translations):
            messages = [self._build_structured_or_flat(translations)]
        else:
            messages = self._build_per_language(translations)

        if len(messages) > self.limits.max_messages:
            dropped = len(messages) - self.limits.max_messages
            logger.warning(
                f"回复消息超过上限 {self.limits.max_messages} 条，丢弃最后 {dropped} 条 "
                f"(源语言: {source_language.value}, 原文: {original_text[:30]}...)"
            )
            messages = messages[: self.limits.max_messages]

        return messages

    def _fits_short_form(self, translations: Dict[LanguageCode, str]) -> bool:
        """所有译文都足够短，且渲染后的结构化消息不超过单条消息上限"""
        if any(len(text) > self.limits.short_threshold for text in translations.values()):
            return False

        items = list(translations.items())[: self.limits.max_sections]
        rendered = len(f"<b>{escape(TRANSLATION_TITLE)}</b>") + sum(
            len(escape(get_language_label(code)))
            + len(escape(truncate_text(text, self.limits.section_max_length)))
            + SECTION_MARKUP_LENGTH
            for code, text in items
        )
        if rendered > self.limits.message_limit:
            logger.warning(
                f"结构化消息渲染后 {rendered} 字符，超过上限 {self.limits.message_limit}，"
                "改为逐语言发送"
            )
            return False
        return True

    def _build_structured_or_flat(self, translations: Dict[LanguageCode, str]) -> OutboundMessage:
        try:
            return self.build_structured_message(translations)
        except (ValidationError, ValueError, TypeError) as err:
            logger.error(f"构建结构化消息失败，改用纯文本: {err}")
            return self.build_flat_message(translations)

    def build_structured_message(self, translations: Dict[LanguageCode, str]) -> StructuredMessage:
        items = list(translations.items())
        if len(items) > self.limits.max_sections:
            dropped = len(items) - self.limits.max_sections
            logger.warning(f"结构化消息最多 {self.limits.max_sections} 段，丢弃 {dropped} 段")
            items = items[: self.limits.max_sections]

        sections = [
            MessageSection(
                label=get_language_label(code),
                text=truncate_text(text, self.limits.section_max_length),
            )
            for code, text in items
        ]
        summary = "\n".join([ALT_TEXT_HEADER] + [f"{s.label}: {s.text}" for s in sections])

        return StructuredMessage(
            title=TRANSLATION_TITLE,
            sections=sections,
            alt_text=truncate_text(summary, self.limits.alt_text_max_length),
        )

    def build_flat_message(self, translations: Dict[LanguageCode, str]) -> TextMessage:
        lines = [TRANSLATION_TITLE]
        for code, text in translations.items():
            body = truncate_text(text, self.limits.section_max_length)
            lines.append(f"\n{get_language_label(code)}\n{body}")
        return TextMessage(text=truncate_text("\n".join(lines), self.limits.message_limit))

    def _build_per_language(self, translations: Dict[LanguageCode, str]) -> List[OutboundMessage]:
        messages: List[OutboundMessage] = []
        for code, text in translations.items():
            label = get_language_label(code)
            single = f"{label}: {text}"
            if len(single) <= self.limits.chunk_limit:
                messages.append(TextMessage(text=single))
                continue

            chunks = self._chunk(label, text)
            total = len(chunks)
            messages.extend(
                TextMessage(text=f"{label} ({i}/{total}): {chunk}")
                for i, chunk in enumerate(chunks, 1)
            )
        return messages

    def _chunk(self, label: str, text: str) -> List[str]:
        # 预留分片标签的长度，保证加上标签后不超过单条消息上限
        reserved = len(f"{label} (999/999): ")
        limit = max(1, min(self.limits.chunk_limit, self.limits.message_limit - reserved))
        return split_into_chunks(text, limit)
