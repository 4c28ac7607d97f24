# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 02:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Tests for chunking and reply formatting
"""
import math
from unittest.mock import patch

import pytest

from models import LanguageCode, StructuredMessage, TextMessage
from polybot.services.message_formatter import (
    FAILURE_MESSAGE,
    FormatterLimits,
    MessageFormatter,
    split_into_chunks,
    split_sentences,
)


class TestSplitIntoChunks:

    @pytest.mark.parametrize("length, limit", [(3000, 1500), (10, 3), (1, 1), (4097, 1000)])
    def test_fixed_slicing_without_boundaries(self, length, limit):
        text = "x" * length
        chunks = split_into_chunks(text, limit)

        assert len(chunks) == math.ceil(length / limit)
        assert all(len(chunk) <= limit for chunk in chunks)
        assert "".join(chunks) == text

    def test_prefers_sentence_boundaries(self):
        chunks = split_into_chunks("Hello. World! Foo", 8)
        assert chunks == ["Hello.", " World!", " Foo"]

    def test_packs_sentences_greedily(self):
        text = "今日は晴れ。明日は雨。明後日は雪。"
        chunks = split_into_chunks(text, 12)
        assert chunks == ["今日は晴れ。明日は雨。", "明後日は雪。"]

    def test_newline_is_a_boundary(self):
        text = "line one\nline two\nline three"
        chunks = split_into_chunks(text, 10)
        assert chunks == ["line one\n", "line two\n", "line three"]
        assert "".join(chunks) == text

    def test_long_sentence_falls_back_to_slicing(self):
        text = "short. " + "y" * 25
        chunks = split_into_chunks(text, 10)
        assert all(len(chunk) <= 10 for chunk in chunks)
        assert "".join(chunks) == text

    def test_short_text_single_chunk(self):
        assert split_into_chunks("hi", 10) == ["hi"]
        assert split_into_chunks("", 10) == []

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            split_into_chunks("abc", 0)

    def test_split_sentences_keeps_all_text(self):
        text = "A? B! C。D\nE"
        assert "".join(split_sentences(text)) == text


class TestMessageFormatter:

    def test_empty_translations_yield_apology(self):
        messages = MessageFormatter().format_translations(LanguageCode.JAPANESE, {}, "こんにちは")
        assert messages == [TextMessage(text=FAILURE_MESSAGE)]

    def test_short_translations_use_structured_message(self):
        translations = {
            LanguageCode.KOREAN: "안녕하세요",
            LanguageCode.CHINESE: "你好",
            LanguageCode.ENGLISH: "Hello",
        }
        messages = MessageFormatter().format_translations(
            LanguageCode.JAPANESE, translations, "こんにちは"
        )

        assert len(messages) == 1
        message = messages[0]
        assert isinstance(message, StructuredMessage)
        assert message.title == "🌍 Translation"
        assert [s.label for s in message.sections] == ["🇰🇷 한국어", "🇹🇼 中文", "🇺🇸 English"]
        assert [s.text for s in message.sections] == ["안녕하세요", "你好", "Hello"]
        assert message.alt_text.startswith("多言語翻訳結果")

    def test_structured_sections_and_alt_text_are_truncated(self):
        limits = FormatterLimits(short_threshold=100, section_max_length=10, alt_text_max_length=20)
        translations = {LanguageCode.ENGLISH: "a" * 50, LanguageCode.KOREAN: "b" * 50}
        message = MessageFormatter(limits).format_translations(
            LanguageCode.JAPANESE, translations, "x"
        )[0]

        assert all(len(s.text) <= 10 for s in message.sections)
        assert len(message.alt_text) <= 20

    def test_structured_sections_are_bounded(self):
        limits = FormatterLimits(max_sections=2)
        translations = {
            LanguageCode.KOREAN: "a",
            LanguageCode.CHINESE: "b",
            LanguageCode.ENGLISH: "c",
        }
        message = MessageFormatter(limits).format_translations(
            LanguageCode.JAPANESE, translations, "x"
        )[0]
        assert len(message.sections) == 2

    def test_structured_failure_falls_back_to_flat_text(self):
        formatter = MessageFormatter()
        translations = {LanguageCode.ENGLISH: "Hello", LanguageCode.KOREAN: "안녕"}
        with patch.object(formatter, "build_structured_message", side_effect=ValueError("bad")):
            messages = formatter.format_translations(LanguageCode.JAPANESE, translations, "やあ")

        assert len(messages) == 1
        assert isinstance(messages[0], TextMessage)
        assert "🇺🇸 English\nHello" in messages[0].text
        assert "🇰🇷 한국어\n안녕" in messages[0].text

    def test_long_translation_uses_per_language_chunks(self):
        translations = {LanguageCode.ENGLISH: "z" * 3000, LanguageCode.KOREAN: "안녕"}
        messages = MessageFormatter(FormatterLimits(chunk_limit=1500)).format_translations(
            LanguageCode.JAPANESE, translations, "長い文章"
        )

        assert all(isinstance(m, TextMessage) for m in messages)
        assert [m.text[:20] for m in messages[:2]] == [
            "🇺🇸 English (1/2): zz",
            "🇺🇸 English (2/2): zz",
        ]
        assert messages[2].text == "🇰🇷 한국어: 안녕"

        body = "".join(m.text.split(": ", 1)[1] for m in messages[:2])
        assert body == "z" * 3000

    def test_chunked_messages_respect_message_limit(self):
        limits = FormatterLimits(chunk_limit=100, message_limit=100, short_threshold=10)
        messages = MessageFormatter(limits).format_translations(
            LanguageCode.JAPANESE, {LanguageCode.ENGLISH: "w" * 250}, "x"
        )
        assert all(len(m.text) <= 100 for m in messages)

    def test_message_count_is_capped(self):
        limits = FormatterLimits(chunk_limit=100, max_messages=2)
        translations = {LanguageCode.ENGLISH: "q" * 1000}
        messages = MessageFormatter(limits).format_translations(
            LanguageCode.JAPANESE, translations, "x"
        )

        assert len(messages) == 2
        assert messages[0].text.startswith("🇺🇸 English (1/10): ")

    def test_structured_message_over_message_limit_uses_per_language_messages(self):
        translations = {
            LanguageCode.JAPANESE: "あ" * 80,
            LanguageCode.KOREAN: "가" * 80,
            LanguageCode.CHINESE: "中" * 80,
            LanguageCode.ENGLISH: "e" * 80,
            LanguageCode.FRENCH: "f" * 80,
        }
        limits = FormatterLimits(short_threshold=100, message_limit=300)
        messages = MessageFormatter(limits).format_translations(
            LanguageCode.OTHER, translations, "x"
        )

        assert len(messages) == 5
        assert all(isinstance(m, TextMessage) for m in messages)
        assert messages[3].text == "🇺🇸 English: " + "e" * 80

        roomy = FormatterLimits(short_threshold=100, message_limit=4096)
        messages = MessageFormatter(roomy).format_translations(
            LanguageCode.OTHER, translations, "x"
        )
        assert len(messages) == 1
        assert isinstance(messages[0], StructuredMessage)

    def test_html_escaping_counts_toward_structured_length(self):
        # 60 ampersands render as 300 characters once escaped
        translations = {LanguageCode.ENGLISH: "&" * 60}
        limits = FormatterLimits(short_threshold=100, message_limit=200)
        messages = MessageFormatter(limits).format_translations(
            LanguageCode.JAPANESE, translations, "x"
        )

        assert messages == [TextMessage(text="🇺🇸 English: " + "&" * 60)]
