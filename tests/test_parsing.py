# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 01:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Tests for tolerant parsing of model output
"""
from triggers.auto_translation.parsing import (
    CombinedTranslationPayload,
    Parsed,
    Unparseable,
    extract_first_object,
    parse_combined_payload,
    parse_json_object,
    strip_code_fence,
)


class TestStripCodeFence:

    def test_json_fence(self):
        raw = '```json\n{"ja": "やあ"}\n```'
        assert strip_code_fence(raw) == '{"ja": "やあ"}'

    def test_bare_fence(self):
        raw = '```\n{"ja": "やあ"}\n```\n'
        assert strip_code_fence(raw) == '{"ja": "やあ"}'

    def test_no_fence(self):
        assert strip_code_fence('  {"a": 1} ') == '{"a": 1}'


class TestParseJsonObject:

    def test_direct_parse(self):
        assert parse_json_object('{"en": "Hi"}') == Parsed(payload={"en": "Hi"})

    def test_fenced_parse(self):
        outcome = parse_json_object('```json\n{"en": "Hi"}\n```')
        assert outcome == Parsed(payload={"en": "Hi"})

    def test_extracts_object_from_chatter(self):
        raw = 'Sure! Here you go: {"en": "a {brace} inside", "ko": "안녕"} Hope it helps.'
        outcome = parse_json_object(raw)
        assert outcome == Parsed(payload={"en": "a {brace} inside", "ko": "안녕"})

    def test_skips_broken_candidates(self):
        assert extract_first_object('{oops} then {"ja": "はい"}') == {"ja": "はい"}

    def test_unparseable(self):
        assert isinstance(parse_json_object("I cannot translate this."), Unparseable)
        assert isinstance(parse_json_object(""), Unparseable)
        assert isinstance(parse_json_object('["not", "an", "object"]'), Unparseable)


class TestParseCombinedPayload:

    def test_valid_payload(self):
        raw = '```json\n{"detected_language": "ja", "translations": {"en": "Hello"}}\n```'
        payload = parse_combined_payload(raw)

        assert isinstance(payload, CombinedTranslationPayload)
        assert payload.detected_language == "ja"
        assert payload.translations == {"en": "Hello"}

    def test_missing_field(self):
        assert isinstance(parse_combined_payload('{"translations": {"en": "x"}}'), Unparseable)

    def test_empty_translations(self):
        raw = '{"detected_language": "en", "translations": {}}'
        assert isinstance(parse_combined_payload(raw), Unparseable)
