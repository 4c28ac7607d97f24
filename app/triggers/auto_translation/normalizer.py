# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 语言代码标准化
"""

from typing import Any, Dict, Mapping, Optional

from loguru import logger

from models import LanguageCode, TranslationResult

CHINESE_ALIASES = {"zh", "cmn", "zho", "chi", "chinese", "mandarin"}

LANGUAGE_ALIASES: Dict[str, LanguageCode] = {
    "ja": LanguageCode.JAPANESE,
    "jpn": LanguageCode.JAPANESE,
    "japanese": LanguageCode.JAPANESE,
    "ko": LanguageCode.KOREAN,
    "kor": LanguageCode.KOREAN,
    "korean": LanguageCode.KOREAN,
    "en": LanguageCode.ENGLISH,
    "eng": LanguageCode.ENGLISH,
    "english": LanguageCode.ENGLISH,
    "fr": LanguageCode.FRENCH,
    "fra": LanguageCode.FRENCH,
    "fre": LanguageCode.FRENCH,
    "french": LanguageCode.FRENCH,
}


def normalize_language_code(raw: Any) -> Optional[LanguageCode]:
    """将服务方返回的语言标签映射为内部语言代码

    所有中文变体（zh-Hans、zh-CN、zh-Hant-HK 等）统一为 zh-TW。无法识别时返回 None。
    """
    if isinstance(raw, LanguageCode):
        return raw
    if not isinstance(raw, str):
        return None

    tag = raw.strip().replace("_", "-").lower()
    if not tag:
        return None

    primary = tag.split("-", 1)[0]
    if primary in CHINESE_ALIASES:
        return LanguageCode.CHINESE
    if tag == LanguageCode.OTHER.value:
        return LanguageCode.OTHER
    return LANGUAGE_ALIASES.get(primary)


def normalize_translations(raw: Mapping[Any, Any]) -> Dict[LanguageCode, str]:
    """标准化译文字典的键

    多个键折叠为同一语言时保留较短的译文。
    """
    translations: Dict[LanguageCode, str] = {}
    for raw_key, value in raw.items():
        if not isinstance(value, str) or not value.strip():
            continue

        code = normalize_language_code(raw_key)
        if code is None or code is LanguageCode.OTHER:
            logger.debug(f"丢弃无法识别的译文语言: {raw_key}")
            continue

        if code in translations and len(translations[code]) <= len(value):
            continue
        translations[code] = value

    return translations


def normalize_result(source_language: Any, translations: Mapping[Any, Any]) -> TranslationResult:
    """标准化源语言和译文，并移除与源语言相同的译文"""
    source = normalize_language_code(source_language) or LanguageCode.OTHER
    normalized = normalize_translations(translations)

    if normalized.pop(source, None) is not None:
        logger.debug(f"移除与源语言相同的译文: {source.value}")

    return TranslationResult(source_language=source, translations=normalized)
