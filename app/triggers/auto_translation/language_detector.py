# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:15
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 语言检测模块
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException
from loguru import logger

from models import DetectionResult, DetectionTier, LanguageCode

# 设置随机种子以确保检测结果的一致性
DetectorFactory.seed = 0

MENTION_PATTERN = re.compile(r"@\S+")
URL_PATTERN = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")

HIRAGANA_PATTERN = re.compile(r"[\u3040-\u309F]")
KATAKANA_PATTERN = re.compile(r"[\u30A0-\u30FF\u31F0-\u31FF]")
HANGUL_PATTERN = re.compile(r"[\u1100-\u11FF\u3130-\u318F\uAC00-\uD7AF]")
CJK_PATTERN = re.compile(r"[\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFF]")
LATIN_PATTERN = re.compile(r"[A-Za-z\u00C0-\u024F]")

# langdetect 输出的语言代码映射
STATISTICAL_LANGUAGE_MAPPING: Dict[str, LanguageCode] = {
    "ja": LanguageCode.JAPANESE,
    "ko": LanguageCode.KOREAN,
    "zh-cn": LanguageCode.CHINESE,
    "zh-tw": LanguageCode.CHINESE,
    "en": LanguageCode.ENGLISH,
    "fr": LanguageCode.FRENCH,
}


@dataclass(frozen=True)
class ScriptThresholds:
    hangul: float = 0.2
    kana: float = 0.2
    cjk: float = 0.5
    latin: float = 0.6


@dataclass(frozen=True)
class ScriptRatios:
    hiragana: float
    katakana: float
    hangul: float
    cjk: float
    latin: float


def clean_text_for_detection(text: str) -> str:
    """移除 @提及 和 URL，合并空白

    清理后为空时返回原文，避免检测输入被清空。
    """
    if not text:
        return text

    cleaned = MENTION_PATTERN.sub(" ", text)
    cleaned = URL_PATTERN.sub(" ", cleaned)
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()

    return cleaned or text


def measure_script_ratios(text: str) -> ScriptRatios:
    total = len(text)
    if not total:
        return ScriptRatios(0.0, 0.0, 0.0, 0.0, 0.0)

    def ratio(pattern: re.Pattern) -> float:
        return len(pattern.findall(text)) / total

    return ScriptRatios(
        hiragana=ratio(HIRAGANA_PATTERN),
        katakana=ratio(KATAKANA_PATTERN),
        hangul=ratio(HANGUL_PATTERN),
        cjk=ratio(CJK_PATTERN),
        latin=ratio(LATIN_PATTERN),
    )


def detect_by_script(text: str, thresholds: ScriptThresholds = ScriptThresholds()) -> LanguageCode:
    """根据字符类别占比猜测语言，按优先级判定，先命中者为准"""
    ratios = measure_script_ratios(text)
    kana = ratios.hiragana + ratios.katakana

    if ratios.hangul >= thresholds.hangul:
        return LanguageCode.KOREAN
    # 平假名几乎只出现在日语中，出现一次即可判定
    if ratios.hiragana > 0:
        return LanguageCode.JAPANESE
    if kana >= thresholds.kana:
        return LanguageCode.JAPANESE
    if ratios.cjk >= thresholds.cjk and kana == 0:
        return LanguageCode.CHINESE
    if ratios.latin >= thresholds.latin:
        return LanguageCode.ENGLISH
    return LanguageCode.ENGLISH


def detect_statistically(text: str) -> Optional[LanguageCode]:
    """基于 n-gram 的统计检测，任何异常都视为无结果"""
    try:
        lang_probs = detect_langs(text)
    except LangDetectException as e:
        logger.debug(f"语言检测失败: {e}")
        return None
    except Exception as e:
        logger.warning(f"语言检测异常: {e}")
        return None

    if not lang_probs:
        logger.debug("语言检测未返回结果")
        return None

    top = lang_probs[0]
    detected = STATISTICAL_LANGUAGE_MAPPING.get(top.lang)
    if detected is None:
        logger.debug(f"统计检测结果 {top.lang} 不在支持范围内")
    else:
        logger.debug(f"检测到语言: {top.lang} (置信度: {top.prob:.3f}) (原文: {text[:30]}...)")
    return detected


def detect_language(
    text: str,
    *,
    min_length: int = 10,
    thresholds: ScriptThresholds = ScriptThresholds(),
) -> DetectionResult:
    """检测已清理文本的语言

    短文本直接使用字符比例检测；较长文本先走统计检测，未命中时回落到字符比例检测。
    """
    if len(text) >= min_length:
        if detected := detect_statistically(text):
            return DetectionResult(
                source_language=detected, confidence_tier=DetectionTier.STATISTICAL
            )

    return DetectionResult(
        source_language=detect_by_script(text, thresholds),
        confidence_tier=DetectionTier.HEURISTIC,
    )


def get_language_pool(
    group_id: str,
    routes: Mapping[str, Sequence[LanguageCode]],
    default_pool: Sequence[LanguageCode],
) -> List[LanguageCode]:
    """按群组查路由表，未配置的群组使用默认语言池"""
    return list(routes.get(str(group_id), default_pool))


def get_target_languages(
    source_language: LanguageCode, language_pool: Sequence[LanguageCode]
) -> List[LanguageCode]:
    """获取目标语言列表（从语言池中排除检测到的语言）"""
    return [lang for lang in language_pool if lang != source_language]
