# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译降级链中的各级策略
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from loguru import logger

from models import DetectionTier, LanguageCode, TranslationResult
from polybot.prompts import (
    TRANSLATION_SYSTEM_INSTRUCTION,
    DETECT_AND_TRANSLATE_PROMPT_TEMPLATE,
    BATCH_TRANSLATION_PROMPT_TEMPLATE,
    SINGLE_TRANSLATION_PROMPT_TEMPLATE,
)
from providers.errors import is_quota_error
from triggers.auto_translation.circuit_breaker import ProviderState
from triggers.auto_translation.normalizer import normalize_result
from triggers.auto_translation.parsing import Unparseable, parse_combined_payload, parse_json_object

PROMPT_LANGUAGE_NAMES: Dict[LanguageCode, str] = {
    LanguageCode.JAPANESE: "Japanese (ja)",
    LanguageCode.KOREAN: "Korean (ko)",
    LanguageCode.ENGLISH: "English (en)",
    LanguageCode.FRENCH: "French (fr)",
    LanguageCode.CHINESE: "Traditional Chinese as used in Taiwan (zh-TW)",
}


class PrimaryProvider(Protocol):
    name: str

    async def generate(self, prompt: str, *, system_instruction: str | None = None) -> str: ...


class SecondaryProvider(Protocol):
    name: str

    def supports(self, language: LanguageCode) -> bool: ...

    async def translate(self, text: str, target: LanguageCode) -> str | None: ...


@dataclass
class TranslationJob:
    text: str
    detection_text: str
    group_id: str
    language_pool: List[LanguageCode]
    source_language: LanguageCode | None = None
    detection_tier: DetectionTier | None = None
    targets: List[LanguageCode] = field(default_factory=list)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _only(result: TranslationResult, allowed: List[LanguageCode]) -> TranslationResult:
    translations = {k: v for k, v in result.translations.items() if k in allowed}
    return TranslationResult(
        source_language=result.source_language,
        translations=translations,
        detection_tier=result.detection_tier,
    )


class TranslationStrategy(ABC):
    name: str = "strategy"

    requires_detection: bool = True
    """
    为 True 时，编排器会在调用前完成本地语言检测并填充 job.targets
    """

    def __init__(self, state: ProviderState):
        self.state = state

    @abstractmethod
    async def attempt(self, job: TranslationJob) -> Optional[TranslationResult]:
        """返回 None 表示本级没有可用结果，交由下一级处理"""

    def _record_failure(self, provider: str, err: BaseException) -> None:
        logger.error(f"[{self.name}] {provider} 调用失败: {err}")
        if is_quota_error(err):
            self.state.trip(provider)


class DetectAndTranslateStrategy(TranslationStrategy):
    """一次往返完成检测与翻译，不受熔断约束"""

    name = "detect_and_translate"
    requires_detection = False

    def __init__(self, primary: PrimaryProvider | None, state: ProviderState):
        super().__init__(state)
        self.primary = primary

    async def attempt(self, job: TranslationJob) -> Optional[TranslationResult]:
        if self.primary is None:
            return None

        prompt = DETECT_AND_TRANSLATE_PROMPT_TEMPLATE.format(
            allowed_languages=", ".join(lang.value for lang in job.language_pool),
            source_text=_quote(job.text),
        )
        try:
            raw = await self.primary.generate(
                prompt, system_instruction=TRANSLATION_SYSTEM_INSTRUCTION
            )
        except Exception as err:
            self._record_failure(self.primary.name, err)
            return None

        payload = parse_combined_payload(raw)
        if isinstance(payload, Unparseable):
            logger.warning(f"[{self.name}] 无法解析模型输出: {payload.reason}")
            return None

        result = normalize_result(payload.detected_language, payload.translations)
        result.detection_tier = DetectionTier.MODEL_REPORTED
        return _only(result, job.language_pool)


class BatchTranslateStrategy(TranslationStrategy):
    name = "batch_translate"

    def __init__(self, primary: PrimaryProvider | None, state: ProviderState):
        super().__init__(state)
        self.primary = primary

    async def attempt(self, job: TranslationJob) -> Optional[TranslationResult]:
        if self.primary is None:
            return None
        if self.state.is_tripped(self.primary.name):
            logger.debug(f"[{self.name}] {self.primary.name} 已熔断，跳过批量翻译")
            return None

        prompt = BATCH_TRANSLATION_PROMPT_TEMPLATE.format(
            target_languages=", ".join(lang.value for lang in job.targets),
            source_text=_quote(job.text),
        )
        try:
            raw = await self.primary.generate(
                prompt, system_instruction=TRANSLATION_SYSTEM_INSTRUCTION
            )
        except Exception as err:
            self._record_failure(self.primary.name, err)
            return None

        outcome = parse_json_object(raw)
        if isinstance(outcome, Unparseable):
            logger.warning(f"[{self.name}] 无法解析模型输出: {outcome.reason}")
            return None

        result = normalize_result(job.source_language, outcome.payload)
        return _only(result, job.targets)


class PerLanguageStrategy(TranslationStrategy):
    """逐语言翻译，主服务失败或已熔断时改用备用机器翻译"""

    name = "per_language"

    def __init__(
        self,
        primary: PrimaryProvider | None,
        secondary: SecondaryProvider | None,
        state: ProviderState,
    ):
        super().__init__(state)
        self.primary = primary
        self.secondary = secondary

    async def attempt(self, job: TranslationJob) -> Optional[TranslationResult]:
        translations: Dict[LanguageCode, str] = {}
        for target in job.targets:
            translated = await self._translate_with_primary(job.text, target)
            if not translated:
                translated = await self._translate_with_secondary(job.text, target)
            if translated:
                translations[target] = translated

        result = normalize_result(job.source_language, translations)
        return _only(result, job.targets)

    async def _translate_with_primary(self, text: str, target: LanguageCode) -> str | None:
        if self.primary is None or self.state.is_tripped(self.primary.name):
            return None

        prompt = SINGLE_TRANSLATION_PROMPT_TEMPLATE.format(
            target_language=PROMPT_LANGUAGE_NAMES.get(target, target.value),
            source_text=_quote(text),
        )
        try:
            translated = await self.primary.generate(
                prompt, system_instruction=TRANSLATION_SYSTEM_INSTRUCTION
            )
        except Exception as err:
            self._record_failure(self.primary.name, err)
            return None
        return translated.strip() or None

    async def _translate_with_secondary(self, text: str, target: LanguageCode) -> str | None:
        if self.secondary is None or self.state.is_tripped(self.secondary.name):
            return None
        if not self.secondary.supports(target):
            logger.debug(f"[{self.name}] {self.secondary.name} 不支持 {target.value}，跳过")
            return None

        try:
            translated = await self.secondary.translate(text, target)
        except Exception as err:
            self._record_failure(self.secondary.name, err)
            return None
        return translated.strip() if translated else None
