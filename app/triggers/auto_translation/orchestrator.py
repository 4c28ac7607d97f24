# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译编排：按顺序尝试各级策略，首个有效结果即返回
"""
from typing import List, Mapping, Sequence

from loguru import logger

from models import LanguageCode, TranslationResult
from providers import DeepLClient, GeminiClient
from settings import Settings
from triggers.auto_translation.circuit_breaker import ProviderState, provider_state
from triggers.auto_translation.language_detector import (
    ScriptThresholds,
    clean_text_for_detection,
    detect_language,
    get_language_pool,
    get_target_languages,
)
from triggers.auto_translation.strategies import (
    BatchTranslateStrategy,
    DetectAndTranslateStrategy,
    PerLanguageStrategy,
    TranslationJob,
    TranslationStrategy,
)


class TranslationOrchestrator:
    def __init__(
        self,
        strategies: Sequence[TranslationStrategy],
        *,
        default_pool: Sequence[LanguageCode],
        routes: Mapping[str, Sequence[LanguageCode]] | None = None,
        min_length: int = 10,
        thresholds: ScriptThresholds = ScriptThresholds(),
    ):
        self.strategies: List[TranslationStrategy] = list(strategies)
        self.default_pool = list(default_pool)
        self.routes = dict(routes or {})
        self.min_length = min_length
        self.thresholds = thresholds

    def _detect(self, job: TranslationJob) -> None:
        detection = detect_language(
            job.detection_text, min_length=self.min_length, thresholds=self.thresholds
        )
        job.source_language = detection.source_language
        job.detection_tier = detection.confidence_tier
        job.targets = get_target_languages(detection.source_language, job.language_pool)
        logger.info(
            f"本地检测语言: {detection.source_language.value} "
            f"({detection.confidence_tier.value}) -> {[t.value for t in job.targets]}"
        )

    async def translate(self, text: str, group_id: str) -> TranslationResult:
        """
        将文本翻译为群组语言池中除源语言以外的所有语言

        Returns:
            全部失败时返回空的 translations，不会抛出异常
        """
        job = TranslationJob(
            text=text,
            detection_text=clean_text_for_detection(text),
            group_id=str(group_id),
            language_pool=get_language_pool(group_id, self.routes, self.default_pool),
        )

        for strategy in self.strategies:
            try:
                if strategy.requires_detection and job.source_language is None:
                    self._detect(job)
                if strategy.requires_detection and not job.targets:
                    logger.warning(f"语言池中没有可用的目标语言: {job.language_pool}")
                    break
                result = await strategy.attempt(job)
            except Exception as err:
                logger.exception(f"[{strategy.name}] 未预期的异常: {err}")
                continue

            if result is None:
                logger.warning(f"[{strategy.name}] 无可用结果，降级到下一级")
                continue

            result.translations.pop(result.source_language, None)
            if result.detection_tier is None:
                result.detection_tier = job.detection_tier
            if result.is_empty:
                logger.warning(f"[{strategy.name}] 译文为空，降级到下一级")
                continue

            logger.success(
                f"[{strategy.name}] 翻译完成: {result.source_language.value} -> "
                f"{[k.value for k in result.translations]}"
            )
            return result

        logger.error(f"所有翻译策略均失败: {text[:30]}...")
        return TranslationResult(
            source_language=job.source_language or LanguageCode.OTHER,
            detection_tier=job.detection_tier,
        )

    async def aclose(self) -> None:
        """释放各服务方持有的连接，同一服务方只关闭一次"""
        closed = set()
        for strategy in self.strategies:
            providers = (getattr(strategy, "primary", None), getattr(strategy, "secondary", None))
            for provider in providers:
                if provider is None or id(provider) in closed or not hasattr(provider, "aclose"):
                    continue
                closed.add(id(provider))
                await provider.aclose()
                logger.debug(f"已关闭 {provider.name} 的连接")


def build_strategies(primary, secondary, state: ProviderState) -> List[TranslationStrategy]:
    return [
        DetectAndTranslateStrategy(primary, state),
        BatchTranslateStrategy(primary, state),
        PerLanguageStrategy(primary, secondary, state),
    ]


def create_orchestrator(config: Settings, state: ProviderState = provider_state):
    """根据配置创建编排器，未配置密钥的服务方不会参与降级链"""
    primary = None
    if gemini_key := config.GEMINI_API_KEY.get_secret_value():
        primary = GeminiClient(api_key=gemini_key, model=config.GEMINI_MODEL)

    secondary = None
    if deepl_key := config.DEEPL_API_KEY.get_secret_value():
        secondary = DeepLClient(auth_key=deepl_key, api_url=config.DEEPL_API_URL)

    thresholds = ScriptThresholds(
        hangul=config.HANGUL_RATIO_THRESHOLD,
        kana=config.KANA_RATIO_THRESHOLD,
        cjk=config.CJK_RATIO_THRESHOLD,
        latin=config.LATIN_RATIO_THRESHOLD,
    )
    return TranslationOrchestrator(
        build_strategies(primary, secondary, state),
        default_pool=config.default_pool,
        routes=config.routing_table,
        min_length=config.STATISTICAL_MIN_LENGTH,
        thresholds=thresholds,
    )
