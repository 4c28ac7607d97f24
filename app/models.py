# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/8 12:34
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""

from enum import Enum
from typing import Dict, List, Union, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict


class LanguageCode(str, Enum):
    JAPANESE = "ja"
    KOREAN = "ko"
    ENGLISH = "en"
    FRENCH = "fr"
    CHINESE = "zh-TW"
    """
    所有中文变体（简体、繁体、地区变体）统一折叠为台湾繁体中文
    """

    OTHER = "other"
    """
    无法识别或不在支持范围内的语言
    """


LANGUAGE_LABELS: Dict[LanguageCode, str] = {
    LanguageCode.JAPANESE: "🇯🇵 日本語",
    LanguageCode.KOREAN: "🇰🇷 한국어",
    LanguageCode.CHINESE: "🇹🇼 中文",
    LanguageCode.ENGLISH: "🇺🇸 English",
    LanguageCode.FRENCH: "🇫🇷 Français",
}


def get_language_label(code: LanguageCode) -> str:
    return LANGUAGE_LABELS.get(code, code.value)


class InboundMessage(BaseModel):
    """一次入站事件，处理完毕即丢弃"""

    model_config = ConfigDict(frozen=True)

    text: str
    sender_id: str
    group_id: str
    reply_handle: int | None = Field(default=None, description="被回复消息的 message_id")


class DetectionTier(str, Enum):
    HEURISTIC = "heuristic"
    STATISTICAL = "statistical"
    MODEL_REPORTED = "modelReported"


class DetectionResult(BaseModel):
    source_language: LanguageCode
    confidence_tier: DetectionTier


class TranslationResult(BaseModel):
    source_language: LanguageCode = LanguageCode.OTHER
    translations: Dict[LanguageCode, str] = Field(default_factory=dict)
    detection_tier: Optional[DetectionTier] = Field(
        default=None, description="源语言的判定来源：模型自报或本地检测"
    )

    @property
    def is_empty(self) -> bool:
        return not self.translations


class TextMessage(BaseModel):
    type: Literal["text"] = "text"
    text: str


class MessageSection(BaseModel):
    label: str
    text: str


class StructuredMessage(BaseModel):
    type: Literal["structured"] = "structured"
    title: str
    sections: List[MessageSection] = Field(default_factory=list)
    alt_text: str = Field(description="结构化消息无法渲染时使用的纯文本摘要")


OutboundMessage = Union[TextMessage, StructuredMessage]
