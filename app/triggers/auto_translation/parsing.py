# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 解析模型返回的 JSON
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Union

from pydantic import BaseModel, ValidationError, field_validator

CODE_FENCE_PATTERN = re.compile(r"^\s*```[\w-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
OBJECT_START_PATTERN = re.compile(r"\{")


@dataclass(frozen=True)
class Parsed:
    payload: Dict[str, Any]


@dataclass(frozen=True)
class Unparseable:
    raw: str
    reason: str


ParseOutcome = Union[Parsed, Unparseable]


class CombinedTranslationPayload(BaseModel):
    detected_language: str
    translations: Dict[str, Any]

    @field_validator("translations")
    @classmethod
    def translations_not_empty(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("translations is empty")
        return v


def strip_code_fence(raw: str) -> str:
    if match := CODE_FENCE_PATTERN.match(raw):
        return match.group(1).strip()
    return raw.strip()


def extract_first_object(raw: str) -> Dict[str, Any] | None:
    """从任意文本中提取第一个完整的 JSON 对象"""
    decoder = json.JSONDecoder()
    for match in OBJECT_START_PATTERN.finditer(raw):
        try:
            obj, _ = decoder.raw_decode(raw, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            return obj
    return None


def parse_json_object(raw: str) -> ParseOutcome:
    """先去掉 Markdown 代码块直接解析，失败后再尝试提取文本中的第一个 JSON 对象"""
    if not raw or not raw.strip():
        return Unparseable(raw=raw or "", reason="empty response")

    text = strip_code_fence(raw)
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        obj = extract_first_object(text)

    if not isinstance(obj, dict):
        return Unparseable(raw=raw, reason="no JSON object found")
    return Parsed(payload=obj)


def parse_combined_payload(raw: str) -> CombinedTranslationPayload | Unparseable:
    outcome = parse_json_object(raw)
    if isinstance(outcome, Unparseable):
        return outcome
    try:
        return CombinedTranslationPayload.model_validate(outcome.payload)
    except ValidationError as err:
        return Unparseable(raw=raw, reason=f"invalid payload: {err.error_count()} errors")
