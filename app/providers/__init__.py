# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译服务提供方：Gemini（主）与 DeepL（备）
"""

from .deepl_client import DeepLClient, DEEPL_LANGUAGE_CODES
from .errors import ProviderError, is_quota_error
from .gemini_client import GeminiClient

__all__ = ["DeepLClient", "DEEPL_LANGUAGE_CODES", "GeminiClient", "ProviderError", "is_quota_error"]
