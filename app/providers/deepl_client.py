# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 备用机器翻译服务（DeepL）
"""
from typing import Dict

from httpx import AsyncClient, HTTPError
from loguru import logger

from models import LanguageCode
from providers.errors import ProviderError
from settings import settings

# DeepL 的目标语言代码，不在表中的语言视为不支持
DEEPL_LANGUAGE_CODES: Dict[LanguageCode, str] = {
    LanguageCode.JAPANESE: "JA",
    LanguageCode.KOREAN: "KO",
    LanguageCode.ENGLISH: "EN-US",
    LanguageCode.CHINESE: "ZH-HANT",
    LanguageCode.FRENCH: "FR",
}


class DeepLClient:
    name = "deepl"

    def __init__(
        self,
        auth_key: str = settings.DEEPL_API_KEY.get_secret_value(),
        api_url: str = settings.DEEPL_API_URL,
        client: AsyncClient | None = None,
        language_codes: Dict[LanguageCode, str] | None = None,
    ):
        self._auth_key = auth_key
        self._api_url = api_url
        self._client = client or AsyncClient(timeout=settings.HTTP_REQUEST_TIMEOUT)
        self.language_codes = DEEPL_LANGUAGE_CODES if language_codes is None else language_codes

    def supports(self, language: LanguageCode) -> bool:
        return language in self.language_codes

    async def translate(self, text: str, target: LanguageCode) -> str | None:
        """
        翻译为单一目标语言

        Returns:
            译文；目标语言不受支持时返回 None

        Raises:
            ProviderError: HTTP 错误或响应中没有译文
        """
        target_code = self.language_codes.get(target)
        if not target_code:
            logger.debug(f"DeepL 不支持目标语言: {target.value}")
            return None

        data = {"auth_key": self._auth_key, "text": text, "target_lang": target_code}
        try:
            response = await self._client.post(self._api_url, data=data)
        except HTTPError as err:
            raise ProviderError(self.name, str(err)) from err

        if response.is_error:
            raise ProviderError(
                self.name,
                f"HTTP {response.status_code} {response.text[:200]}",
                response.status_code,
            )

        try:
            translations = response.json().get("translations") or []
            translated = translations[0]["text"]
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as err:
            raise ProviderError(self.name, f"unexpected response: {response.text[:200]}") from err

        return translated

    async def aclose(self):
        await self._client.aclose()
