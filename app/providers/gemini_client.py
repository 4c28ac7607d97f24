# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 主翻译服务（Gemini）
"""
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger

from providers.errors import ProviderError
from settings import settings


class GeminiClient:
    name = "gemini"

    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY.get_secret_value(),
        model: str = settings.GEMINI_MODEL,
        temperature: float = 0.2,
    ):
        self.model = model
        self.temperature = temperature
        self._client = genai.Client(api_key=api_key)

    async def generate(self, prompt: str, *, system_instruction: str | None = None) -> str:
        """
        单轮生成

        Args:
            prompt: 用户提示词
            system_instruction: 系统指令

        Returns:
            模型返回的原始文本

        Raises:
            ProviderError: 调用失败或模型返回空文本
        """
        config = types.GenerateContentConfig(
            system_instruction=system_instruction, temperature=self.temperature
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except genai_errors.APIError as err:
            raise ProviderError(self.name, f"{err.status} {err.message}", err.code) from err
        except Exception as err:
            raise ProviderError(self.name, str(err)) from err

        text = (response.text or "").strip()
        if not text:
            raise ProviderError(self.name, "empty response")

        logger.debug(f"gemini response: {text[:80]}")
        return text
