# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 02:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Tests for the translation provider clients
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs

import httpx
import pytest

from models import LanguageCode
from providers.deepl_client import DeepLClient
from providers.errors import ProviderError, is_quota_error
from providers.gemini_client import GeminiClient

DEEPL_URL = "https://api-free.deepl.com/v2/translate"


def make_deepl(handler, **kwargs) -> DeepLClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DeepLClient(auth_key="test-key", api_url=DEEPL_URL, client=client, **kwargs)


class TestDeepLClient:

    @pytest.mark.asyncio
    async def test_form_encoded_request(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["content_type"] = request.headers["content-type"]
            captured["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"translations": [{"text": "こんにちは"}]})

        deepl = make_deepl(handler)
        translated = await deepl.translate("Hello", LanguageCode.JAPANESE)

        assert translated == "こんにちは"
        assert captured["content_type"] == "application/x-www-form-urlencoded"
        assert captured["form"] == {
            "auth_key": ["test-key"],
            "text": ["Hello"],
            "target_lang": ["JA"],
        }

    @pytest.mark.asyncio
    async def test_chinese_maps_to_traditional(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert parse_qs(request.content.decode())["target_lang"] == ["ZH-HANT"]
            return httpx.Response(200, json={"translations": [{"text": "你好"}]})

        assert await make_deepl(handler).translate("Hello", LanguageCode.CHINESE) == "你好"

    @pytest.mark.asyncio
    async def test_unsupported_language_is_not_called(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("should not be called")

        deepl = make_deepl(handler, language_codes={LanguageCode.JAPANESE: "JA"})

        assert not deepl.supports(LanguageCode.FRENCH)
        assert await deepl.translate("Hello", LanguageCode.FRENCH) is None

    @pytest.mark.asyncio
    async def test_quota_status_raises_quota_error(self):
        deepl = make_deepl(lambda request: httpx.Response(456, text="Quota exceeded"))

        with pytest.raises(ProviderError) as exc_info:
            await deepl.translate("Hello", LanguageCode.KOREAN)

        assert exc_info.value.status_code == 456
        assert is_quota_error(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_translations_raise(self):
        deepl = make_deepl(lambda request: httpx.Response(200, json={"translations": []}))

        with pytest.raises(ProviderError):
            await deepl.translate("Hello", LanguageCode.KOREAN)

    @pytest.mark.asyncio
    async def test_network_error_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await make_deepl(handler).translate("Hello", LanguageCode.KOREAN)

        assert not is_quota_error(exc_info.value)


class TestGeminiClient:

    @pytest.mark.asyncio
    async def test_returns_stripped_text(self):
        client = GeminiClient(api_key="test-key", model="gemini-test")
        generate = AsyncMock(return_value=SimpleNamespace(text="  Hello \n"))

        with patch.object(client._client.aio.models, "generate_content", generate):
            assert await client.generate("prompt", system_instruction="rules") == "Hello"

        kwargs = generate.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "prompt"
        assert kwargs["config"].system_instruction == "rules"

    @pytest.mark.asyncio
    async def test_empty_response_raises(self):
        client = GeminiClient(api_key="test-key")
        generate = AsyncMock(return_value=SimpleNamespace(text=None))

        with patch.object(client._client.aio.models, "generate_content", generate):
            with pytest.raises(ProviderError):
                await client.generate("prompt")

    @pytest.mark.asyncio
    async def test_sdk_errors_are_wrapped(self):
        client = GeminiClient(api_key="test-key")
        generate = AsyncMock(side_effect=RuntimeError("429 RESOURCE_EXHAUSTED"))

        with patch.object(client._client.aio.models, "generate_content", generate):
            with pytest.raises(ProviderError) as exc_info:
                await client.generate("prompt")

        assert is_quota_error(exc_info.value)


class TestIsQuotaError:

    @pytest.mark.parametrize(
        "err",
        [
            ProviderError("gemini", "boom", 429),
            ProviderError("deepl", "boom", 456),
            RuntimeError("RESOURCE_EXHAUSTED"),
            RuntimeError("You exceeded your current quota"),
            RuntimeError("Rate limit reached"),
        ],
    )
    def test_recognized_signatures(self, err):
        assert is_quota_error(err)

    @pytest.mark.parametrize(
        "err", [ProviderError("gemini", "HTTP 500", 500), ValueError("bad json")]
    )
    def test_other_errors(self, err):
        assert not is_quota_error(err)
