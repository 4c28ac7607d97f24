from pathlib import Path
from typing import Any, Dict, List
from urllib.request import getproxies

import dotenv
from loguru import logger
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.ext import Application

from models import LanguageCode

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
LOG_DIR = PROJECT_DIR.joinpath("logs")


def parse_language_list(raw: str) -> List[LanguageCode]:
    """解析逗号分隔的语言列表，忽略无法识别的语言代码"""
    languages: List[LanguageCode] = []
    for item in filter(None, (i.strip() for i in raw.split(","))):
        try:
            code = LanguageCode(item)
        except ValueError:
            logger.warning(f"忽略无法识别的语言代码: {item}")
            continue
        if code is not LanguageCode.OTHER and code not in languages:
            languages.append(code)
    return languages


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TELEGRAM_BOT_API_TOKEN: SecretStr = Field(
        default="", description="通过 https://t.me/BotFather 获取机器人的 API_TOKEN"
    )

    GEMINI_API_KEY: SecretStr = Field(default="", description="主翻译服务（Gemini）的 API_KEY")

    GEMINI_MODEL: str = Field(default="gemini-2.5-flash", description="主翻译服务使用的模型")

    DEEPL_API_KEY: SecretStr = Field(default="", description="备用机器翻译服务（DeepL）的 auth_key")

    DEEPL_API_URL: str = Field(
        default="https://api-free.deepl.com/v2/translate", description="DeepL 翻译接口"
    )

    DEFAULT_LANGUAGE_POOL: str = Field(
        default="ja,ko,zh-TW,en", description="默认语言池，检测到的源语言会被排除在目标语言之外"
    )

    LANGUAGE_ROUTES: str = Field(
        default="",
        description="按群组指定语言池，格式: `<group_id>=ja,en,fr,zh-TW;<group_id>=ko,en`",
    )

    default_pool: List[LanguageCode] = Field(default_factory=list)

    routing_table: Dict[str, List[LanguageCode]] = Field(
        default_factory=dict, description="配置 LANGUAGE_ROUTES 后，被清洗到该字典方便使用"
    )

    # 语言检测阈值
    STATISTICAL_MIN_LENGTH: int = Field(
        default=10, description="文本长度低于该值时直接使用字符比例检测"
    )
    HANGUL_RATIO_THRESHOLD: float = Field(default=0.2)
    KANA_RATIO_THRESHOLD: float = Field(default=0.2)
    CJK_RATIO_THRESHOLD: float = Field(default=0.5)
    LATIN_RATIO_THRESHOLD: float = Field(default=0.6)

    # 回复消息的尺寸约束
    SHORT_TRANSLATION_THRESHOLD: int = Field(
        default=500, description="所有译文都不超过该长度时，合并为一条结构化消息"
    )
    SECTION_MAX_LENGTH: int = Field(default=1000, description="结构化消息中单个段落的最大长度")
    MAX_SECTIONS: int = Field(default=10, description="结构化消息最多容纳的段落数")
    ALT_TEXT_MAX_LENGTH: int = Field(default=400, description="结构化消息摘要的最大长度")
    TEXT_CHUNK_LIMIT: int = Field(default=1500, description="长译文分片时每片的最大长度")
    TEXT_MESSAGE_LIMIT: int = Field(default=4096, description="Telegram 单条消息的最大长度")
    MAX_MESSAGES_PER_REPLY: int = Field(default=5, description="一次回复最多发送的消息数")

    HTTP_REQUEST_TIMEOUT: float = Field(
        default=75.0, description="HTTP 请求超时时间（秒），用于 Telegram 与 DeepL 调用"
    )

    def model_post_init(self, context: Any, /) -> None:
        if not self.default_pool:
            self.default_pool = parse_language_list(self.DEFAULT_LANGUAGE_POOL)

        if not self.routing_table and self.LANGUAGE_ROUTES:
            for entry in filter(None, (i.strip() for i in self.LANGUAGE_ROUTES.split(";"))):
                group_id, sep, languages = entry.partition("=")
                if not sep or not group_id.strip():
                    logger.warning(f"解析 LANGUAGE_ROUTES 失败 - {entry}")
                    continue
                if pool := parse_language_list(languages):
                    self.routing_table[group_id.strip()] = pool

        if self.TEXT_CHUNK_LIMIT > self.TEXT_MESSAGE_LIMIT:
            logger.warning("TEXT_CHUNK_LIMIT 超过 TEXT_MESSAGE_LIMIT，已自动调整")
            self.TEXT_CHUNK_LIMIT = self.TEXT_MESSAGE_LIMIT

        if not self.GEMINI_API_KEY.get_secret_value():
            logger.warning("未配置 GEMINI_API_KEY，将只能使用 DeepL 翻译")

    def get_default_application(self) -> Application:
        _base_builder = (
            Application.builder()
            .token(self.TELEGRAM_BOT_API_TOKEN.get_secret_value())
            .concurrent_updates(True)
            .connect_timeout(self.HTTP_REQUEST_TIMEOUT)
            .write_timeout(self.HTTP_REQUEST_TIMEOUT)
            .read_timeout(self.HTTP_REQUEST_TIMEOUT)
        )
        if proxy_url := getproxies().get("http"):
            logger.success(f"使用代理: {proxy_url}")
            application = _base_builder.proxy(proxy_url).get_updates_proxy(proxy_url).build()
        else:
            application = _base_builder.build()

        return application


settings = Settings()  # type: ignore
