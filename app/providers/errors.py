# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:41
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""

QUOTA_STATUS_CODES = {429, 456}

QUOTA_SIGNATURES = ("resource_exhausted", "quota", "rate limit", "too many requests")


class ProviderError(Exception):
    """翻译服务调用失败（网络异常、HTTP 错误、空响应等）"""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(f"[{provider}] {message}")
        self.provider = provider
        self.status_code = status_code


def is_quota_error(err: BaseException) -> bool:
    """判断异常是否属于配额耗尽或限流"""
    status_code = getattr(err, "status_code", None) or getattr(err, "code", None)
    if status_code in QUOTA_STATUS_CODES:
        return True

    message = str(err).lower()
    return any(signature in message for signature in QUOTA_SIGNATURES)
