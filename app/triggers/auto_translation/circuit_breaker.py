# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译服务熔断状态
"""
from typing import Set

from loguru import logger


class ProviderState:
    """记录已触发配额限制的服务方

    只置位不复位，需要重启进程才会恢复。并发写入是幂等的，无需加锁。
    """

    def __init__(self):
        self._tripped: Set[str] = set()

    def is_tripped(self, provider: str) -> bool:
        return provider in self._tripped

    def trip(self, provider: str) -> None:
        if provider in self._tripped:
            return
        self._tripped.add(provider)
        logger.warning(f"{provider} 配额已耗尽，本次进程内不再调用该服务")


provider_state = ProviderState()
