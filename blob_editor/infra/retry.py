from __future__ import annotations

"""
固定间隔的有界重试（最小版本）。

- retries=0 表示只尝试一次
- 间隔固定，不做指数退避
- 用完次数后抛出最后一次的异常（原样，不包装）
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_fixed_delay(
    operation: Callable[[], Awaitable[T]],
    retries: int,
    delay_seconds: float,
    sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
) -> T:
    """
    执行 operation，失败则等待 delay_seconds 后重试，最多重试 retries 次。

    等待用的是 `await sleep(...)`，只挂起当前协程，不阻塞事件循环上的其他请求。
    """
    if retries < 0:
        raise ValueError("retries must be >= 0")
    if delay_seconds < 0:
        raise ValueError("delay_seconds must be >= 0")

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as exc:
            if attempt > retries:
                raise
            logger.warning(f"Attempt {attempt}/{retries + 1} failed: {exc}; retrying in {delay_seconds}s")
        await sleep(delay_seconds)
