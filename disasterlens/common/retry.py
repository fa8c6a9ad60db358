"""
Retry utilities for DisasterLens.

This module provides retry and backoff utilities used by the
hosted store client and the realtime channel client.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

T = TypeVar('T')

def backoff_delay(attempt: int, base: float, max_delay: float) -> float:
    """
    지수 백오프 지연 시간을 계산합니다.

    Args:
        attempt: 재시도 횟수 (0부터 시작)
        base: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)

    Returns:
        min(max_delay, base * 2**attempt)
    """
    attempt = max(0, attempt)
    # 큰 지수에서 float 오버플로 방지
    if attempt >= 64:
        return max_delay
    return min(max_delay, base * (2 ** attempt))

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    지수 백오프와 함께 함수를 재시도합니다.

    Args:
        func: 재시도할 비동기 함수
        max_retries: 최대 재시도 횟수
        base_delay: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)
        jitter: 지터 적용 여부
        retry_on: 재시도 대상 예외 (그 외 예외는 즉시 전파)

    Returns:
        함수 실행 결과

    Raises:
        마지막 시도에서 발생한 예외
    """
    last_exception = None

    for attempt in range(1, max_retries + 2):  # +2 because we try once + max_retries
        try:
            return await func()
        except retry_on as e:
            last_exception = e

            if attempt > max_retries:
                break

            delay = backoff_delay(attempt - 1, base_delay, max_delay)

            # 지터 적용
            if jitter:
                delay = delay * (0.5 + random.random() * 0.5)

            await asyncio.sleep(delay)

    raise last_exception
