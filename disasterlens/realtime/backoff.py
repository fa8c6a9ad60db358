"""
Reconnect backoff policy for the realtime client.
"""

from disasterlens.common.retry import backoff_delay


class ReconnectBackoff:
    """재연결 지수 백오프 (1s, 2s, 4s, ... 최대 30s)"""

    def __init__(self, base: float = 1.0, max_delay: float = 30.0):
        self.base = base
        self.max_delay = max_delay
        self.attempts = 0

    def next_delay(self) -> float:
        """다음 재연결 대기 시간을 반환하고 시도 횟수를 증가시킵니다."""
        delay = backoff_delay(self.attempts, self.base, self.max_delay)
        self.attempts += 1
        return delay

    def reset(self) -> None:
        self.attempts = 0
