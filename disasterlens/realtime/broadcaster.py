"""
Realtime subscriber registry for DisasterLens.

The broadcaster holds one bounded queue per connected stream and
pushes every serialised event to all of them without blocking.
"""

import asyncio
import threading
from typing import Dict, List
from disasterlens.common.ids import new_id
from disasterlens.core.models import RealtimeEvent
from disasterlens.observability import metrics
from disasterlens.observability.logging_setup import get_logger
from .sse import encode_event

log = get_logger("disasterlens.realtime")


class SubscriberClosedError(Exception):
    """이미 닫힌 구독자에게 전송"""


class Subscriber:
    """구독자 핸들 (SSE 연결 1개)"""

    def __init__(self, maxsize: int = 100):
        self.id = new_id()
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def send(self, payload: str) -> None:
        """
        페이로드를 비동기 대기 없이 큐에 넣습니다.

        Raises:
            SubscriberClosedError: 닫힌 구독자
            asyncio.QueueFull: 큐가 가득 참
        """
        if self.closed:
            raise SubscriberClosedError(self.id)
        self.queue.put_nowait(payload)

    def close(self) -> None:
        self.closed = True


class Broadcaster:
    """구독자 레지스트리 및 이벤트 팬아웃"""

    def __init__(self, queue_maxsize: int = 100):
        self.queue_maxsize = queue_maxsize
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Subscriber] = {}

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscriber:
        sub = Subscriber(maxsize=self.queue_maxsize)
        with self._lock:
            self._subscribers[sub.id] = sub
            total = len(self._subscribers)
        metrics.subscribers.set(total)
        log.info(f"구독자 등록: {sub.id} (총 {total})")
        return sub

    def unsubscribe(self, sub: Subscriber) -> None:
        """구독자를 제거합니다. 여러 번 호출해도 안전합니다."""
        with self._lock:
            removed = self._subscribers.pop(sub.id, None)
            total = len(self._subscribers)
        sub.close()
        if removed is not None:
            metrics.subscribers.set(total)
            log.info(f"구독자 해제: {sub.id} (총 {total})")

    def is_registered(self, sub: Subscriber) -> bool:
        with self._lock:
            return sub.id in self._subscribers

    def broadcast(self, event: RealtimeEvent) -> int:
        """
        모든 구독자에게 이벤트를 전송합니다.

        실패한 구독자만 제거하고 나머지에는 계속 전송합니다.

        Args:
            event: 전송할 이벤트

        Returns:
            전송에 성공한 구독자 수
        """
        payload = encode_event(event)
        with self._lock:
            snapshot: List[Subscriber] = list(self._subscribers.values())

        delivered = 0
        for sub in snapshot:
            try:
                sub.send(payload)
                delivered += 1
            except (SubscriberClosedError, asyncio.QueueFull) as e:
                log.warning(f"구독자 전송 실패, 제거: {sub.id} ({type(e).__name__})")
                metrics.delivery_failures.inc()
                self.unsubscribe(sub)

        metrics.events_broadcast.labels(type=event.type).inc()
        log.debug(f"이벤트 전송: {event.type} -> {delivered}/{len(snapshot)}")
        return delivered
