"""
Per-subscriber SSE stream for DisasterLens.

Sends the connection acknowledgement and the initial snapshots, then
forwards broadcast payloads with a periodic heartbeat until the client
goes away.
"""

import asyncio
from typing import AsyncIterator, Awaitable, Callable, List
from disasterlens.core.errors import StoreError
from disasterlens.ports.store import StorePort
from disasterlens.observability.logging_setup import get_logger
from .broadcaster import Broadcaster, Subscriber
from .sse import (
    connected_event,
    encode_event,
    heartbeat_event,
    initial_alerts_event,
    initial_reports_event,
)

log = get_logger("disasterlens.realtime")


async def _snapshot(read: Callable[[], Awaitable[list]], what: str, sub_id: str) -> List:
    try:
        return await read()
    except StoreError as e:
        # 스냅샷 실패는 빈 목록으로 대체
        log.warning(f"초기 {what} 조회 실패 ({sub_id}): {e}")
        return []


async def event_stream(broadcaster: Broadcaster,
                       sub: Subscriber,
                       store: StorePort,
                       heartbeat_interval: float = 30.0) -> AsyncIterator[str]:
    """
    구독자 1명의 SSE 프레임 스트림을 생성합니다.

    Args:
        broadcaster: 구독자 레지스트리
        sub: 이미 등록된 구독자
        store: 초기 스냅샷 조회용 저장소
        heartbeat_interval: 하트비트 간격 (초)

    Yields:
        SSE 프레임 문자열
    """
    try:
        yield encode_event(connected_event())

        snapshots = (
            (store.fetch_alerts, "alerts", initial_alerts_event),
            (store.fetch_reports, "reports", initial_reports_event),
        )
        for read, what, make in snapshots:
            if not broadcaster.is_registered(sub):
                return
            items = await _snapshot(read, what, sub.id)
            # 조회 중 등록이 해제될 수 있음
            if not broadcaster.is_registered(sub):
                return
            yield encode_event(make(items))

        loop = asyncio.get_running_loop()
        deadline = loop.time() + heartbeat_interval
        while broadcaster.is_registered(sub):
            remaining = deadline - loop.time()
            if remaining <= 0:
                yield encode_event(heartbeat_event())
                deadline = loop.time() + heartbeat_interval
                continue
            try:
                payload = await asyncio.wait_for(sub.queue.get(), timeout=remaining)
            except asyncio.TimeoutError:
                continue
            yield payload
    finally:
        broadcaster.unsubscribe(sub)
        log.debug(f"스트림 종료: {sub.id}")
