"""
Realtime stream client for DisasterLens.

Keeps a local RealtimeState in sync with the server's /api/events
stream, reconnecting with exponential backoff and falling back to the
plain list endpoints when the stream cannot be opened in time.
"""

import asyncio
import aiohttp
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional
from pydantic import ValidationError
from disasterlens.core.emergency import EmergencyItems, EmergencyMonitor, find_emergency_items
from disasterlens.core.models import Alert, Report
from disasterlens.observability.logging_setup import get_logger
from disasterlens.settings import RealtimeConfig
from .backoff import ReconnectBackoff
from .sse import SSEDecoder
from .state import RealtimeState

log = get_logger("disasterlens.realtime.client")


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class RealtimeClient:
    """SSE 스트림 구독 클라이언트"""

    def __init__(self,
                 base_url: str,
                 *,
                 state: Optional[RealtimeState] = None,
                 backoff: Optional[ReconnectBackoff] = None,
                 fallback_grace_sec: float = 3.0,
                 monitor: Optional[EmergencyMonitor] = None,
                 on_emergency: Optional[Callable[[EmergencyItems], None]] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        초기화합니다.

        Args:
            base_url: DisasterLens 서버 URL
            state: 갱신할 로컬 상태 (기본값: 새 RealtimeState)
            backoff: 재연결 백오프 정책
            fallback_grace_sec: API 폴백 조회 전 대기 시간 (초)
            monitor: 긴급 상황 추적기 (on_emergency와 함께 사용)
            on_emergency: 새 긴급 상황 발생 시 호출되는 콜백
            session: 외부 aiohttp 세션 (없으면 직접 생성/종료)
        """
        self.base_url = base_url.rstrip('/')
        self.state = state or RealtimeState()
        self.backoff = backoff or ReconnectBackoff()
        self.fallback_grace_sec = fallback_grace_sec
        self.monitor = monitor if monitor is not None else (EmergencyMonitor() if on_emergency else None)
        self.on_emergency = on_emergency

        self.status = ConnectionState.CONNECTING
        self.connected = False
        self.last_error: Optional[str] = None

        self._session = session
        self._owns_session = session is None
        self._closed = False
        self._reconnect_requested = False
        self._wake = asyncio.Event()
        self._run_task: Optional[asyncio.Task] = None
        self._stream_task: Optional[asyncio.Task] = None
        self._fallback_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, base_url: str, config: RealtimeConfig, **kwargs) -> "RealtimeClient":
        """실시간 설정 섹션의 백오프/폴백 값으로 클라이언트를 생성합니다."""
        return cls(
            base_url,
            backoff=ReconnectBackoff(base=config.backoff_initial_sec, max_delay=config.backoff_max_sec),
            fallback_grace_sec=config.fallback_grace_sec,
            **kwargs,
        )

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=None, sock_connect=10)
            )
            self._owns_session = True
        return self._session

    # ---- 수명 주기 ----

    async def start(self) -> None:
        """스트림 연결과 폴백 타이머를 시작합니다."""
        if self._run_task is not None:
            return
        self._run_task = asyncio.create_task(self._run())
        self._fallback_task = asyncio.create_task(self._fallback_after_grace())
        log.info(f"실시간 클라이언트 시작: {self.base_url}")

    def reconnect(self) -> None:
        """백오프를 초기화하고 즉시 재연결합니다."""
        if self._closed:
            return
        self.backoff.reset()
        self._reconnect_requested = True
        if self._stream_task is not None and not self._stream_task.done():
            self._stream_task.cancel()
        self._wake.set()

    async def close(self) -> None:
        """연결을 종료합니다. CLOSED 상태로 전환되는 유일한 경로입니다."""
        self._closed = True
        self.connected = False
        self.status = ConnectionState.CLOSED
        for task in (self._run_task, self._fallback_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        log.info("실시간 클라이언트 종료")

    # ---- 스트림 ----

    @asynccontextmanager
    async def _open_stream(self) -> AsyncIterator[AsyncIterator[str]]:
        """/api/events 스트림을 열고 줄 단위 이터레이터를 반환합니다."""
        session = self._ensure_session()
        async with session.get(f"{self.base_url}/api/events",
                               headers={"Accept": "text/event-stream"}) as resp:
            resp.raise_for_status()

            async def lines():
                async for raw in resp.content:
                    yield raw.decode("utf-8", errors="replace")

            yield lines()

    def _on_open(self) -> None:
        self.connected = True
        self.status = ConnectionState.CONNECTED
        self.last_error = None
        self.backoff.reset()
        log.info("실시간 연결 수립")

    async def _consume(self) -> None:
        decoder = SSEDecoder()
        async with self._open_stream() as lines:
            self._on_open()
            async for line in lines:
                payload = decoder.feed(line)
                if payload is not None:
                    self._handle_payload(payload)

    def _handle_payload(self, payload: str) -> None:
        if not self.state.apply_payload(payload):
            return
        self._check_emergency()

    def _check_emergency(self) -> None:
        if self.monitor is None:
            return
        is_emergency, is_new = self.monitor.check(self.state.alerts, self.state.reports)
        if is_emergency and is_new and self.on_emergency is not None:
            try:
                self.on_emergency(find_emergency_items(self.state.alerts, self.state.reports))
            except Exception as e:
                log.error(f"긴급 상황 콜백 오류: {e}")

    async def _run(self) -> None:
        while not self._closed:
            self.status = ConnectionState.RECONNECTING if self.backoff.attempts else ConnectionState.CONNECTING
            self._stream_task = asyncio.create_task(self._consume())
            try:
                await self._stream_task
                self.last_error = "stream ended"
            except asyncio.CancelledError:
                if self._closed or not self._reconnect_requested:
                    raise
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                self.last_error = str(e) or type(e).__name__
                log.warning(f"실시간 연결 오류: {self.last_error}")
            finally:
                self._stream_task = None

            self.connected = False
            if self._closed:
                break
            if self._reconnect_requested:
                self._reconnect_requested = False
                self._wake.clear()
                continue

            self.status = ConnectionState.RECONNECTING
            delay = self.backoff.next_delay()
            log.info(f"{delay:.0f}초 후 재연결")
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()
            self._reconnect_requested = False

    # ---- API 폴백 ----

    async def _fetch_json(self, path: str) -> Optional[list]:
        """목록 API를 조회합니다. 2xx 이외 응답이면 None."""
        session = self._ensure_session()
        async with session.get(f"{self.base_url}{path}",
                               timeout=aiohttp.ClientTimeout(total=10)) as resp:
            if resp.status >= 300:
                log.warning(f"폴백 조회 실패: {path} -> {resp.status}")
                return None
            return await resp.json()

    async def load_fallback(self) -> bool:
        """
        /api/alerts, /api/reports를 한 번 조회해 상태를 채웁니다.

        Returns:
            하나 이상 조회에 성공했으면 True
        """
        try:
            alert_rows, report_rows = await asyncio.gather(
                self._fetch_json("/api/alerts"), self._fetch_json("/api/reports")
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error(f"폴백 데이터 조회 오류: {e}")
            return False

        try:
            alerts: Optional[List[Alert]] = (
                [Alert.model_validate(a) for a in alert_rows] if alert_rows is not None else None
            )
            reports: Optional[List[Report]] = (
                [Report.model_validate(r) for r in report_rows] if report_rows is not None else None
            )
        except ValidationError as e:
            log.error(f"폴백 데이터 검증 실패: {e.error_count()}건")
            return False

        if alerts is None and reports is None:
            return False
        if alerts is not None:
            self.state.alerts = alerts
        if reports is not None:
            self.state.reports = reports
        self.state.loading = False
        self._check_emergency()
        log.info(f"폴백 데이터 적재: 경보 {len(self.state.alerts)}건, 제보 {len(self.state.reports)}건")
        return True

    async def _fallback_after_grace(self) -> None:
        await asyncio.sleep(self.fallback_grace_sec)
        if self.connected or not self.state.loading:
            return
        await self.load_fallback()
