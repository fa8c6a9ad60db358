"""
Ordered store chain for DisasterLens.

Wraps several store adapters (hosted backend, SQLite, memory) behind the
StorePort contract. Reads merge every reachable source, writes land on
the first source that accepts them.
"""

from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar
from disasterlens.core.errors import NotFoundError, StoreUnavailableError
from disasterlens.core.models import Alert, AlertCreate, AlertStatus, Report, ReportStatus, Severity
from disasterlens.observability import metrics
from disasterlens.observability.logging_setup import get_logger
from disasterlens.ports.store import StorePort

log = get_logger("disasterlens.store")

T = TypeVar("T")


def _merge_newest_first(groups: List[list]) -> list:
    """앞선 소스의 항목이 같은 ID를 이기도록 병합하고 최신순 정렬"""
    seen: Dict[str, object] = {}
    for items in groups:
        for item in items:
            if item.id not in seen:
                seen[item.id] = item
    merged = list(seen.values())
    merged.sort(key=lambda item: item.created_at, reverse=True)
    return merged


class StoreChain:
    """순서가 있는 저장소 체인"""

    name = "chain"

    def __init__(self, sources: Sequence[StorePort], *,
                 alerts_limit: Optional[int] = None, reports_limit: Optional[int] = None):
        """
        초기화합니다.

        Args:
            sources: 우선순위 순서의 저장소 목록
            alerts_limit: 병합 후 경보 최대 개수 (None이면 제한 없음)
            reports_limit: 병합 후 제보 최대 개수 (None이면 제한 없음)
        """
        if not sources:
            raise ValueError("StoreChain requires at least one source")
        self.sources = list(sources)
        self.alerts_limit = alerts_limit
        self.reports_limit = reports_limit
        log.info(f"StoreChain 구성: {[s.name for s in self.sources]}")

    def _skip(self, source: StorePort, operation: str, error: Exception) -> None:
        log.warning(f"{source.name} 사용 불가 ({operation}): {error}")
        metrics.store_fallbacks.labels(source=source.name, operation=operation).inc()

    async def init(self) -> None:
        """모든 소스를 초기화합니다. 전부 실패할 때만 오류를 발생시킵니다."""
        failures = 0
        for source in self.sources:
            try:
                await source.init()
            except StoreUnavailableError as e:
                failures += 1
                self._skip(source, "init", e)
        if failures == len(self.sources):
            raise StoreUnavailableError("no store source could be initialised")

    async def _read_all(self, operation: str, read: Callable[[StorePort], Awaitable[list]]) -> list:
        groups = []
        with metrics.store_seconds.labels(operation=operation).time():
            for source in self.sources:
                try:
                    groups.append(await read(source))
                except StoreUnavailableError as e:
                    self._skip(source, operation, e)
        if not groups:
            raise StoreUnavailableError(f"all store sources unavailable for {operation}")
        return _merge_newest_first(groups)

    async def _write_first(self, operation: str, write: Callable[[StorePort], Awaitable[T]]) -> T:
        with metrics.store_seconds.labels(operation=operation).time():
            for source in self.sources:
                try:
                    return await write(source)
                except StoreUnavailableError as e:
                    self._skip(source, operation, e)
        raise StoreUnavailableError(f"all store sources unavailable for {operation}")

    async def _by_id(self, operation: str, kind: str, entity_id: str,
                     call: Callable[[StorePort], Awaitable[T]]) -> T:
        """ID를 가진 소스를 찾을 때까지 순서대로 시도합니다."""
        answered = False
        with metrics.store_seconds.labels(operation=operation).time():
            for source in self.sources:
                try:
                    return await call(source)
                except NotFoundError:
                    answered = True
                except StoreUnavailableError as e:
                    self._skip(source, operation, e)
        if answered:
            raise NotFoundError(kind, entity_id)
        raise StoreUnavailableError(f"all store sources unavailable for {operation}")

    async def fetch_alerts(self) -> List[Alert]:
        alerts = await self._read_all("fetch_alerts", lambda s: s.fetch_alerts())
        return alerts[:self.alerts_limit]

    async def fetch_reports(self) -> List[Report]:
        reports = await self._read_all("fetch_reports", lambda s: s.fetch_reports())
        return reports[:self.reports_limit]

    async def get_report(self, report_id: str) -> Report:
        return await self._by_id("get_report", "report", report_id,
                                 lambda s: s.get_report(report_id))

    async def insert_alert(self, alert: AlertCreate) -> Alert:
        return await self._write_first("insert_alert", lambda s: s.insert_alert(alert))

    async def insert_report(self, report: Report) -> Report:
        return await self._write_first("insert_report", lambda s: s.insert_report(report))

    async def update_report_status(self, report_id: str, status: ReportStatus,
                                   severity: Optional[Severity] = None) -> Report:
        return await self._by_id("update_report_status", "report", report_id,
                                 lambda s: s.update_report_status(report_id, status, severity))

    async def update_alert_status(self, alert_id: str, status: AlertStatus) -> Alert:
        return await self._by_id("update_alert_status", "alert", alert_id,
                                 lambda s: s.update_alert_status(alert_id, status))

    async def delete_report(self, report_id: str) -> None:
        await self._by_id("delete_report", "report", report_id,
                          lambda s: s.delete_report(report_id))

    async def delete_alert(self, alert_id: str) -> None:
        await self._by_id("delete_alert", "alert", alert_id,
                          lambda s: s.delete_alert(alert_id))
