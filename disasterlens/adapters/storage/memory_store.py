"""
In-memory incident store for DisasterLens.

Last-resort fallback used when neither the hosted backend nor the
SQLite database is reachable. Contents live for the process lifetime.
"""

import threading
from typing import Dict, List, Optional
from disasterlens.adapters.storage.sample_data import sample_incidents
from disasterlens.common.ids import new_id, utc_now_iso
from disasterlens.core.errors import NotFoundError
from disasterlens.core.models import Alert, AlertCreate, AlertStatus, Report, ReportStatus, Severity
from disasterlens.observability.logging_setup import get_logger

log = get_logger("disasterlens.memory")


class MemoryStore:
    """메모리 기반 경보/제보 저장소 (폴백용)"""

    name = "memory"

    def __init__(self, *, seed: bool = False, alerts_limit: int = 50, reports_limit: int = 100):
        self.alerts_limit = alerts_limit
        self.reports_limit = reports_limit
        self._lock = threading.Lock()
        # 삽입 순서: 최신 항목이 앞
        self._alerts: Dict[str, Alert] = {}
        self._reports: Dict[str, Report] = {}
        self._order_alerts: List[str] = []
        self._order_reports: List[str] = []
        if seed:
            alerts, reports = sample_incidents()
            for alert in alerts:
                self._alerts[alert.id] = alert
                self._order_alerts.append(alert.id)
            for report in reports:
                self._reports[report.id] = report
                self._order_reports.append(report.id)
            log.info(f"샘플 데이터 적재: 경보 {len(alerts)}건, 제보 {len(reports)}건")

    async def init(self) -> None:
        return None

    async def fetch_alerts(self) -> List[Alert]:
        with self._lock:
            items = [self._alerts[i] for i in self._order_alerts]
        items.sort(key=lambda a: a.created_at, reverse=True)
        return items[:self.alerts_limit]

    async def fetch_reports(self) -> List[Report]:
        with self._lock:
            items = [self._reports[i] for i in self._order_reports]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items[:self.reports_limit]

    async def get_report(self, report_id: str) -> Report:
        with self._lock:
            report = self._reports.get(report_id)
        if report is None:
            raise NotFoundError("report", report_id)
        return report

    async def insert_alert(self, alert: AlertCreate) -> Alert:
        stored = Alert(id=new_id(), created_at=utc_now_iso(), **alert.model_dump())
        with self._lock:
            self._alerts[stored.id] = stored
            self._order_alerts.insert(0, stored.id)
        return stored

    async def insert_report(self, report: Report) -> Report:
        stored = report.model_copy(update={
            "id": report.id or new_id(),
            "created_at": report.created_at or utc_now_iso(),
        })
        with self._lock:
            if stored.id not in self._reports:
                self._order_reports.insert(0, stored.id)
            self._reports[stored.id] = stored
        return stored

    async def update_report_status(self, report_id: str, status: ReportStatus,
                                   severity: Optional[Severity] = None) -> Report:
        with self._lock:
            current = self._reports.get(report_id)
            if current is None:
                raise NotFoundError("report", report_id)
            updated = current.model_copy(update={"status": status, "severity": severity})
            self._reports[report_id] = updated
        return updated

    async def update_alert_status(self, alert_id: str, status: AlertStatus) -> Alert:
        with self._lock:
            current = self._alerts.get(alert_id)
            if current is None:
                raise NotFoundError("alert", alert_id)
            updated = current.model_copy(update={"status": status})
            self._alerts[alert_id] = updated
        return updated

    async def delete_report(self, report_id: str) -> None:
        with self._lock:
            if self._reports.pop(report_id, None) is None:
                raise NotFoundError("report", report_id)
            self._order_reports.remove(report_id)

    async def delete_alert(self, alert_id: str) -> None:
        with self._lock:
            if self._alerts.pop(alert_id, None) is None:
                raise NotFoundError("alert", alert_id)
            self._order_alerts.remove(alert_id)
