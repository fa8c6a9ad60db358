"""
SQLite-based incident store for DisasterLens.

This module implements the primary relational store for alerts
and reports on top of aiosqlite.
"""

import aiosqlite
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional
from disasterlens.common.ids import new_id, utc_now_iso
from disasterlens.core.errors import NotFoundError, StoreUnavailableError
from disasterlens.core.models import Alert, AlertCreate, AlertStatus, Report, ReportStatus, Severity
from disasterlens.observability.logging_setup import get_logger

log = get_logger("disasterlens.sqlite")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS alerts (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    type TEXT NOT NULL,
    severity TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'active',
    location_lat REAL NOT NULL,
    location_lng REAL NOT NULL,
    location_text TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    confidence_score REAL NOT NULL DEFAULT 1.0,
    source TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_alerts_created ON alerts(created_at);
CREATE TABLE IF NOT EXISTS reports (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    user_id TEXT NOT NULL,
    text_report TEXT NOT NULL,
    image_url TEXT,
    location_lat REAL NOT NULL,
    location_lng REAL NOT NULL,
    location_text TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'pending',
    severity TEXT,
    alert_type TEXT,
    confidence_score REAL,
    admin_created INTEGER NOT NULL DEFAULT 0,
    pre_approved INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_reports_created ON reports(created_at);
"""

ALERT_COLUMNS = (
    "id", "created_at", "type", "severity", "status", "location_lat", "location_lng",
    "location_text", "description", "confidence_score", "source",
)
REPORT_COLUMNS = (
    "id", "created_at", "user_id", "text_report", "image_url", "location_lat", "location_lng",
    "location_text", "status", "severity", "alert_type", "confidence_score",
    "admin_created", "pre_approved",
)


def _row_to_report(row: aiosqlite.Row) -> Report:
    data = dict(row)
    data["admin_created"] = bool(data["admin_created"])
    data["pre_approved"] = bool(data["pre_approved"])
    return Report(**data)


class SQLiteStore:
    """SQLite 기반 경보/제보 저장소"""

    name = "sqlite"

    def __init__(self, path: str, *, alerts_limit: int = 50, reports_limit: int = 100):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
            alerts_limit: 경보 조회 최대 건수
            reports_limit: 제보 조회 최대 건수
        """
        self.path = path
        self.alerts_limit = alerts_limit
        self.reports_limit = reports_limit
        log.info(f"SQLiteStore 초기화: {path}")

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """연결을 열고 SQLite 오류를 StoreUnavailableError로 변환합니다."""
        try:
            async with aiosqlite.connect(self.path) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as e:
            log.error(f"SQLite 오류: {e}")
            raise StoreUnavailableError(f"sqlite: {e}") from e

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with self._connect() as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteStore 스키마 초기화 완료: {self.path}")

    async def fetch_alerts(self) -> List[Alert]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {', '.join(ALERT_COLUMNS)} FROM alerts ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (self.alerts_limit,)
            )
            rows = await cursor.fetchall()
        return [Alert(**dict(row)) for row in rows]

    async def fetch_reports(self) -> List[Report]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {', '.join(REPORT_COLUMNS)} FROM reports ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (self.reports_limit,)
            )
            rows = await cursor.fetchall()
        return [_row_to_report(row) for row in rows]

    async def get_report(self, report_id: str) -> Report:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {', '.join(REPORT_COLUMNS)} FROM reports WHERE id = ?",
                (report_id,)
            )
            row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("report", report_id)
        return _row_to_report(row)

    async def insert_alert(self, alert: AlertCreate) -> Alert:
        """
        경보를 저장합니다.

        Args:
            alert: 경보 생성 데이터

        Returns:
            저장된 경보
        """
        stored = Alert(id=new_id(), created_at=utc_now_iso(), **alert.model_dump())
        values = stored.model_dump()
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO alerts ({', '.join(ALERT_COLUMNS)}) VALUES ({', '.join('?' * len(ALERT_COLUMNS))})",
                tuple(values[c] for c in ALERT_COLUMNS)
            )
            await db.commit()
        return stored

    async def insert_report(self, report: Report) -> Report:
        """
        제보를 저장합니다.

        Args:
            report: 저장할 제보 (빈 id/created_at은 채워짐)

        Returns:
            저장된 제보
        """
        stored = report.model_copy(update={
            "id": report.id or new_id(),
            "created_at": report.created_at or utc_now_iso(),
        })
        values = stored.model_dump()
        values["admin_created"] = 1 if stored.admin_created else 0
        values["pre_approved"] = 1 if stored.pre_approved else 0
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO reports ({', '.join(REPORT_COLUMNS)}) VALUES ({', '.join('?' * len(REPORT_COLUMNS))})",
                tuple(values[c] for c in REPORT_COLUMNS)
            )
            await db.commit()
        return stored

    async def update_report_status(self, report_id: str, status: ReportStatus,
                                   severity: Optional[Severity] = None) -> Report:
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE reports SET status = ?, severity = ? WHERE id = ?",
                (status, severity, report_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("report", report_id)
        return await self.get_report(report_id)

    async def update_alert_status(self, alert_id: str, status: AlertStatus) -> Alert:
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE alerts SET status = ? WHERE id = ?",
                (status, alert_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("alert", alert_id)
            cursor = await db.execute(
                f"SELECT {', '.join(ALERT_COLUMNS)} FROM alerts WHERE id = ?",
                (alert_id,)
            )
            row = await cursor.fetchone()
        return Alert(**dict(row))

    async def delete_report(self, report_id: str) -> None:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM reports WHERE id = ?", (report_id,))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("report", report_id)

    async def delete_alert(self, alert_id: str) -> None:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM alerts WHERE id = ?", (alert_id,))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError("alert", alert_id)
