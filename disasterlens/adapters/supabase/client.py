"""
Supabase (PostgREST) store client for DisasterLens.

This module talks to the hosted Supabase REST endpoint with aiohttp
and implements the StorePort contract on top of it.
"""

import aiohttp
from typing import Any, Dict, List, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError
from disasterlens.common.retry import retry_with_backoff
from disasterlens.core.errors import NotFoundError, StoreUnavailableError
from disasterlens.core.models import Alert, AlertCreate, AlertStatus, Report, ReportStatus, Severity
from disasterlens.observability.logging_setup import get_logger

log = get_logger("disasterlens.supabase")

M = TypeVar("M", bound=BaseModel)


def _row_to_model(model: Type[M], table: str, data: Dict[str, Any]) -> M:
    """
    행을 모델로 검증합니다. NULL 컬럼은 모델 기본값을 따릅니다.

    Raises:
        StoreUnavailableError: 행이 모델 제약을 만족하지 않을 때
    """
    try:
        return model(**{k: v for k, v in data.items() if v is not None})
    except ValidationError as e:
        log.warning(f"Supabase {table} 행 검증 실패 (id={data.get('id')}): {e.error_count()}건")
        raise StoreUnavailableError(f"supabase: invalid {table} row {data.get('id')!r}") from e


def _alert_from_row(row: Dict[str, Any]) -> Alert:
    """alerts 테이블의 latitude/longitude 컬럼을 모델 필드로 변환"""
    data = {k: v for k, v in row.items() if k in Alert.model_fields}
    if row.get("latitude") is not None:
        data["location_lat"] = row["latitude"]
    if row.get("longitude") is not None:
        data["location_lng"] = row["longitude"]
    return _row_to_model(Alert, "alerts", data)


def _report_from_row(row: Dict[str, Any]) -> Report:
    data = {k: v for k, v in row.items() if k in Report.model_fields}
    return _row_to_model(Report, "reports", data)


class SupabaseStore:
    """Supabase REST 기반 경보/제보 저장소"""

    name = "supabase"

    def __init__(self,
                 url: str,
                 key: str,
                 *,
                 timeout_sec: int = 10,
                 max_retries: int = 1,
                 alerts_limit: int = 50,
                 reports_limit: int = 100):
        """
        초기화합니다.

        Args:
            url: Supabase 프로젝트 URL
            key: Supabase API 키
            timeout_sec: 요청 타임아웃 (초)
            max_retries: 연결 실패 시 재시도 횟수
            alerts_limit: 경보 조회 최대 건수
            reports_limit: 제보 조회 최대 건수
        """
        self.base_url = url.rstrip('/') + "/rest/v1"
        self.key = key
        self.timeout_sec = timeout_sec
        self.max_retries = max_retries
        self.alerts_limit = alerts_limit
        self.reports_limit = reports_limit
        self.session: Optional[aiohttp.ClientSession] = None

        log.info(f"Supabase 클라이언트 초기화됨: {url}")

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={
                    "apikey": self.key,
                    "Authorization": f"Bearer {self.key}",
                    "Content-Type": "application/json",
                    "Prefer": "return=representation",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout_sec)
            )
        return self.session

    async def close(self) -> None:
        """HTTP 세션을 닫습니다."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(self, method: str, table: str, *,
                       params: Optional[Dict[str, str]] = None,
                       json: Any = None) -> List[Dict[str, Any]]:
        """
        PostgREST 요청을 수행합니다.

        Args:
            method: HTTP 메서드
            table: 테이블 이름
            params: 쿼리 매개변수
            json: 요청 본문

        Returns:
            응답 행 목록

        Raises:
            StoreUnavailableError: 전송 실패 또는 2xx 이외 응답
        """
        url = f"{self.base_url}/{table}"

        async def _do():
            session = self._ensure_session()
            try:
                async with session.request(method, url, params=params, json=json) as response:
                    if response.status >= 300:
                        body = await response.text()
                        raise StoreUnavailableError(
                            f"supabase {method} {table} -> {response.status}: {body[:200]}"
                        )
                    if response.status == 204:
                        return []
                    data = await response.json()
            except aiohttp.ClientError as e:
                raise StoreUnavailableError(f"supabase {method} {table}: {e}") from e
            if isinstance(data, dict):
                return [data]
            return data or []

        try:
            return await retry_with_backoff(
                _do,
                max_retries=self.max_retries,
                base_delay=0.5,
                max_delay=5.0,
                retry_on=(StoreUnavailableError,),
            )
        except StoreUnavailableError as e:
            log.error(f"Supabase 요청 실패: {e}")
            raise

    async def init(self) -> None:
        # 스키마는 Supabase 측에서 관리
        return None

    async def fetch_alerts(self) -> List[Alert]:
        rows = await self._request("GET", "alerts", params={
            "select": "*",
            "order": "created_at.desc",
            "limit": str(self.alerts_limit),
        })
        return [_alert_from_row(row) for row in rows]

    async def fetch_reports(self) -> List[Report]:
        rows = await self._request("GET", "reports", params={
            "select": "*",
            "order": "created_at.desc",
            "limit": str(self.reports_limit),
        })
        return [_report_from_row(row) for row in rows]

    async def get_report(self, report_id: str) -> Report:
        rows = await self._request("GET", "reports", params={"select": "*", "id": f"eq.{report_id}"})
        if not rows:
            raise NotFoundError("report", report_id)
        return _report_from_row(rows[0])

    async def insert_alert(self, alert: AlertCreate) -> Alert:
        payload = alert.model_dump()
        payload["latitude"] = alert.location_lat
        payload["longitude"] = alert.location_lng
        rows = await self._request("POST", "alerts", json=[payload])
        if not rows:
            raise StoreUnavailableError("supabase insert alerts returned no row")
        return _alert_from_row(rows[0])

    async def insert_report(self, report: Report) -> Report:
        payload = report.model_dump()
        # 빈 id/created_at은 서버 기본값 사용
        for key in ("id", "created_at"):
            if not payload.get(key):
                payload.pop(key, None)
        rows = await self._request("POST", "reports", json=[payload])
        if not rows:
            raise StoreUnavailableError("supabase insert reports returned no row")
        return _report_from_row(rows[0])

    async def update_report_status(self, report_id: str, status: ReportStatus,
                                   severity: Optional[Severity] = None) -> Report:
        rows = await self._request("PATCH", "reports",
                                   params={"id": f"eq.{report_id}"},
                                   json={"status": status, "severity": severity})
        if not rows:
            raise NotFoundError("report", report_id)
        return _report_from_row(rows[0])

    async def update_alert_status(self, alert_id: str, status: AlertStatus) -> Alert:
        rows = await self._request("PATCH", "alerts",
                                   params={"id": f"eq.{alert_id}"},
                                   json={"status": status})
        if not rows:
            raise NotFoundError("alert", alert_id)
        return _alert_from_row(rows[0])

    async def delete_report(self, report_id: str) -> None:
        rows = await self._request("DELETE", "reports", params={"id": f"eq.{report_id}"})
        if not rows:
            raise NotFoundError("report", report_id)

    async def delete_alert(self, alert_id: str) -> None:
        rows = await self._request("DELETE", "alerts", params={"id": f"eq.{alert_id}"})
        if not rows:
            raise NotFoundError("alert", alert_id)
