"""
Incident store port interface.

This module defines the protocol every persistence collaborator
(primary database, hosted backend, in-memory fallback) implements.
"""

from typing import List, Optional, Protocol
from disasterlens.core.models import Alert, AlertCreate, AlertStatus, Report, ReportStatus, Severity

class StorePort(Protocol):
    """경보/제보 저장소 포트 인터페이스

    구현체는 백엔드에 접근할 수 없으면 StoreUnavailableError,
    ID가 없으면 NotFoundError를 발생시킵니다.
    """

    name: str

    async def init(self) -> None:
        """저장소를 초기화합니다."""
        ...

    async def fetch_alerts(self) -> List[Alert]:
        """경보 목록을 최신순으로 조회합니다."""
        ...

    async def fetch_reports(self) -> List[Report]:
        """제보 목록을 최신순으로 조회합니다."""
        ...

    async def get_report(self, report_id: str) -> Report:
        """
        제보 1건을 조회합니다.

        Args:
            report_id: 제보 ID
        """
        ...

    async def insert_alert(self, alert: AlertCreate) -> Alert:
        """
        경보를 저장합니다.

        Args:
            alert: 경보 생성 데이터

        Returns:
            ID와 생성 시각이 채워진 경보
        """
        ...

    async def insert_report(self, report: Report) -> Report:
        """
        제보를 저장합니다. 빈 id/created_at은 저장소가 채웁니다.

        Args:
            report: 저장할 제보

        Returns:
            저장된 제보
        """
        ...

    async def update_report_status(self, report_id: str, status: ReportStatus,
                                   severity: Optional[Severity] = None) -> Report:
        """
        제보 상태와 심각도를 변경합니다.

        Args:
            report_id: 제보 ID
            status: 새 상태
            severity: 새 심각도 (승인이 아니면 None으로 저장)
        """
        ...

    async def update_alert_status(self, alert_id: str, status: AlertStatus) -> Alert:
        """경보 상태를 변경합니다."""
        ...

    async def delete_report(self, report_id: str) -> None:
        """제보를 삭제합니다."""
        ...

    async def delete_alert(self, alert_id: str) -> None:
        """경보를 삭제합니다."""
        ...
