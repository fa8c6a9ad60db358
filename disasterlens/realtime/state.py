"""
Client-side mirror of alerts and reports for DisasterLens.

Applies realtime events idempotently so that replays and duplicate
deliveries never corrupt the local view.
"""

import json
from typing import Any, Dict, List, Union
from pydantic import ValidationError
from disasterlens.core.models import Alert, Report
from disasterlens.observability.logging_setup import get_logger

log = get_logger("disasterlens.realtime.state")


class RealtimeState:
    """실시간 이벤트로 갱신되는 로컬 경보/제보 상태"""

    def __init__(self):
        self.alerts: List[Alert] = []
        self.reports: List[Report] = []
        self.loading = True

    def load(self, alerts: List[Alert], reports: List[Report]) -> None:
        """전체 목록을 교체합니다 (API 폴백 조회 결과)."""
        self.alerts = list(alerts)
        self.reports = list(reports)
        self.loading = False

    def apply_payload(self, payload: str) -> bool:
        """SSE 페이로드 문자열을 해석해 적용합니다."""
        try:
            event = json.loads(payload)
        except ValueError:
            log.warning(f"잘못된 이벤트 페이로드 무시: {payload[:80]}")
            return False
        return self.apply(event)

    def apply(self, event: Union[Dict[str, Any], Any]) -> bool:
        """
        이벤트 1건을 적용합니다.

        Args:
            event: {"type", "data", "timestamp"} 형태의 이벤트

        Returns:
            상태에 반영했으면 True (하트비트/알 수 없는 유형/잘못된 데이터는 False)
        """
        if not isinstance(event, dict):
            return False
        event_type = event.get("type")
        data = event.get("data")
        if event_type == "heartbeat" or not isinstance(data, dict):
            return False

        try:
            if event_type == "alert-created":
                if data.get("type") == "initial-alerts":
                    self.alerts = [Alert.model_validate(a) for a in data.get("alerts") or []]
                    self.loading = False
                    return True
                return self._prepend(self.alerts, Alert.model_validate(data))
            if event_type == "report-created":
                if data.get("type") == "initial-reports":
                    self.reports = [Report.model_validate(r) for r in data.get("reports") or []]
                    self.loading = False
                    return True
                return self._prepend(self.reports, Report.model_validate(data))
            if event_type == "alert-updated":
                return self._replace(self.alerts, Alert.model_validate(data))
            if event_type == "report-updated":
                return self._replace(self.reports, Report.model_validate(data))
            if event_type == "alert-deleted":
                return self._remove(self.alerts, data.get("id"))
            if event_type == "report-deleted":
                return self._remove(self.reports, data.get("id"))
        except ValidationError as e:
            log.warning(f"이벤트 데이터 검증 실패 ({event_type}): {e.error_count()}건")
            return False

        return False

    @staticmethod
    def _prepend(items: list, entity) -> bool:
        if any(item.id == entity.id for item in items):
            return False
        items.insert(0, entity)
        return True

    @staticmethod
    def _replace(items: list, entity) -> bool:
        for i, item in enumerate(items):
            if item.id == entity.id:
                items[i] = entity
                return True
        return False

    @staticmethod
    def _remove(items: list, entity_id) -> bool:
        for i, item in enumerate(items):
            if item.id == entity_id:
                del items[i]
                return True
        return False
