"""
Emergency detection for DisasterLens.

This module decides whether the current set of alerts and reports
constitutes an emergency, and tracks when a new emergency begins.
"""

from typing import List, Sequence, Tuple

from pydantic import BaseModel, Field

from .models import Alert, Report

EMERGENCY_SEVERITIES = ("high", "critical")


class EmergencyItems(BaseModel):
    """긴급 상황 항목"""
    alerts: List[Alert] = Field(default_factory=list)
    reports: List[Report] = Field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.alerts or self.reports)

    def key(self) -> str:
        ids = sorted([a.id for a in self.alerts] + [r.id for r in self.reports])
        return f"{len(self.alerts)}-{len(self.reports)}-{','.join(ids)}"


def find_emergency_items(alerts: Sequence[Alert], reports: Sequence[Report]) -> EmergencyItems:
    """활성 상태의 high/critical 경보와 승인된 high/critical 제보를 찾습니다."""
    return EmergencyItems(
        alerts=[a for a in alerts if a.status == "active" and a.severity in EMERGENCY_SEVERITIES],
        reports=[r for r in reports if r.status == "approved" and r.severity in EMERGENCY_SEVERITIES],
    )


class EmergencyMonitor:
    """긴급 상황 변화 추적기"""

    def __init__(self):
        self.is_emergency = False
        self._last_key = ""

    def check(self, alerts: Sequence[Alert], reports: Sequence[Report]) -> Tuple[bool, bool]:
        """
        긴급 상황 여부를 평가합니다.

        Args:
            alerts: 현재 경보 목록
            reports: 현재 제보 목록

        Returns:
            (긴급 상황 여부, 새로운 긴급 상황 여부)
        """
        items = find_emergency_items(alerts, reports)
        if not items.active:
            self.is_emergency = False
            self._last_key = ""
            return False, False

        key = items.key()
        is_new = key != self._last_key
        self.is_emergency = True
        self._last_key = key
        return True, is_new

    def reset(self) -> None:
        self.is_emergency = False
        self._last_key = ""
