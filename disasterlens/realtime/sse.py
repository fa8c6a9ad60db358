"""
Server-Sent Events wire codec for DisasterLens.

Each event travels as a single ``data: <json>\\n\\n`` frame whose JSON
object carries ``type``, ``data`` and ``timestamp``.
"""

import json
from typing import Any, Dict, List, Optional
from disasterlens.common.ids import utc_now_iso
from disasterlens.core.models import Alert, EventType, RealtimeEvent, Report


def make_event(event_type: EventType, data: Optional[Dict[str, Any]] = None) -> RealtimeEvent:
    """현재 시각을 붙여 이벤트를 생성합니다."""
    return RealtimeEvent(type=event_type, data=data or {}, timestamp=utc_now_iso())


def encode_event(event: RealtimeEvent) -> str:
    """이벤트를 SSE 프레임으로 직렬화합니다."""
    payload = json.dumps(event.model_dump(), ensure_ascii=False)
    return f"data: {payload}\n\n"


def connected_event() -> RealtimeEvent:
    return make_event("connected", {"message": "Connected to real-time updates"})


def heartbeat_event() -> RealtimeEvent:
    return make_event("heartbeat")


def initial_alerts_event(alerts: List[Alert]) -> RealtimeEvent:
    return make_event("alert-created", {
        "type": "initial-alerts",
        "alerts": [a.model_dump() for a in alerts],
    })


def initial_reports_event(reports: List[Report]) -> RealtimeEvent:
    return make_event("report-created", {
        "type": "initial-reports",
        "reports": [r.model_dump() for r in reports],
    })


def entity_event(event_type: EventType, entity) -> RealtimeEvent:
    """생성/변경 이벤트 (데이터는 엔티티 전체)"""
    return make_event(event_type, entity.model_dump())


def deleted_event(event_type: EventType, entity_id: str) -> RealtimeEvent:
    return make_event(event_type, {"id": entity_id})


class SSEDecoder:
    """SSE 라인 스트림을 페이로드 문자열로 되돌리는 디코더

    ``data:`` 필드만 해석하며 여러 줄은 ``\\n``으로 합칩니다.
    주석(``:``)과 기타 필드는 무시합니다.
    """

    def __init__(self):
        self._data: List[str] = []

    def feed(self, line: str) -> Optional[str]:
        """
        한 줄을 입력합니다.

        Args:
            line: 줄바꿈 포함/미포함 한 줄

        Returns:
            빈 줄로 이벤트가 완성되면 페이로드, 아니면 None
        """
        line = line.rstrip("\r\n")
        if not line:
            if not self._data:
                return None
            payload = "\n".join(self._data)
            self._data = []
            return payload
        if line.startswith(":"):
            return None
        field, _, value = line.partition(":")
        if field != "data":
            return None
        if value.startswith(" "):
            value = value[1:]
        self._data.append(value)
        return None
