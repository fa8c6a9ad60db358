"""
Sample incident data for DisasterLens.

Seeds the in-memory fallback store with a handful of Baltimore-area
alerts and reports so the dashboard has something to show when no
backend is reachable.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple
from disasterlens.core.models import Alert, Report


def _minutes_ago(now: datetime, minutes: int) -> str:
    ts = now - timedelta(minutes=minutes)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# (id, type, lat, lng, location_text, source, confidence, description, minutes_ago, severity, status)
_ALERT_ROWS = [
    ("1", "fire", 39.2847, -76.8483, "Catonsville, MD", "Emergency Services", 0.95,
     "Structure fire reported on Main Street. Multiple units responding.", 30, "high", "active"),
    ("2", "flood", 39.2904, -76.6122, "Baltimore, MD", "Weather Service", 0.87,
     "Flash flooding in downtown area due to heavy rainfall.", 45, "medium", "active"),
    ("3", "outage", 39.3643, -76.5431, "Towson, MD", "BGE Utility", 0.92,
     "Power outage affecting approximately 2,500 customers.", 15, "medium", "investigating"),
    ("4", "storm", 39.1612, -76.8517, "Ellicott City, MD", "Weather Service", 0.78,
     "Severe thunderstorm warning with potential for damaging winds.", 60, "high", "active"),
    ("5", "shelter", 39.2448, -76.7158, "Arbutus Community Center", "Red Cross", 0.99,
     "Emergency shelter opened for displaced residents.", 90, "medium", "active"),
    ("6", "fire", 39.3915, -76.6107, "Parkville, MD", "Citizen Report", 0.65,
     "Possible brush fire near residential area.", 20, "low", "investigating"),
]

# (id, user_id, text, lat, lng, location_text, status, minutes_ago, alert_type, confidence)
_REPORT_ROWS = [
    ("r1", "user1", "Large fire visible from my window with heavy smoke. Fire trucks are arriving.",
     39.2847, -76.8483, "Catonsville, MD", "approved", 35, "fire", 0.95),
    ("r2", "user2", "Street flooding on Frederick Road. Cars are struggling to pass through.",
     39.2904, -76.6122, "Baltimore, MD", "approved", 50, "flood", 0.87),
    ("r3", "user3", "Power has been out for 20 minutes. Traffic lights are also down.",
     39.3643, -76.5431, "Towson, MD", "pending", 18, "outage", 0.92),
    ("r4", "user4", "Very strong winds and debris flying around. Tree branches falling.",
     39.1612, -76.8517, "Ellicott City, MD", "approved", 65, "storm", 0.78),
]


def sample_incidents(now: datetime = None) -> Tuple[List[Alert], List[Report]]:
    """
    샘플 경보/제보를 생성합니다.

    Args:
        now: 기준 시각 (기본값: 현재 UTC)

    Returns:
        (경보 목록, 제보 목록)
    """
    now = now or datetime.now(timezone.utc)
    alerts = [
        Alert(
            id=aid, type=atype, location_lat=lat, location_lng=lng, location_text=text,
            source=source, confidence_score=conf, description=desc,
            created_at=_minutes_ago(now, ago), severity=sev, status=status,
        )
        for aid, atype, lat, lng, text, source, conf, desc, ago, sev, status in _ALERT_ROWS
    ]
    reports = [
        Report(
            id=rid, user_id=uid, text_report=body, location_lat=lat, location_lng=lng,
            location_text=text, status=status, created_at=_minutes_ago(now, ago),
            alert_type=atype, confidence_score=conf,
        )
        for rid, uid, body, lat, lng, text, status, ago, atype, conf in _REPORT_ROWS
    ]
    return alerts, reports
