"""
Operational statistics for DisasterLens.
"""

from typing import Any, Dict, Optional, Sequence

from .models import SEVERITY_LEVELS, Alert, Report


def _truncate(text: Optional[str], limit: int = 50) -> str:
    return f"{(text or '')[:limit]}..."


def compute_stats(alerts: Sequence[Alert], reports: Sequence[Report]) -> Dict[str, Any]:
    """경보/제보 현황 통계를 계산합니다."""
    return {
        "alerts": {
            "total": len(alerts),
            "active": sum(1 for a in alerts if a.status == "active"),
            "by_severity": {
                level: sum(1 for a in alerts if a.severity == level)
                for level in reversed(SEVERITY_LEVELS)
            },
        },
        "reports": {
            "total": len(reports),
            "pending": sum(1 for r in reports if r.status == "pending"),
            "approved": sum(1 for r in reports if r.status == "approved"),
            "rejected": sum(1 for r in reports if r.status == "rejected"),
        },
        "sample_alerts": [
            {
                "id": a.id,
                "type": a.type,
                "severity": a.severity,
                "status": a.status,
                "description": _truncate(a.description),
            }
            for a in alerts[:2]
        ],
        "sample_reports": [
            {
                "id": r.id,
                "status": r.status,
                "alert_type": r.alert_type,
                "text_report": _truncate(r.text_report),
            }
            for r in reports[:2]
        ],
    }
