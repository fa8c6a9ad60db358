"""
Report aggregation functions for DisasterLens.

This module contains pure functions that summarize a batch of reports
and render ticker messages for official alerts.
"""

from collections import Counter
from typing import Sequence

from .classifier import SEVERITY_LABELS, TYPE_EMOJIS
from .models import Alert, Report, Severity, SummaryResult

NO_REPORTS_SUMMARY = "No reports to analyze"


def risk_level_for(count: int) -> Severity:
    """제보 건수 기준 위험도"""
    if count > 10:
        return "critical"
    if count > 5:
        return "high"
    if count > 2:
        return "medium"
    return "low"


def summarize(reports: Sequence[Report]) -> SummaryResult:
    """
    여러 제보를 요약합니다.

    Args:
        reports: 제보 목록

    Returns:
        요약 결과
    """
    if not reports:
        return SummaryResult(summary=NO_REPORTS_SUMMARY, key_points=[], risk_level="low")

    total = len(reports)
    # Counter.most_common은 동점일 때 먼저 나온 유형을 유지
    type_counts = Counter(r.alert_type for r in reports if r.alert_type)
    most_common = type_counts.most_common(1)[0] if type_counts else None
    locations = [r.location_text for r in reports]
    risk_level = risk_level_for(total)

    if most_common:
        more = "..." if len(locations) > 3 else ""
        summary = (
            f"{total} reports received, primarily {most_common[0]} incidents "
            f"({most_common[1]} reports). Areas affected: {', '.join(locations[:3])}{more}."
        )
    else:
        summary = f"{total} diverse reports received from multiple locations."

    key_points = [
        f"Total reports: {total}",
        f"Most affected areas: {', '.join(locations[:2])}",
        f"Primary incident type: {most_common[0] if most_common else 'Mixed'}",
        f"Risk assessment: {risk_level.upper()}",
    ]

    return SummaryResult(summary=summary, key_points=key_points, risk_level=risk_level)


def generate_alert_message(alert: Alert) -> str:
    """티커용 경보 메시지를 생성합니다."""
    pct = int(alert.confidence_score * 100 + 0.5)
    return (
        f"{TYPE_EMOJIS[alert.type]} {SEVERITY_LABELS[alert.severity]}: "
        f"{alert.description} - {alert.location_text} ({pct}% confidence)"
    )
