"""
emergency / stats 모듈 단위 테스트
"""

from disasterlens.core.emergency import EmergencyMonitor, find_emergency_items
from disasterlens.core.stats import compute_stats


class TestFindEmergencyItems:
    """긴급 항목 탐지 테스트"""

    def test_only_active_high_alerts(self, alert_factory):
        alerts = [
            alert_factory(id="1", severity="critical", status="active"),
            alert_factory(id="2", severity="high", status="resolved"),
            alert_factory(id="3", severity="medium", status="active"),
        ]

        items = find_emergency_items(alerts, [])

        assert [a.id for a in items.alerts] == ["1"]
        assert items.active

    def test_only_approved_high_reports(self, report_factory):
        reports = [
            report_factory(id="r1", status="approved", severity="high"),
            report_factory(id="r2", status="pending", severity=None),
            report_factory(id="r3", status="approved", severity="low"),
        ]

        items = find_emergency_items([], reports)

        assert [r.id for r in items.reports] == ["r1"]

    def test_no_emergency(self, alert_factory):
        items = find_emergency_items([alert_factory(severity="low")], [])

        assert not items.active


class TestEmergencyMonitor:
    """긴급 상황 추적기 테스트"""

    def test_new_emergency_flagged_once(self, alert_factory):
        monitor = EmergencyMonitor()
        alerts = [alert_factory(id="1", severity="critical")]

        assert monitor.check(alerts, []) == (True, True)
        assert monitor.check(alerts, []) == (True, False)
        assert monitor.is_emergency

    def test_changed_items_flag_new_emergency(self, alert_factory):
        monitor = EmergencyMonitor()
        monitor.check([alert_factory(id="1", severity="high")], [])

        result = monitor.check([alert_factory(id="1", severity="high"), alert_factory(id="2", severity="high")], [])

        assert result == (True, True)

    def test_clears_when_resolved(self, alert_factory):
        monitor = EmergencyMonitor()
        monitor.check([alert_factory(id="1", severity="high")], [])

        assert monitor.check([alert_factory(id="1", severity="high", status="resolved")], []) == (False, False)
        assert not monitor.is_emergency

    def test_reset(self, alert_factory):
        monitor = EmergencyMonitor()
        alerts = [alert_factory(id="1", severity="high")]
        monitor.check(alerts, [])

        monitor.reset()

        assert monitor.check(alerts, []) == (True, True)


class TestComputeStats:
    """통계 계산 테스트"""

    def test_counts(self, alert_factory, report_factory):
        alerts = [
            alert_factory(id="1", severity="critical", status="active"),
            alert_factory(id="2", severity="low", status="resolved"),
        ]
        reports = [
            report_factory(id="r1", status="pending"),
            report_factory(id="r2", status="approved", severity="high"),
            report_factory(id="r3", status="rejected"),
        ]

        stats = compute_stats(alerts, reports)

        assert stats["alerts"]["total"] == 2
        assert stats["alerts"]["active"] == 1
        assert stats["alerts"]["by_severity"] == {"critical": 1, "high": 0, "medium": 0, "low": 1}
        assert stats["reports"] == {"total": 3, "pending": 1, "approved": 1, "rejected": 1}
        assert len(stats["sample_alerts"]) == 2
        assert len(stats["sample_reports"]) == 2

    def test_sample_text_truncated(self, report_factory):
        stats = compute_stats([], [report_factory(text_report="x" * 80)])

        assert stats["sample_reports"][0]["text_report"] == "x" * 50 + "..."

    def test_empty(self):
        stats = compute_stats([], [])

        assert stats["alerts"]["total"] == 0
        assert stats["sample_alerts"] == []
