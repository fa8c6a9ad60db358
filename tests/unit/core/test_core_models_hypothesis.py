"""
hypothesis를 활용한 코어 모델 테스트

이 모듈은 hypothesis 패키지를 사용하여
경보/제보/요청 모델의 경계 검증을 테스트합니다.
"""

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from disasterlens.core.models import (
    ALERT_TYPES,
    SEVERITY_LEVELS,
    Alert,
    AlertCreate,
    AlertStatusUpdate,
    ClassifierWeights,
    RealtimeEvent,
    ReportCreate,
    ReportStatusUpdate,
)


class TestAlertModel:
    """Alert 모델 테스트"""

    @given(
        alert_type=st.sampled_from(ALERT_TYPES),
        severity=st.sampled_from(SEVERITY_LEVELS),
        confidence=st.floats(min_value=0.0, max_value=1.0),
    )
    def test_alert_creation(self, alert_type, severity, confidence):
        alert = Alert(
            id="1", created_at="2025-01-01T00:00:00Z", type=alert_type, severity=severity,
            location_lat=39.0, location_lng=-76.0, confidence_score=confidence,
        )

        assert alert.type == alert_type
        assert alert.status == "active"

    @given(alert_type=st.text(max_size=20).filter(lambda x: x not in ALERT_TYPES))
    def test_alert_invalid_type(self, alert_type):
        with pytest.raises(ValidationError):
            Alert(id="1", created_at="x", type=alert_type, severity="low", location_lat=0, location_lng=0)

    def test_alert_confidence_out_of_range(self):
        with pytest.raises(ValidationError):
            Alert(id="1", created_at="x", type="fire", severity="low",
                  location_lat=0, location_lng=0, confidence_score=1.5)


class TestRequestModels:
    """요청 본문 모델 테스트"""

    @given(status=st.text(max_size=20).filter(lambda x: x not in ("pending", "approved", "rejected")))
    def test_report_status_out_of_enum(self, status):
        with pytest.raises(ValidationError):
            ReportStatusUpdate(status=status)

    @given(severity=st.text(max_size=20).filter(lambda x: x not in SEVERITY_LEVELS))
    def test_report_severity_out_of_enum(self, severity):
        with pytest.raises(ValidationError):
            ReportStatusUpdate(status="approved", severity=severity)

    def test_report_status_update_optional_severity(self):
        update = ReportStatusUpdate(status="approved")

        assert update.severity is None

    @given(status=st.text(max_size=20).filter(lambda x: x not in ("active", "investigating", "resolved")))
    def test_alert_status_out_of_enum(self, status):
        with pytest.raises(ValidationError):
            AlertStatusUpdate(status=status)

    def test_report_create_requires_text(self):
        with pytest.raises(ValidationError):
            ReportCreate(text_report="")
        with pytest.raises(ValidationError):
            ReportCreate()

    def test_alert_create_defaults(self):
        body = AlertCreate(type="storm", severity="high", location_lat=1.0, location_lng=2.0)

        assert body.status == "active"
        assert body.source == "Manual"
        assert body.confidence_score == 1.0


class TestRealtimeEvent:
    """실시간 이벤트 모델 테스트"""

    def test_event_type_closed_enum(self):
        with pytest.raises(ValidationError):
            RealtimeEvent(type="alert-exploded", data={}, timestamp="x")

    def test_event_defaults(self):
        event = RealtimeEvent(type="heartbeat", timestamp="x")

        assert event.data == {}


class TestClassifierWeights:
    """분류기 가중치 설정 테스트"""

    def test_defaults(self):
        weights = ClassifierWeights()

        assert weights.tier_weights == {"high": 3.0, "medium": 2.0, "low": 1.0}
        assert weights.severity_thresholds == {"critical": 8.0, "high": 5.0, "medium": 2.0}
        assert weights.default_confidence == 0.7

    def test_override_from_dict(self):
        weights = ClassifierWeights.model_validate({"confidence_ceiling": 0.9})

        assert weights.confidence_ceiling == 0.9
        assert weights.confidence_floor == 0.3
