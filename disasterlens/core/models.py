"""
Core domain models for DisasterLens.

This module defines the core domain models using Pydantic v2
for type safety and validation.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

# 재난 유형 (순서가 분류기의 동점 처리 순서)
AlertType = Literal["fire", "flood", "outage", "storm", "shelter"]
ALERT_TYPES: tuple = ("fire", "flood", "outage", "storm", "shelter")

# 심각도 타입 정의 (낮음 -> 높음)
Severity = Literal["low", "medium", "high", "critical"]
SEVERITY_LEVELS: tuple = ("low", "medium", "high", "critical")

ReportStatus = Literal["pending", "approved", "rejected"]
AlertStatus = Literal["active", "investigating", "resolved"]

EventType = Literal[
    "connected",
    "alert-created",
    "alert-updated",
    "alert-deleted",
    "report-created",
    "report-updated",
    "report-deleted",
    "heartbeat",
]


class Alert(BaseModel):
    """공식 경보 모델"""
    id: str
    created_at: str
    type: AlertType
    severity: Severity
    status: AlertStatus = "active"
    location_lat: float
    location_lng: float
    location_text: str = ""
    description: str = ""
    confidence_score: float = Field(default=1.0, ge=0.0, le=1.0)
    source: str = ""


class Report(BaseModel):
    """시민/관리자 제보 모델"""
    id: str
    created_at: str
    user_id: str
    text_report: str
    image_url: Optional[str] = None
    location_lat: float
    location_lng: float
    location_text: str = ""
    status: ReportStatus = "pending"
    severity: Optional[Severity] = None
    alert_type: Optional[AlertType] = None
    confidence_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    admin_created: bool = False
    pre_approved: bool = False


class ClassificationResult(BaseModel):
    """분류 결과 모델 (저장하지 않음)"""
    type: AlertType
    confidence: float
    severity: Severity
    summary: str


class SummaryResult(BaseModel):
    """제보 요약 결과 모델"""
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    key_points: List[str] = Field(default_factory=list, alias="keyPoints")
    risk_level: Severity = Field(default="low", alias="riskLevel")


class RealtimeEvent(BaseModel):
    """실시간 이벤트 모델 (전송 전용)"""
    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str


class ClassifierWeights(BaseModel):
    """분류기 가중치/임계값 설정"""
    tier_weights: Dict[str, float] = Field(
        default_factory=lambda: {"high": 3.0, "medium": 2.0, "low": 1.0}
    )
    whole_word_bonus: float = 0.5

    # 문맥 가중치 (이미 점수가 있는 유형에만 적용)
    urgency_boost: Dict[str, float] = Field(
        default_factory=lambda: {"fire": 2.0, "flood": 1.5, "storm": 1.0}
    )
    building_boost: Dict[str, float] = Field(
        default_factory=lambda: {"fire": 1.0, "outage": 0.5}
    )
    street_boost: Dict[str, float] = Field(
        default_factory=lambda: {"flood": 1.0, "outage": 0.5, "storm": 0.5}
    )

    # 신뢰도
    default_confidence: float = 0.7
    confidence_floor: float = 0.3
    confidence_ceiling: float = 0.95
    image_confidence_bonus: float = 0.1
    image_confidence_cap: float = 0.98

    # 심각도 지표 가중치 (매칭 1건당)
    indicator_weights: Dict[str, float] = Field(
        default_factory=lambda: {"critical": 6.0, "high": 3.0, "medium": 1.5, "low": -4.0}
    )
    emergency_keyword_bonus: float = 2.0
    fragmented_text_bonus: float = 1.5
    fragmented_avg_words: float = 6.0
    exclamation_bonus: float = 0.5
    exclamation_cap: int = 3
    caps_bonus: float = 0.5
    caps_cap: int = 3
    large_number_threshold: int = 100
    large_number_bonus: float = 2.0
    time_urgency_bonus: float = 1.5
    category_base_bonus: Dict[str, float] = Field(
        default_factory=lambda: {"fire": 1.5, "flood": 1.0, "storm": 1.0, "outage": 0.5, "shelter": 0.5}
    )
    image_severity_bonus: float = 1.0

    # 심각도 구간 임계값
    severity_thresholds: Dict[str, float] = Field(
        default_factory=lambda: {"critical": 8.0, "high": 5.0, "medium": 2.0}
    )
    flood_storm_escalation_score: float = 2.0


# ---- 요청 본문 모델 ----

class ReportCreate(BaseModel):
    """제보 생성 요청"""
    text_report: str = Field(min_length=1)
    image_url: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    location_text: Optional[str] = None
    user_id: Optional[str] = None
    admin_created: bool = False
    pre_approved: bool = False
    severity: Optional[Severity] = None


class ReportStatusUpdate(BaseModel):
    """제보 상태 변경 요청"""
    status: ReportStatus
    severity: Optional[Severity] = None


class AlertCreate(BaseModel):
    """경보 생성 요청"""
    type: AlertType
    severity: Severity
    status: AlertStatus = "active"
    location_lat: float
    location_lng: float
    location_text: str = ""
    description: str = ""
    confidence_score: float = Field(default=1.0, ge=0.0, le=1.0)
    source: str = "Manual"


class AlertStatusUpdate(BaseModel):
    """경보 상태 변경 요청"""
    status: AlertStatus


class ClassifyRequest(BaseModel):
    """분류 미리보기 요청"""
    text: str = ""
    image_url: Optional[str] = None
