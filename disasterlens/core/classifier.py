"""
Disaster classification functions for DisasterLens.

This module contains the keyword-scoring classifier that assigns a
disaster type, confidence and severity to free-text reports. It is a
pure, deterministic function: no I/O, no clock, no randomness.
"""

import re
from typing import Dict, Iterable, Optional, Tuple

from .models import ALERT_TYPES, SEVERITY_LEVELS, AlertType, ClassificationResult, ClassifierWeights, Severity

DEFAULT_WEIGHTS = ClassifierWeights()
DEFAULT_TYPE: AlertType = "outage"

# 유형별 키워드 (high/medium/low 3단계)
CATEGORY_KEYWORDS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "fire": {
        "high": ("fire", "flames", "burning", "blaze", "wildfire", "inferno"),
        "medium": ("smoke", "smoky", "burn", "embers", "arson", "scorched"),
        "low": ("ashes", "sparks", "burnt smell", "charred"),
    },
    "flood": {
        "high": ("flood", "flooding", "flooded", "flash flood", "submerged", "inundated"),
        "medium": ("water rising", "rising water", "overflow", "storm surge", "underwater", "levee"),
        "low": ("water", "puddle", "drainage", "soaked", "rainfall"),
    },
    "outage": {
        "high": ("power outage", "blackout", "outage", "no power", "power out"),
        "medium": ("electricity", "power line", "transformer", "downed lines", "grid"),
        "low": ("power", "lights", "dark", "internet", "generator"),
    },
    "storm": {
        "high": ("hurricane", "tornado", "storm", "cyclone", "typhoon"),
        "medium": ("high winds", "strong wind", "thunder", "lightning", "hail", "gust"),
        "low": ("heavy rain", "debris", "branches", "fallen tree", "weather"),
    },
    "shelter": {
        "high": ("shelter", "evacuation center", "refuge", "displaced"),
        "medium": ("safe place", "place to stay", "homeless", "need housing", "cots"),
        "low": ("safe", "food", "blankets", "supplies", "help"),
    },
}

# 문맥 단어
URGENCY_WORDS = ("911", "emergency", "evacuate", "evacuation", "trapped", "urgent", "help", "rescue")
BUILDING_WORDS = ("building", "house", "home", "apartment", "office", "school", "store", "warehouse", "hospital")
STREET_WORDS = ("street", "road", "highway", "bridge", "intersection", "downtown", "tunnel", "underpass", "avenue")

# 심각도 지표
SEVERITY_INDICATORS: Dict[str, Tuple[str, ...]] = {
    "critical": (
        "trapped", "explosion", "collapse", "dying", "dead", "unconscious", "screaming",
        "life threatening", "can't breathe", "cannot breathe", "out of control",
        "people inside", "kids inside", "children inside",
    ),
    "high": (
        "injured", "bleeding", "spreading", "evacuating", "multiple", "many people",
        "rising fast", "major", "severe", "massive", "huge", "destroyed",
    ),
    "medium": ("damage", "blocked", "stuck", "rising", "worried", "several", "closed", "dangerous"),
    "low": (
        "minor", "small", "no injuries", "under control", "contained", "resolved",
        "precaution", "slight", "no one hurt",
    ),
}
EMERGENCY_KEYWORDS = ("911", "emergency", "help", "urgent", "rescue", "mayday")
TIME_URGENCY_PHRASES = (
    "right now", "immediately", "hurry", "asap", "quickly",
    "just happened", "happening now", "minutes ago",
)

TYPE_EMOJIS = {
    "fire": "🔥",
    "flood": "🌊",
    "outage": "⚡",
    "storm": "🌪️",
    "shelter": "🏠",
}

SEVERITY_LABELS = {
    "low": "Advisory",
    "medium": "Watch",
    "high": "Warning",
    "critical": "EMERGENCY",
}

# 유형 x 심각도 요약 템플릿 (20개 고정 문자열)
SUMMARY_TEMPLATES: Dict[str, Dict[str, str]] = {
    "fire": {
        "low": "🔥 Advisory: minor fire activity reported with {confidence}% confidence. Monitor the area and avoid the smoke.",
        "medium": "🔥 Watch: fire incident detected with {confidence}% confidence. Keep clear and be ready to leave if it spreads.",
        "high": "🔥 Warning: serious fire detected with {confidence}% confidence. Evacuate nearby structures and alert fire services.",
        "critical": "🔥 EMERGENCY: life-threatening fire detected with {confidence}% confidence. Dispatch fire and rescue units immediately.",
    },
    "flood": {
        "low": "🌊 Advisory: minor water accumulation reported with {confidence}% confidence. Monitor water levels.",
        "medium": "🌊 Watch: flooding situation identified with {confidence}% confidence. Avoid low-lying roads and monitor water levels.",
        "high": "🌊 Warning: significant flooding detected with {confidence}% confidence. Move to higher ground and avoid flooded roads.",
        "critical": "🌊 EMERGENCY: dangerous flooding detected with {confidence}% confidence. Begin water rescue and evacuation immediately.",
    },
    "outage": {
        "low": "⚡ Advisory: localized power issue reported with {confidence}% confidence. Utility crews notified.",
        "medium": "⚡ Watch: power outage reported with {confidence}% confidence. Check on vulnerable neighbors and conserve devices.",
        "high": "⚡ Warning: widespread outage detected with {confidence}% confidence. Stay away from downed lines and use generators safely.",
        "critical": "⚡ EMERGENCY: critical infrastructure failure detected with {confidence}% confidence. Prioritize hospitals and life-support customers.",
    },
    "storm": {
        "low": "🌪️ Advisory: unsettled weather reported with {confidence}% confidence. Secure loose outdoor items.",
        "medium": "🌪️ Watch: storm activity detected with {confidence}% confidence. Weather alert issued, stay indoors if possible.",
        "high": "🌪️ Warning: severe storm detected with {confidence}% confidence. Shelter in an interior room away from windows.",
        "critical": "🌪️ EMERGENCY: destructive storm detected with {confidence}% confidence. Take shelter now and dispatch rescue teams.",
    },
    "shelter": {
        "low": "🏠 Advisory: shelter information request with {confidence}% confidence. Share nearby shelter locations.",
        "medium": "🏠 Watch: emergency shelter request with {confidence}% confidence. Resources being allocated.",
        "high": "🏠 Warning: urgent shelter need detected with {confidence}% confidence. Open additional shelter capacity.",
        "critical": "🏠 EMERGENCY: displaced residents without shelter detected with {confidence}% confidence. Deploy emergency housing immediately.",
    },
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_CAPS_TOKEN = re.compile(r"\b[A-Z]{2,}\b")
_INTEGER_TOKEN = re.compile(r"\d+")


def _keyword_score(text: str, keyword: str, weight: float, bonus: float) -> float:
    """키워드 1개의 점수 (공백이 뒤따르면 보너스)"""
    if keyword not in text:
        return 0.0
    score = weight
    if f"{keyword} " in text:
        score += bonus
    return score


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(w in text for w in words)


def _count_matches(text: str, phrases: Iterable[str]) -> int:
    return sum(1 for p in phrases if p in text)


def _is_large_number(token: str, threshold: int) -> bool:
    digits = token.lstrip("0")
    # int() 변환 자릿수 제한 회피
    if len(digits) > len(str(threshold)) + 1:
        return True
    return int(digits or "0") > threshold


def score_categories(text: str, weights: ClassifierWeights = DEFAULT_WEIGHTS) -> Dict[str, float]:
    """
    유형별 누적 점수를 계산합니다.

    Args:
        text: 소문자로 변환된 입력 텍스트
        weights: 분류기 가중치

    Returns:
        유형 -> 점수 (ALERT_TYPES 순서)
    """
    scores: Dict[str, float] = {}
    for category in ALERT_TYPES:
        total = 0.0
        for tier, keywords in CATEGORY_KEYWORDS[category].items():
            weight = weights.tier_weights.get(tier, 0.0)
            for kw in keywords:
                total += _keyword_score(text, kw, weight, weights.whole_word_bonus)
        scores[category] = total

    # 문맥 가중치는 이미 신호가 있는 유형에만 적용
    boosts = []
    if _contains_any(text, URGENCY_WORDS):
        boosts.append(weights.urgency_boost)
    if _contains_any(text, BUILDING_WORDS):
        boosts.append(weights.building_boost)
    if _contains_any(text, STREET_WORDS):
        boosts.append(weights.street_boost)
    for boost in boosts:
        for category, extra in boost.items():
            if scores.get(category, 0.0) > 0:
                scores[category] += extra

    return scores


def pick_category(scores: Dict[str, float]) -> Tuple[Optional[AlertType], float]:
    """최고 점수 유형을 선택합니다. 동점이면 ALERT_TYPES 순서상 앞선 유형."""
    best: Optional[AlertType] = None
    best_score = 0.0
    for category in ALERT_TYPES:
        score = scores.get(category, 0.0)
        if score > best_score:
            best, best_score = category, score
    return best, best_score


def compute_confidence(max_score: float, has_image: bool,
                       weights: ClassifierWeights = DEFAULT_WEIGHTS,
                       detected: bool = True) -> float:
    """우승 유형 점수로부터 신뢰도를 계산합니다."""
    if detected:
        confidence = max_score / 10 + 0.4
        confidence = max(weights.confidence_floor, min(weights.confidence_ceiling, confidence))
    else:
        confidence = weights.default_confidence
    if has_image:
        confidence = min(weights.image_confidence_cap, confidence + weights.image_confidence_bonus)
    return round(confidence, 4)


def severity_score(raw_text: str, category: Optional[str], has_image: bool,
                   weights: ClassifierWeights = DEFAULT_WEIGHTS) -> Tuple[float, int]:
    """
    심각도 점수를 누적합니다.

    Args:
        raw_text: 원본 텍스트 (대소문자 유지)
        category: 선택된 유형 (신호가 없으면 None)
        has_image: 이미지 첨부 여부
        weights: 분류기 가중치

    Returns:
        (심각도 점수, critical 지표 매칭 수)
    """
    text = raw_text.lower()
    iw = weights.indicator_weights
    score = 0.0

    critical_hits = _count_matches(text, SEVERITY_INDICATORS["critical"])
    score += critical_hits * iw.get("critical", 0.0)
    score += _count_matches(text, SEVERITY_INDICATORS["high"]) * iw.get("high", 0.0)
    score += _count_matches(text, SEVERITY_INDICATORS["medium"]) * iw.get("medium", 0.0)
    score += _count_matches(text, SEVERITY_INDICATORS["low"]) * iw.get("low", 0.0)

    score += _count_matches(text, EMERGENCY_KEYWORDS) * weights.emergency_keyword_bonus

    # 짧게 끊어진 문장은 긴박함을 의미
    sentences = [s for s in _SENTENCE_SPLIT.split(raw_text) if s.strip()]
    if len(sentences) >= 2:
        avg_words = sum(len(s.split()) for s in sentences) / len(sentences)
        if avg_words < weights.fragmented_avg_words:
            score += weights.fragmented_text_bonus

    score += min(raw_text.count("!"), weights.exclamation_cap) * weights.exclamation_bonus
    score += min(len(_CAPS_TOKEN.findall(raw_text)), weights.caps_cap) * weights.caps_bonus

    if any(_is_large_number(tok, weights.large_number_threshold) for tok in _INTEGER_TOKEN.findall(text)):
        score += weights.large_number_bonus

    if _contains_any(text, TIME_URGENCY_PHRASES):
        score += weights.time_urgency_bonus

    if category:
        score += weights.category_base_bonus.get(category, 0.0)

    if has_image:
        score += weights.image_severity_bonus

    return score, critical_hits


def bucket_severity(score: float, weights: ClassifierWeights = DEFAULT_WEIGHTS) -> Severity:
    """점수를 심각도 구간으로 변환합니다."""
    thresholds = weights.severity_thresholds
    if score >= thresholds.get("critical", 8.0):
        return "critical"
    if score >= thresholds.get("high", 5.0):
        return "high"
    if score >= thresholds.get("medium", 2.0):
        return "medium"
    return "low"


def escalate(severity: Severity) -> Severity:
    """심각도를 한 단계 올립니다 (critical은 그대로)."""
    idx = SEVERITY_LEVELS.index(severity)
    return SEVERITY_LEVELS[min(idx + 1, len(SEVERITY_LEVELS) - 1)]


def render_summary(alert_type: str, severity: str, confidence: float) -> str:
    """유형/심각도 템플릿으로 요약 문장을 생성합니다."""
    pct = int(confidence * 100 + 0.5)
    return SUMMARY_TEMPLATES[alert_type][severity].format(confidence=pct)


def classify(text: Optional[str], image_url: Optional[str] = None, *,
             weights: Optional[ClassifierWeights] = None) -> ClassificationResult:
    """
    제보 텍스트를 분류합니다.

    어떤 입력에도 예외를 던지지 않으며, 같은 입력에는 항상 같은 결과를 반환합니다.

    Args:
        text: 제보 텍스트
        image_url: 이미지 URL (선택)
        weights: 분류기 가중치 (None이면 기본값)

    Returns:
        분류 결과
    """
    w = weights or DEFAULT_WEIGHTS
    raw = text if isinstance(text, str) else ("" if text is None else str(text))
    lowered = raw.lower()
    has_image = bool(image_url)

    scores = score_categories(lowered, w)
    winner, max_score = pick_category(scores)
    alert_type: AlertType = winner or DEFAULT_TYPE

    confidence = compute_confidence(max_score, has_image, w, detected=winner is not None)

    score, critical_hits = severity_score(raw, winner, has_image, w)
    severity = bucket_severity(score, w)

    # 안전 규칙
    if alert_type == "fire" and critical_hits > 0:
        severity = "critical"
    elif alert_type == "flood" and scores.get("storm", 0.0) > w.flood_storm_escalation_score:
        severity = escalate(severity)

    return ClassificationResult(
        type=alert_type,
        confidence=confidence,
        severity=severity,
        summary=render_summary(alert_type, severity, confidence),
    )
