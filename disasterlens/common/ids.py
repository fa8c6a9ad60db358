"""
Identifier and timestamp helpers for DisasterLens.
"""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """불투명 문자열 ID를 생성합니다."""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    """현재 UTC 시각 (ISO-8601, Z 접미사)"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
