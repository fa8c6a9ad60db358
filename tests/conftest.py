"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
import asyncio
import tempfile
import os
from disasterlens.adapters.storage import MemoryStore, StoreChain
from disasterlens.core.models import Alert, Report
from disasterlens.realtime.broadcaster import Broadcaster
from disasterlens.settings import Settings


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """테스트용 설정 (메모리 저장소만 사용)"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.storage.sqlite_enabled = False
    settings.storage.memory_fallback = True
    settings.realtime.heartbeat_interval_sec = 0.05
    return settings


@pytest.fixture
def memory_store():
    """빈 메모리 저장소"""
    return MemoryStore()


@pytest.fixture
def memory_chain(memory_store):
    """메모리 저장소 하나로 구성된 체인"""
    return StoreChain([memory_store])


@pytest.fixture
def broadcaster():
    """테스트용 브로드캐스터"""
    return Broadcaster(queue_maxsize=10)


def make_alert(**overrides) -> Alert:
    """테스트용 경보 생성"""
    data = dict(
        id="a1",
        created_at="2025-01-01T00:00:00.000Z",
        type="fire",
        severity="high",
        status="active",
        location_lat=39.2847,
        location_lng=-76.8483,
        location_text="Catonsville, MD",
        description="Structure fire reported on Main Street.",
        confidence_score=0.95,
        source="Emergency Services",
    )
    data.update(overrides)
    return Alert(**data)


def make_report(**overrides) -> Report:
    """테스트용 제보 생성"""
    data = dict(
        id="r1",
        created_at="2025-01-01T00:00:00.000Z",
        user_id="user_citizen",
        text_report="Large fire visible with heavy smoke.",
        location_lat=39.2904,
        location_lng=-76.6122,
        location_text="Baltimore, MD",
        status="pending",
        alert_type="fire",
        confidence_score=0.9,
    )
    data.update(overrides)
    return Report(**data)


@pytest.fixture
def alert_factory():
    return make_alert


@pytest.fixture
def report_factory():
    return make_report


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 비동기 테스트에 asyncio 마커 추가
        if asyncio.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)

        # 느린 테스트 마커 추가
        if "performance" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)

        # 통합 테스트 마커 추가
        if "integration" in item.name or "end_to_end" in item.name:
            item.add_marker(pytest.mark.integration)
