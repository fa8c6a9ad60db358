# disasterlens/settings.py
from __future__ import annotations
from typing import List
from pydantic import BaseModel, Field
from disasterlens.core.models import ClassifierWeights

class StorageConfig(BaseModel):
    sqlite_path: str = "/data/disasterlens.db"
    sqlite_enabled: bool = True
    memory_fallback: bool = True
    seed_sample_data: bool = False          # 메모리 폴백에 샘플 데이터 적재
    alerts_limit: int = 50
    reports_limit: int = 100

class SupabaseConfig(BaseModel):
    url: str = ""
    key: str = ""
    timeout_sec: int = 10
    max_retries: int = 1

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.key)

class RealtimeConfig(BaseModel):
    heartbeat_interval_sec: float = 30.0
    subscriber_queue_maxsize: int = 100
    backoff_initial_sec: float = 1.0
    backoff_max_sec: float = 30.0
    fallback_grace_sec: float = 3.0

class Defaults(BaseModel):
    location_lat: float = 39.2904
    location_lng: float = -76.6122
    location_text: str = "Baltimore, MD"
    citizen_user_id: str = "user_citizen"
    admin_user_id: str = "user_admin"

class HttpConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

class Observability(BaseModel):
    metrics_enabled: bool = True
    service_name: str = "DisasterLens"
    build_version: str = "0.1.0"
    build_date: str = "2025-01-01"
    log_level: str = "INFO"

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    realtime: RealtimeConfig = Field(default_factory=RealtimeConfig)
    classifier: ClassifierWeights = Field(default_factory=ClassifierWeights)
    defaults: Defaults = Field(default_factory=Defaults)
    http: HttpConfig = Field(default_factory=HttpConfig)
    observability: Observability = Field(default_factory=Observability)
