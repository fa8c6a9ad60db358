"""
FastAPI application factory for DisasterLens.

Wires the store chain and the realtime broadcaster into the API
routers and exposes the health, readiness, metrics and info endpoints.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from disasterlens.adapters.storage import MemoryStore, SQLiteStore, StoreChain
from disasterlens.adapters.supabase import SupabaseStore
from disasterlens.core.errors import StoreUnavailableError
from disasterlens.observability import metrics as m
from disasterlens.observability.logging_setup import get_logger
from disasterlens.ports.store import StorePort
from disasterlens.realtime.broadcaster import Broadcaster
from disasterlens.settings import Settings
from .alerts import create_alerts_router
from .analysis import create_analysis_router
from .events import create_events_router
from .reports import create_reports_router

log = get_logger("disasterlens.api")


def build_store(settings: Settings) -> StoreChain:
    """
    설정에 따라 저장소 체인을 구성합니다.

    순서: Supabase (설정된 경우) -> SQLite -> 메모리 폴백
    """
    limits = dict(alerts_limit=settings.storage.alerts_limit, reports_limit=settings.storage.reports_limit)
    sources = []
    if settings.supabase.enabled:
        sources.append(SupabaseStore(
            settings.supabase.url,
            settings.supabase.key,
            timeout_sec=settings.supabase.timeout_sec,
            max_retries=settings.supabase.max_retries,
            **limits,
        ))
    if settings.storage.sqlite_enabled:
        sources.append(SQLiteStore(settings.storage.sqlite_path, **limits))
    if settings.storage.memory_fallback or not sources:
        sources.append(MemoryStore(seed=settings.storage.seed_sample_data, **limits))
    return StoreChain(sources, **limits)


def create_app(settings: Settings,
               store: Optional[StorePort] = None,
               broadcaster: Optional[Broadcaster] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    store = store or build_store(settings)
    broadcaster = broadcaster or Broadcaster(queue_maxsize=settings.realtime.subscriber_queue_maxsize)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            await store.init()
        except StoreUnavailableError as e:
            log.error(f"저장소 초기화 실패: {e}")
        log.info(f"{settings.observability.service_name} 시작 (store={store.name})")
        yield
        for source in getattr(store, "sources", [store]):
            close = getattr(source, "close", None)
            if close is not None:
                await close()
        log.info("서비스 종료")

    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="DisasterLens Emergency Dashboard Service",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.broadcaster = broadcaster

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.http.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_alerts_router(store, broadcaster))
    app.include_router(create_reports_router(settings, store, broadcaster))
    app.include_router(create_analysis_router(settings, store, broadcaster))
    app.include_router(create_events_router(settings, store, broadcaster))

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (저장소 조회 가능 여부)"""
        try:
            await store.fetch_alerts()
        except StoreUnavailableError as e:
            log.warning(f"레디니스 실패: {e}")
            raise HTTPException(status_code=503, detail="Store unavailable")
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "store": store.name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        m.uptime_seconds.set(time.time() - start_time)
        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "store": store.name,
            "subscribers": broadcaster.count
        })

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "alerts": "/api/alerts",
                "reports": "/api/reports",
                "classify": "/api/classify",
                "summary": "/api/summary",
                "emergency": "/api/emergency",
                "debug": "/api/debug",
                "events": "/api/events",
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info"
            }
        })

    return app
