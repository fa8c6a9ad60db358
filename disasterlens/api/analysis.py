"""
Analysis endpoints for DisasterLens: classification preview,
report summary, emergency status and debug statistics.
"""

from typing import Optional
from fastapi import APIRouter, Body, HTTPException
from disasterlens.core.classifier import classify
from disasterlens.core.emergency import find_emergency_items
from disasterlens.core.errors import StoreError
from disasterlens.core.models import ClassifyRequest
from disasterlens.core.stats import compute_stats
from disasterlens.core.summarize import generate_alert_message, summarize
from disasterlens.observability import metrics
from disasterlens.ports.store import StorePort
from disasterlens.realtime.broadcaster import Broadcaster
from disasterlens.settings import Settings
from .common import parse_body, store_failure

REPORT_STATUSES = ("pending", "approved", "rejected")


def create_analysis_router(settings: Settings, store: StorePort, broadcaster: Broadcaster) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["analysis"])

    @router.post("/classify")
    async def classify_preview(payload: dict = Body(default={})):
        """분류 미리보기 (저장하지 않음)"""
        body = parse_body(ClassifyRequest, payload)
        with metrics.classify_seconds.time():
            result = classify(body.text, body.image_url, weights=settings.classifier)
        return result.model_dump()

    @router.get("/summary")
    async def summary(status: Optional[str] = None):
        """제보 요약 (status로 필터 가능)"""
        if status is not None and status not in REPORT_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of {', '.join(REPORT_STATUSES)}")
        try:
            reports = await store.fetch_reports()
        except StoreError as e:
            raise store_failure(e, "Failed to summarize reports")
        if status is not None:
            reports = [r for r in reports if r.status == status]
        return summarize(reports).model_dump(by_alias=True)

    @router.get("/emergency")
    async def emergency():
        """현재 긴급 상황 항목"""
        try:
            alerts = await store.fetch_alerts()
            reports = await store.fetch_reports()
        except StoreError as e:
            raise store_failure(e, "Failed to evaluate emergency status")
        items = find_emergency_items(alerts, reports)
        return {
            "is_emergency": items.active,
            "alerts": [a.model_dump() for a in items.alerts],
            "reports": [r.model_dump() for r in items.reports],
            "messages": [generate_alert_message(a) for a in items.alerts],
        }

    @router.get("/debug")
    async def debug():
        """저장소/구독자 현황"""
        try:
            alerts = await store.fetch_alerts()
            reports = await store.fetch_reports()
        except StoreError as e:
            raise store_failure(e, "Failed to fetch debug data")
        stats = compute_stats(alerts, reports)
        stats["store"] = store.name
        stats["subscribers"] = broadcaster.count
        return stats

    return router
