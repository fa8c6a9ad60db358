"""
Report endpoints for DisasterLens.

Citizen submissions are classified on intake and stored as pending;
administrators approve or reject them, which assigns or clears the
report severity.
"""

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from disasterlens.core.classifier import classify
from disasterlens.core.errors import StoreError
from disasterlens.core.models import Report, ReportCreate, ReportStatusUpdate
from disasterlens.observability import metrics
from disasterlens.observability.logging_setup import get_logger
from disasterlens.ports.store import StorePort
from disasterlens.realtime.broadcaster import Broadcaster
from disasterlens.realtime.sse import deleted_event, entity_event
from disasterlens.settings import Settings
from .common import parse_body, store_failure

log = get_logger("disasterlens.api.reports")


def create_reports_router(settings: Settings, store: StorePort, broadcaster: Broadcaster) -> APIRouter:
    router = APIRouter(prefix="/api/reports", tags=["reports"])
    defaults = settings.defaults

    def _classify(text: str, image_url=None):
        with metrics.classify_seconds.time():
            result = classify(text, image_url, weights=settings.classifier)
        metrics.reports_classified.labels(type=result.type, severity=result.severity).inc()
        return result

    @router.get("")
    async def list_reports():
        """제보 목록"""
        try:
            reports = await store.fetch_reports()
        except StoreError as e:
            raise store_failure(e, "Failed to fetch reports")
        return [r.model_dump() for r in reports]

    @router.post("", status_code=201)
    async def create_report(payload: dict = Body(default={})):
        """
        제보를 분류/저장하고 report-created 이벤트를 전송합니다.

        관리자가 작성하고 사전 승인한 제보는 승인 상태로 바로 저장됩니다.
        """
        body = parse_body(ReportCreate, payload)
        classification = _classify(body.text_report, body.image_url)

        direct_approve = body.admin_created and body.pre_approved
        report = Report(
            id="",
            created_at="",
            user_id=body.user_id or (defaults.admin_user_id if body.admin_created else defaults.citizen_user_id),
            text_report=body.text_report,
            image_url=body.image_url,
            location_lat=body.location_lat if body.location_lat is not None else defaults.location_lat,
            location_lng=body.location_lng if body.location_lng is not None else defaults.location_lng,
            location_text=body.location_text or defaults.location_text,
            status="approved" if direct_approve else "pending",
            severity=(body.severity or classification.severity) if direct_approve else None,
            alert_type=classification.type,
            confidence_score=classification.confidence,
            admin_created=body.admin_created,
            pre_approved=body.pre_approved,
        )

        try:
            stored = await store.insert_report(report)
        except StoreError as e:
            raise store_failure(e, "Failed to create report")

        metrics.reports_received.labels(origin="admin" if body.admin_created else "citizen").inc()
        broadcaster.broadcast(entity_event("report-created", stored))
        log.info(f"제보 접수: {stored.id} ({stored.alert_type}, {stored.status})")
        return JSONResponse(
            {"report": stored.model_dump(), "classification": classification.model_dump()},
            status_code=201,
        )

    @router.put("/{report_id}")
    async def update_report(report_id: str, payload: dict = Body(default={})):
        """제보 승인/거절 후 report-updated 이벤트 전송"""
        body = parse_body(ReportStatusUpdate, payload)
        try:
            severity = None
            if body.status == "approved":
                severity = body.severity
                if severity is None:
                    current = await store.get_report(report_id)
                    severity = _classify(current.text_report, current.image_url).severity
            report = await store.update_report_status(report_id, body.status, severity)
        except StoreError as e:
            raise store_failure(e, "Failed to update report status")

        metrics.report_transitions.labels(status=body.status).inc()
        broadcaster.broadcast(entity_event("report-updated", report))
        log.info(f"제보 상태 변경: {report_id} -> {body.status} (severity={severity})")
        return {"report": report.model_dump()}

    @router.delete("/{report_id}")
    async def delete_report(report_id: str):
        """제보 삭제 후 report-deleted 이벤트 전송"""
        try:
            await store.delete_report(report_id)
        except StoreError as e:
            raise store_failure(e, "Failed to delete report")

        broadcaster.broadcast(deleted_event("report-deleted", report_id))
        log.info(f"제보 삭제: {report_id}")
        return {"success": True, "message": "Report deleted successfully"}

    return router
