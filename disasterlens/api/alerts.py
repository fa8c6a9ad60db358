"""
Alert endpoints for DisasterLens.
"""

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from disasterlens.core.errors import StoreError
from disasterlens.core.models import AlertCreate, AlertStatusUpdate
from disasterlens.observability import metrics
from disasterlens.observability.logging_setup import get_logger
from disasterlens.ports.store import StorePort
from disasterlens.realtime.broadcaster import Broadcaster
from disasterlens.realtime.sse import deleted_event, entity_event
from .common import parse_body, store_failure

log = get_logger("disasterlens.api.alerts")


def create_alerts_router(store: StorePort, broadcaster: Broadcaster) -> APIRouter:
    router = APIRouter(prefix="/api/alerts", tags=["alerts"])

    @router.get("")
    async def list_alerts():
        """경보 목록"""
        try:
            alerts = await store.fetch_alerts()
        except StoreError as e:
            raise store_failure(e, "Failed to fetch alerts")
        return [a.model_dump() for a in alerts]

    @router.post("", status_code=201)
    async def create_alert(payload: dict = Body(default={})):
        """경보 생성 후 alert-created 이벤트 전송"""
        body = parse_body(AlertCreate, payload)
        try:
            alert = await store.insert_alert(body)
        except StoreError as e:
            raise store_failure(e, "Failed to create alert")

        metrics.alert_mutations.labels(operation="create").inc()
        broadcaster.broadcast(entity_event("alert-created", alert))
        log.info(f"경보 생성: {alert.id} ({alert.type}/{alert.severity})")
        return JSONResponse(alert.model_dump(), status_code=201)

    @router.put("/{alert_id}")
    async def update_alert(alert_id: str, payload: dict = Body(default={})):
        """경보 상태 변경 후 alert-updated 이벤트 전송"""
        body = parse_body(AlertStatusUpdate, payload)
        try:
            alert = await store.update_alert_status(alert_id, body.status)
        except StoreError as e:
            raise store_failure(e, "Failed to update alert")

        metrics.alert_mutations.labels(operation="update").inc()
        broadcaster.broadcast(entity_event("alert-updated", alert))
        log.info(f"경보 상태 변경: {alert_id} -> {body.status}")
        return {"alert": alert.model_dump()}

    @router.delete("/{alert_id}")
    async def delete_alert(alert_id: str):
        """경보 삭제 후 alert-deleted 이벤트 전송"""
        try:
            await store.delete_alert(alert_id)
        except StoreError as e:
            raise store_failure(e, "Failed to delete alert")

        metrics.alert_mutations.labels(operation="delete").inc()
        broadcaster.broadcast(deleted_event("alert-deleted", alert_id))
        log.info(f"경보 삭제: {alert_id}")
        return {"success": True, "message": "Alert deleted successfully"}

    return router
