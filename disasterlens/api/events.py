"""
Realtime SSE endpoint for DisasterLens.
"""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from disasterlens.ports.store import StorePort
from disasterlens.realtime.broadcaster import Broadcaster
from disasterlens.realtime.stream import event_stream
from disasterlens.settings import Settings

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def create_events_router(settings: Settings, store: StorePort, broadcaster: Broadcaster) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["realtime"])

    @router.get("/events")
    async def events():
        """실시간 이벤트 구독 (Server-Sent Events)"""
        sub = broadcaster.subscribe()
        stream = event_stream(
            broadcaster, sub, store,
            heartbeat_interval=settings.realtime.heartbeat_interval_sec,
        )
        return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)

    return router
