"""
HTTP API 단위 테스트

이 모듈은 경보/제보 CRUD, 분석 엔드포인트, 서비스 엔드포인트를 테스트합니다.
"""

import pytest
import json
from fastapi.testclient import TestClient

from disasterlens.adapters.storage import MemoryStore, StoreChain
from disasterlens.api import build_store, create_app
from disasterlens.core.errors import StoreUnavailableError
from disasterlens.realtime.broadcaster import Broadcaster
from unittest.mock import AsyncMock


def _event(sub) -> dict:
    frame = sub.queue.get_nowait()
    return json.loads(frame[len("data: "):])


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def hub():
    return Broadcaster(queue_maxsize=10)


@pytest.fixture
def client(sample_settings, store, hub):
    """테스트용 클라이언트"""
    app = create_app(sample_settings, store=StoreChain([store]), broadcaster=hub)
    return TestClient(app)


@pytest.fixture
def down_client(sample_settings, hub):
    """모든 저장소가 응답하지 않는 클라이언트"""
    down = AsyncMock()
    down.name = "down"
    for method in ("fetch_alerts", "fetch_reports", "get_report", "insert_alert", "insert_report",
                   "update_report_status", "update_alert_status", "delete_report", "delete_alert"):
        getattr(down, method).side_effect = StoreUnavailableError("offline")
    app = create_app(sample_settings, store=StoreChain([down]), broadcaster=hub)
    return TestClient(app)


ALERT_BODY = {
    "type": "flood",
    "severity": "high",
    "location_lat": 39.27,
    "location_lng": -76.61,
    "location_text": "Inner Harbor",
    "description": "Storm surge flooding waterfront streets",
}


class TestAlertEndpoints:
    """경보 엔드포인트 테스트"""

    def test_create_and_list(self, client, hub):
        sub = hub.subscribe()

        response = client.post("/api/alerts", json=ALERT_BODY)

        assert response.status_code == 201
        alert = response.json()
        assert alert["id"]
        assert alert["status"] == "active"
        assert alert["source"] == "Manual"

        event = _event(sub)
        assert event["type"] == "alert-created"
        assert event["data"]["id"] == alert["id"]

        listed = client.get("/api/alerts").json()
        assert [a["id"] for a in listed] == [alert["id"]]

    def test_create_invalid_body(self, client, hub):
        sub = hub.subscribe()

        response = client.post("/api/alerts", json={"type": "volcano", "severity": "high"})

        assert response.status_code == 400
        assert sub.queue.empty()

    def test_update_status(self, client, hub):
        alert_id = client.post("/api/alerts", json=ALERT_BODY).json()["id"]
        sub = hub.subscribe()

        response = client.put(f"/api/alerts/{alert_id}", json={"status": "resolved"})

        assert response.status_code == 200
        assert response.json()["alert"]["status"] == "resolved"
        assert _event(sub)["type"] == "alert-updated"

    def test_update_invalid_status(self, client):
        alert_id = client.post("/api/alerts", json=ALERT_BODY).json()["id"]

        assert client.put(f"/api/alerts/{alert_id}", json={"status": "gone"}).status_code == 400

    def test_update_missing(self, client):
        response = client.put("/api/alerts/nope", json={"status": "resolved"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Alert not found"

    def test_delete(self, client, hub):
        alert_id = client.post("/api/alerts", json=ALERT_BODY).json()["id"]
        sub = hub.subscribe()

        response = client.delete(f"/api/alerts/{alert_id}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Alert deleted successfully"}
        event = _event(sub)
        assert event["type"] == "alert-deleted"
        assert event["data"] == {"id": alert_id}
        assert client.get("/api/alerts").json() == []

    def test_delete_missing(self, client):
        assert client.delete("/api/alerts/nope").status_code == 404


class TestReportEndpoints:
    """제보 엔드포인트 테스트"""

    def test_citizen_report_is_pending_and_classified(self, client, hub):
        sub = hub.subscribe()

        response = client.post("/api/reports", json={"text_report": "Huge fire spreading in the warehouse!"})

        assert response.status_code == 201
        body = response.json()
        report = body["report"]
        assert report["status"] == "pending"
        assert report["severity"] is None
        assert report["alert_type"] == "fire"
        assert report["user_id"] == "user_citizen"
        assert report["location_text"] == "Baltimore, MD"
        assert body["classification"]["type"] == "fire"
        assert report["confidence_score"] == body["classification"]["confidence"]

        event = _event(sub)
        assert event["type"] == "report-created"
        assert event["data"]["id"] == report["id"]

    def test_admin_pre_approved_report(self, client):
        response = client.post("/api/reports", json={
            "text_report": "Shelter open at Lincoln High School",
            "admin_created": True,
            "pre_approved": True,
            "severity": "medium",
        })

        report = response.json()["report"]
        assert report["status"] == "approved"
        assert report["severity"] == "medium"
        assert report["user_id"] == "user_admin"

    def test_admin_pre_approved_without_severity_uses_classifier(self, client):
        response = client.post("/api/reports", json={
            "text_report": "People trapped in burning house",
            "admin_created": True,
            "pre_approved": True,
        })

        body = response.json()
        assert body["report"]["severity"] == body["classification"]["severity"] == "critical"

    def test_empty_text_rejected(self, client):
        assert client.post("/api/reports", json={"text_report": ""}).status_code == 400
        assert client.post("/api/reports", json={}).status_code == 400

    def test_approve_with_explicit_severity(self, client, hub):
        report_id = client.post("/api/reports", json={"text_report": "Minor flooding"}).json()["report"]["id"]
        sub = hub.subscribe()

        response = client.put(f"/api/reports/{report_id}", json={"status": "approved", "severity": "high"})

        assert response.status_code == 200
        report = response.json()["report"]
        assert report["status"] == "approved"
        assert report["severity"] == "high"
        assert _event(sub)["type"] == "report-updated"

    def test_approve_without_severity_reclassifies(self, client):
        report_id = client.post("/api/reports", json={
            "text_report": "Explosion and people trapped inside the building, fire everywhere",
        }).json()["report"]["id"]

        report = client.put(f"/api/reports/{report_id}", json={"status": "approved"}).json()["report"]

        assert report["severity"] == "critical"

    def test_reject_clears_severity(self, client):
        report_id = client.post("/api/reports", json={
            "text_report": "Fire", "admin_created": True, "pre_approved": True, "severity": "high",
        }).json()["report"]["id"]

        report = client.put(f"/api/reports/{report_id}", json={"status": "rejected", "severity": "high"}).json()["report"]

        assert report["status"] == "rejected"
        assert report["severity"] is None

    def test_update_missing_and_invalid(self, client):
        assert client.put("/api/reports/nope", json={"status": "approved"}).status_code == 404
        assert client.put("/api/reports/nope", json={"status": "archived"}).status_code == 400

    def test_delete(self, client, hub):
        report_id = client.post("/api/reports", json={"text_report": "Power out"}).json()["report"]["id"]
        sub = hub.subscribe()

        response = client.delete(f"/api/reports/{report_id}")

        assert response.json() == {"success": True, "message": "Report deleted successfully"}
        assert _event(sub)["data"] == {"id": report_id}
        assert client.delete(f"/api/reports/{report_id}").status_code == 404


class TestAnalysisEndpoints:
    """분석 엔드포인트 테스트"""

    def test_classify_preview_does_not_persist(self, client):
        response = client.post("/api/classify", json={"text": "Tornado touched down, roofs torn off"})

        assert response.status_code == 200
        assert response.json()["type"] == "storm"
        assert client.get("/api/reports").json() == []

    def test_classify_empty_text(self, client):
        result = client.post("/api/classify", json={}).json()

        assert result["type"] == "outage"
        assert result["confidence"] == 0.7

    def test_summary(self, client):
        client.post("/api/reports", json={"text_report": "Fire on Main Street"})
        client.post("/api/reports", json={"text_report": "Flooded basement"})

        body = client.get("/api/summary").json()

        assert set(body) == {"summary", "keyPoints", "riskLevel"}
        assert body["riskLevel"] == "low"

    def test_summary_status_filter(self, client):
        client.post("/api/reports", json={"text_report": "Fire on Main Street"})

        approved = client.get("/api/summary", params={"status": "approved"}).json()

        assert approved["keyPoints"] == []
        assert client.get("/api/summary", params={"status": "bogus"}).status_code == 400

    def test_emergency(self, client):
        assert client.get("/api/emergency").json()["is_emergency"] is False

        client.post("/api/alerts", json=dict(ALERT_BODY, severity="critical"))
        body = client.get("/api/emergency").json()

        assert body["is_emergency"] is True
        assert len(body["alerts"]) == 1
        assert len(body["messages"]) == 1

    def test_debug(self, client, hub):
        hub.subscribe()
        client.post("/api/alerts", json=ALERT_BODY)

        body = client.get("/api/debug").json()

        assert body["store"] == "chain"
        assert body["subscribers"] == 1
        assert body["alerts"]["total"] == 1
        assert body["reports"]["total"] == 0


class TestStoreFailure:
    """저장소 장애 시 응답 테스트"""

    def test_list_failure_is_500(self, down_client):
        response = down_client.get("/api/alerts")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch alerts"

    def test_failed_persist_does_not_broadcast(self, down_client, hub):
        sub = hub.subscribe()

        response = down_client.post("/api/reports", json={"text_report": "Fire"})

        assert response.status_code == 500
        assert sub.queue.empty()

    def test_ready_is_503(self, down_client):
        assert down_client.get("/ready").status_code == 503


class TestServiceEndpoints:
    """서비스 엔드포인트 테스트"""

    def test_health_endpoint(self, client):
        data = client.get("/health").json()

        assert data["status"] == "ok"
        assert data["service"] == "test-service"

    def test_ready_endpoint(self, client):
        data = client.get("/ready").json()

        assert data["status"] == "ready"
        assert data["store"] == "chain"

    def test_metrics_endpoint(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "uptime_seconds" in response.text

    def test_metrics_disabled(self, sample_settings):
        sample_settings.observability.metrics_enabled = False
        client = TestClient(create_app(sample_settings, store=MemoryStore()))

        assert client.get("/metrics").status_code == 503

    def test_info_endpoint(self, client):
        data = client.get("/info").json()

        assert data["version"] == "1.0.0"
        assert data["subscribers"] == 0

    def test_root_lists_endpoints(self, client):
        endpoints = client.get("/").json()["endpoints"]

        assert endpoints["events"] == "/api/events"

    def test_lifespan_runs_store_init(self, sample_settings, temp_db_path):
        sample_settings.storage.sqlite_enabled = True
        sample_settings.storage.sqlite_path = temp_db_path

        with TestClient(create_app(sample_settings)) as client:
            created = client.post("/api/alerts", json=ALERT_BODY)
            assert created.status_code == 201
            assert client.get("/ready").json()["store"] == "chain"


class TestBuildStore:
    """저장소 체인 구성 테스트"""

    def test_memory_only(self, sample_settings):
        chain = build_store(sample_settings)

        assert [s.name for s in chain.sources] == ["memory"]

    def test_chain_carries_limits(self, sample_settings):
        sample_settings.storage.alerts_limit = 7
        sample_settings.storage.reports_limit = 9

        chain = build_store(sample_settings)

        assert (chain.alerts_limit, chain.reports_limit) == (7, 9)

    def test_full_order(self, sample_settings):
        sample_settings.supabase.url = "https://demo.supabase.co"
        sample_settings.supabase.key = "anon"
        sample_settings.storage.sqlite_enabled = True

        chain = build_store(sample_settings)

        assert [s.name for s in chain.sources] == ["supabase", "sqlite", "memory"]

    def test_memory_added_when_nothing_else(self, sample_settings):
        sample_settings.storage.memory_fallback = False

        assert [s.name for s in build_store(sample_settings).sources] == ["memory"]
