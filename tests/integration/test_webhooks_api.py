"""
API tests for webhook administration.
"""

from datetime import datetime

import httpx
import pytest

from app.core.config import settings
from app.core.webhooks.events import WebhookEventType

BASE = f"{settings.API_PREFIX}/webhooks"

WEBHOOK_BODY = {
    "name": "CRM sync",
    "url": "https://crm.example.com/hooks/chat",
    "auth_type": "bearer",
    "auth_config": {"bearer": {"token": "tok"}},
    "headers": {"X-Source": "support-chat"},
    "events": ["conversation.created", "conversation.closed"],
}


@pytest.fixture
def created(test_client, admin_headers):
    response = test_client.post(BASE, json=WEBHOOK_BODY, headers=admin_headers)
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
class TestAccessControl:

    def test_requires_authentication(self, test_client):
        response = test_client.get(BASE)
        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTHENTICATION_ERROR"

    def test_rejects_invalid_token(self, test_client):
        response = test_client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_requires_admin_role(self, test_client, attendant_headers):
        response = test_client.get(BASE, headers=attendant_headers)
        assert response.status_code == 403
        assert response.json()["error_code"] == "AUTHORIZATION_ERROR"

    def test_every_route_is_guarded(self, test_client, attendant_headers):
        calls = [
            ("get", f"{BASE}/events"),
            ("get", f"{BASE}/some-id"),
            ("post", BASE),
            ("patch", f"{BASE}/some-id"),
            ("delete", f"{BASE}/some-id"),
            ("post", f"{BASE}/some-id/test"),
            ("get", f"{BASE}/some-id/logs"),
            ("get", f"{BASE}/some-id/stats"),
        ]
        for method, url in calls:
            response = getattr(test_client, method)(url, headers=attendant_headers)
            assert response.status_code == 403, (method, url)


@pytest.mark.integration
class TestCrud:

    def test_create(self, created):
        assert created["name"] == "CRM sync"
        assert created["enabled"] is True
        assert created["auth_type"] == "bearer"
        assert created["auth_config"] == {"bearer": {"token": "tok"}}
        assert created["events"] == ["conversation.created", "conversation.closed"]
        assert created["id"]

    def test_create_validation(self, test_client, admin_headers):
        response = test_client.post(BASE, json={"name": "x"}, headers=admin_headers)
        assert response.status_code == 422
        fields = {error["field"] for error in response.json()["details"]["errors"]}
        assert "body.url" in fields
        assert "body.auth_type" in fields

    def test_create_rejects_unknown_auth_type(self, test_client, admin_headers):
        body = {**WEBHOOK_BODY, "auth_type": "oauth"}
        assert test_client.post(BASE, json=body, headers=admin_headers).status_code == 422

    def test_list_and_get(self, test_client, admin_headers, created):
        listed = test_client.get(BASE, headers=admin_headers).json()
        assert [w["id"] for w in listed] == [created["id"]]

        fetched = test_client.get(f"{BASE}/{created['id']}", headers=admin_headers)
        assert fetched.status_code == 200
        assert fetched.json()["url"] == WEBHOOK_BODY["url"]

    def test_get_missing(self, test_client, admin_headers):
        response = test_client.get(f"{BASE}/missing", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Webhook not found"

    def test_patch_is_partial(self, test_client, admin_headers, created):
        response = test_client.patch(
            f"{BASE}/{created['id']}", json={"enabled": False}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["enabled"] is False
        assert body["name"] == "CRM sync"
        assert body["headers"] == {"X-Source": "support-chat"}

    def test_patch_clears_auth_config_and_touches_updated_at(self, test_client, admin_headers, created):
        response = test_client.patch(
            f"{BASE}/{created['id']}",
            json={"auth_type": "none", "auth_config": None},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["auth_type"] == "none"
        assert body["auth_config"] is None
        assert body["created_at"] == created["created_at"]
        assert datetime.fromisoformat(body["updated_at"]) > datetime.fromisoformat(created["updated_at"])

    def test_patch_missing(self, test_client, admin_headers):
        response = test_client.patch(f"{BASE}/missing", json={"name": "x"}, headers=admin_headers)
        assert response.status_code == 404

    def test_delete(self, test_client, admin_headers, created):
        response = test_client.delete(f"{BASE}/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Webhook deleted"}
        assert test_client.get(f"{BASE}/{created['id']}", headers=admin_headers).status_code == 404
        assert test_client.delete(f"{BASE}/{created['id']}", headers=admin_headers).status_code == 404


@pytest.mark.integration
def test_event_catalog(test_client, admin_headers):
    response = test_client.get(f"{BASE}/events", headers=admin_headers)

    assert response.status_code == 200
    catalog = response.json()
    assert {entry["value"] for entry in catalog} == {event.value for event in WebhookEventType}
    created = next(entry for entry in catalog if entry["value"] == "conversation.created")
    assert created["group"] == "conversations"
    assert created["example"]["event"] == "conversation.created"


@pytest.mark.integration
class TestDeliveryRoutes:

    def test_test_endpoint_default_payload(self, test_client, admin_headers, created, transport):
        response = test_client.post(f"{BASE}/{created['id']}/test", headers=admin_headers)

        assert response.status_code == 200
        result = response.json()
        assert result["success"] is True
        assert result["status"] == 200
        assert result["body"] == "ok"

        request = transport.requests[0]
        assert str(request.url) == WEBHOOK_BODY["url"]
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.headers["X-Source"] == "support-chat"
        assert transport.bodies()[0]["event"] == "test"

    def test_test_endpoint_reports_receiver_failure(self, test_client, admin_headers, created, transport):
        transport.respond(WEBHOOK_BODY["url"], 500, "boom")

        result = test_client.post(
            f"{BASE}/{created['id']}/test",
            json={"event": "conversation.closed", "payload": {"custom": True}},
            headers=admin_headers,
        ).json()

        assert result["success"] is False
        assert result["status"] == 500
        assert result["error"] == "HTTP 500: Internal Server Error"
        assert transport.bodies() == [{"custom": True}]

    def test_test_endpoint_transport_error(self, test_client, admin_headers, created, transport):
        transport.fail(WEBHOOK_BODY["url"], httpx.ConnectError("Name or service not known"))

        result = test_client.post(f"{BASE}/{created['id']}/test", headers=admin_headers).json()

        assert result["success"] is False
        assert result["status"] is None
        assert result["error"] == "Name or service not known"

    def test_test_missing_webhook(self, test_client, admin_headers, transport):
        response = test_client.post(f"{BASE}/missing/test", headers=admin_headers)
        assert response.status_code == 404
        assert transport.requests == []

    def test_logs_and_stats(self, test_client, admin_headers, created, transport):
        url = f"{BASE}/{created['id']}"
        test_client.post(f"{url}/test", headers=admin_headers)
        transport.respond(WEBHOOK_BODY["url"], 502, "bad gateway")
        test_client.post(f"{url}/test", headers=admin_headers)

        logs = test_client.get(f"{url}/logs", headers=admin_headers).json()
        assert len(logs) == 2
        assert {log["success"] for log in logs} == {True, False}
        assert all(log["webhook_id"] == created["id"] for log in logs)

        limited = test_client.get(f"{url}/logs", params={"limit": 1}, headers=admin_headers).json()
        assert len(limited) == 1

        stats = test_client.get(f"{url}/stats", headers=admin_headers).json()
        assert stats["total_deliveries"] == 2
        assert stats["successful_deliveries"] == 1
        assert stats["success_rate"] == 50.0

    def test_logs_limit_bounds(self, test_client, admin_headers, created):
        url = f"{BASE}/{created['id']}/logs"
        assert test_client.get(url, params={"limit": 0}, headers=admin_headers).status_code == 422
        assert test_client.get(
            url, params={"limit": settings.WEBHOOK_LOG_MAX_LIMIT + 1}, headers=admin_headers
        ).status_code == 422

    def test_logs_of_unknown_webhook_are_empty(self, test_client, admin_headers):
        response = test_client.get(f"{BASE}/missing/logs", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_stats_of_unknown_webhook(self, test_client, admin_headers):
        response = test_client.get(f"{BASE}/missing/stats", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["details"] == {"webhook_id": "missing"}

    def test_test_event_name_is_bounded(self, test_client, admin_headers, created, transport):
        url = f"{BASE}/{created['id']}/test"

        too_long = test_client.post(url, json={"event": "e" * 101}, headers=admin_headers)
        empty = test_client.post(url, json={"event": ""}, headers=admin_headers)

        assert too_long.status_code == 422
        assert empty.status_code == 422
        assert transport.requests == []
        assert test_client.get(f"{BASE}/{created['id']}/logs", headers=admin_headers).json() == []

    def test_unencodable_credentials_are_reported_and_logged(self, test_client, admin_headers, transport):
        body = {
            **WEBHOOK_BODY,
            "auth_type": "apikey",
            "auth_config": {"apikey": {"header": "X-API-Key", "value": "chave-ção"}},
        }
        webhook_id = test_client.post(BASE, json=body, headers=admin_headers).json()["id"]

        response = test_client.post(f"{BASE}/{webhook_id}/test", headers=admin_headers)

        assert response.status_code == 200
        result = response.json()
        assert result["success"] is False
        assert result["status"] is None
        assert result["error"]
        assert transport.requests == []

        logs = test_client.get(f"{BASE}/{webhook_id}/logs", headers=admin_headers).json()
        assert len(logs) == 1
        assert logs[0]["success"] is False
        assert logs[0]["event_type"] == "test"
