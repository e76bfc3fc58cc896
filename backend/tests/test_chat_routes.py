import asyncio

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from mobilespo.core.security import create_access_token
from mobilespo.main import app
from mobilespo.routers.api.realtime import notifications_socket
from mobilespo.services.realtime import manager


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["service"] == "mobile-spo-backend"


def test_emergency_resources(client):
    body = client.get("/api/v1/emergency/resources").json()
    assert body["success"] is True
    assert body["data"]["emergency"]["number"] == "10177"
    assert body["data"]["local"]["hours"].startswith("Open 24/7")


def test_chat_test_endpoint(client):
    response = client.post("/api/v1/chat/test", json={"message": "  I have a fever  "})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["medical_topics"] == ["illness"]
    assert data["is_emergency"] is False
    assert data["emergency"] is None
    assert len(data["disclaimers"]) == 4


def test_chat_test_endpoint_flags_emergency_without_escalating(client, notifier):
    data = client.post("/api/v1/chat/test", json={"message": "I want to die"}).json()["data"]
    assert data["is_emergency"] is True
    assert data["emergency_level"] == "critical"
    assert data["emergency"]["resources"]["suicide"]["name"] == "Suicide Prevention Lifeline"
    assert notifier.calls == []


def test_chat_validation(client):
    for message in ("   ", "x" * 1001):
        response = client.post("/api/v1/chat/test", json={"message": message})
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"


def test_chat_message_requires_auth(client):
    response = client.post("/api/v1/chat/message", json={"message": "hello"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Not authenticated"}

    response = client.post(
        "/api/v1/chat/message",
        json={"message": "hello"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_chat_message(client, auth_headers, notifier):
    response = client.post(
        "/api/v1/chat/message",
        json={
            "message": "My back pain is getting worse",
            "conversation_id": "c-1",
            "history": [{"role": "user", "content": "hi"}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["conversation_id"] == "c-1"
    assert data["medical_topics"] == ["pain_management"]
    assert data["is_emergency"] is False
    assert notifier.calls == []


def test_chat_message_escalates_emergency(client, auth_headers, notifier):
    response = client.post(
        "/api/v1/chat/message",
        json={"message": "I think I'm having a heart attack"},
        headers=auth_headers,
    )
    data = response.json()["data"]
    assert data["is_emergency"] is True
    assert data["emergency_level"] == "high"
    assert [a["type"] for a in data["emergency"]["actions"]] == [
        "urgent_support", "crisis_resources", "safety_check",
    ]

    assert len(notifier.calls) == 1
    assert notifier.calls[0]["recipient"] == "user-42"
    assert notifier.calls[0]["channel"] == "realtime"
    assert notifier.calls[0]["event"] == "emergency_detected"


def test_chat_message_accepts_cookie_token(client):
    token = create_access_token({"user_id": 7})
    client.cookies.set("access_token", token)
    response = client.post("/api/v1/chat/message", json={"message": "hello"})
    assert response.status_code == 200


def test_websocket_receives_emergency_event():
    token = create_access_token({"user_id": "ws-user"})
    with TestClient(app) as client:
        with client.websocket_connect(f"/ws/notifications?token={token}") as websocket:
            client.post(
                "/api/v1/chat/message",
                json={"message": "I want to end my life"},
                headers={"Authorization": f"Bearer {token}"},
            )
            event = websocket.receive_json()

    assert event["event"] == "emergency_detected"
    assert event["data"]["level"] == "critical"
    assert event["data"]["plan"]["user_id"] == "ws-user"


def test_websocket_rejects_bad_token():
    with TestClient(app) as client:
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws/notifications?token=bad"):
                pass


def test_chat_message_keeps_resources_when_escalation_fails(client, auth_headers):
    class ExplodingEscalation:
        async def handle_emergency_response(self, *args, **kwargs):
            raise RuntimeError("escalation crashed")

    app.state.emergency_service = ExplodingEscalation()
    response = client.post("/api/v1/chat/message", json={"message": "suicide"}, headers=auth_headers)

    assert response.status_code == 200
    emergency = response.json()["data"]["emergency"]
    assert emergency["level"] == "critical"
    assert emergency["resources"]["crisis"]["number"] == "0800 567 567"
    assert emergency["actions"][0]["type"] == "immediate_intervention"


def test_socket_leaves_room_on_unexpected_error():
    class BrokenSocket:
        async def accept(self):
            pass

        async def receive_text(self):
            raise RuntimeError("connection reset")

    token = create_access_token({"user_id": "flaky"})
    with pytest.raises(RuntimeError):
        asyncio.run(notifications_socket(BrokenSocket(), token))

    assert "user_flaky" not in manager.rooms
