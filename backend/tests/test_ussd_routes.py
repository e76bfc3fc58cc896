from mobilespo.core.config import settings
from mobilespo.main import app
from mobilespo.ussd.replies import TEXTS

GATEWAY = "/api/v1/ussd/gateway"
ENGLISH = TEXTS["english"]


def gateway(client, text="", session_id="gw-1", phone="0821234567", **kwargs):
    return client.post(GATEWAY, json={"phoneNumber": phone, "text": text, "sessionId": session_id}, **kwargs)


def test_first_contact_returns_main_menu(client):
    response = gateway(client)
    assert response.status_code == 200
    assert response.json() == {
        "message": ENGLISH["main_menu"],
        "continueSession": True,
        "type": "menu",
    }


def test_phone_number_is_normalized_before_the_menu(client):
    gateway(client, phone="082 123 4567")
    session = app.state.session_store.get("gw-1")
    assert session.phone_number == "+27821234567"


def test_dialog_over_http(client):
    gateway(client)
    assert gateway(client, "1").json()["type"] == "input"
    assert gateway(client, "0").json()["type"] == "menu"

    body = gateway(client, "2").json()
    assert body["type"] == "end"
    assert body["continueSession"] is False
    assert body["message"] == ENGLISH["emergency_info"]


def test_missing_text_defaults_to_empty(client):
    response = client.post(GATEWAY, json={"phoneNumber": "0821234567", "sessionId": "gw-2"})
    assert response.status_code == 200
    assert response.json()["type"] == "menu"


def test_missing_fields_are_rejected(client):
    for body in ({"text": "1", "sessionId": "x"}, {"phoneNumber": "0821234567"}, {"phoneNumber": "abc", "sessionId": "x"}):
        response = client.post(GATEWAY, json=body)
        assert response.status_code == 400
        assert response.json()["continueSession"] is False
        assert response.json()["type"] == "error"


def test_rate_limit_per_phone_number(client):
    for i in range(settings.USSD_RATE_LIMIT):
        assert gateway(client, session_id=f"rl-{i}").status_code == 200

    response = gateway(client, session_id="rl-over")
    assert response.status_code == 429
    assert response.json() == {
        "message": ENGLISH["rate_limited"],
        "continueSession": False,
        "type": "error",
    }

    assert gateway(client, session_id="rl-other", phone="0831234567").status_code == 200


def test_emergency_chat_over_gateway_sends_sms(client, notifier):
    gateway(client)
    gateway(client, "1")
    body = gateway(client, "I feel anxious and want to end my life").json()

    assert body["type"] == "end"
    assert body["message"] == ENGLISH["emergency_info"]
    assert notifier.calls[0]["channel"] == "sms"
    assert notifier.calls[0]["recipient"] == "+27821234567"


def test_provider_auth_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "production")
    monkeypatch.setattr(settings, "USSD_PROVIDER_API_KEY", "secret")

    response = gateway(client)
    assert response.status_code == 401
    assert response.json()["type"] == "error"

    assert gateway(client, headers={"X-API-Key": "wrong"}).status_code == 401
    assert gateway(client, headers={"X-API-Key": "secret"}).status_code == 200


def test_status(client):
    body = client.get("/api/v1/ussd/status").json()
    assert body["status"] == "operational"
    assert "isiZulu" in body["supportedLanguages"]
    assert "Health Tips" in body["features"]


def test_webhook_session_end_drops_session(client):
    gateway(client, session_id="wh-1")
    assert app.state.session_store.get("wh-1") is not None

    response = client.post("/api/v1/ussd/webhook", json={"event": "session_ended", "sessionId": "wh-1"})
    assert response.json() == {"status": "acknowledged"}
    assert app.state.session_store.get("wh-1") is None


def test_webhook_other_events(client):
    started = client.post("/api/v1/ussd/webhook", json={"event": "session_started", "sessionId": "x"})
    assert started.json() == {"status": "acknowledged"}

    unknown = client.post("/api/v1/ussd/webhook", json={"event": "reboot"})
    assert unknown.json() == {"status": "unknown_event"}


def test_test_endpoint_includes_debug(client):
    body = client.post("/api/v1/ussd/test", json={}).json()
    assert body["type"] == "menu"
    assert body["debug"]["sessionId"] == "test_session"
    assert body["debug"]["phoneNumber"] == "+27123456789"


def test_test_endpoint_hidden_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "APP_ENV", "production")
    response = client.post("/api/v1/ussd/test", json={})
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not found"}


def test_rate_limit_counts_one_subscriber_across_formats(client):
    formats = ["0821234567", "+27821234567", "27821234567"]
    accepted = 0
    for i in range(30):
        response = gateway(client, session_id=f"fmt-{i}", phone=formats[i % 3])
        accepted += response.status_code == 200

    assert accepted == settings.USSD_RATE_LIMIT


def test_analytics_reports_live_sessions(client):
    gateway(client, session_id="an-1")
    gateway(client, session_id="an-2", phone="0831234567")
    gateway(client, "5", session_id="an-2", phone="0831234567")
    gateway(client, "3", session_id="an-2", phone="0831234567")

    body = client.get("/api/v1/ussd/analytics").json()
    assert body["activeSessions"] == 2
    assert body["activeUsers"] == 2
    assert {"language": "isiZulu", "sessions": 1} in body["languageDistribution"]
    assert {"language": "English", "sessions": 1} in body["languageDistribution"]
    assert body["stateDistribution"] == {"main_menu": 2}
