import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from mobilespo.core.security import create_access_token
from mobilespo.main import app
from mobilespo.routers.api.ussd import ussd_rate_limiter
from mobilespo.services.emergency_service import EmergencyService
from mobilespo.ussd.handler import UssdMenu
from mobilespo.ussd.session_store import InMemorySessionStore


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class RecordingNotifier:
    def __init__(self, error=None, delay=0):
        self.calls = []
        self.error = error
        self.delay = delay

    async def notify(self, recipient, channel, message, event="notification"):
        self.calls.append({"recipient": recipient, "channel": channel, "message": message, "event": event})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return {"success": True, "channel": channel, "status": "sent", "provider": "fake"}


def first_tip(tips):
    return tips[0]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(timeout=300, clock=clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def escalation(notifier):
    return EmergencyService(notifier, timeout=1)


@pytest.fixture
def menu(store, escalation):
    return UssdMenu(store, escalation=escalation, tip_chooser=first_tip)


@pytest.fixture
def dial(menu):
    """Send one USSD input synchronously."""
    def _dial(text, session_id="sess-1", phone="+27821234567"):
        return asyncio.run(menu.handle(phone, text, session_id))
    return _dial


@pytest.fixture
def client(notifier):
    ussd_rate_limiter.reset()
    with TestClient(app) as test_client:
        emergency_service = EmergencyService(notifier, timeout=1)
        app.state.emergency_service = emergency_service
        app.state.ussd_menu.escalation = emergency_service
        yield test_client
    ussd_rate_limiter.reset()


@pytest.fixture
def auth_headers():
    token = create_access_token({"user_id": "user-42", "role": "patient"})
    return {"Authorization": f"Bearer {token}"}
