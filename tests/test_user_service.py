import pytest

from application.services import user_service as us
from application.services.user_service import UserApplicationService
from domain.user.events import UserCredentialsChanged, UserRegistered


class RecordingLogger:
    """Same call shape as structlog's BoundLogger.info(event, **kw)."""

    def __init__(self):
        self.records = []

    def info(self, event, **kw):
        self.records.append((event, kw))


class EventSource:
    def __init__(self, events):
        self._events = events

    def get_domain_events(self):
        return list(self._events)


def test_domain_events_are_logged_with_type_and_user(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(us, "logger", recorder)
    registered = UserRegistered(user_id=7, email="new@example.com")
    changed = UserCredentialsChanged(user_id=7, updated_fields=["email"])

    UserApplicationService(uow_factory=None)._log_events(EventSource([registered, changed]))

    assert recorder.records == [
        ("user_domain_event", {"event_type": "UserRegistered", "event_id": registered.event_id, "user_id": 7}),
        ("user_domain_event", {"event_type": "UserCredentialsChanged", "event_id": changed.event_id, "user_id": 7}),
    ]


@pytest.mark.asyncio
async def test_register_update_delete_succeed_end_to_end(client):
    created = await client.post(
        "/api/v1/auth/register", json={"email": "a@example.com", "password": "secret123"}
    )
    assert created.status_code == 200, created.text
    user_id = created.json()["result"]["id"]

    login = await client.post("/api/v1/auth/login", json={"email": "a@example.com", "password": "secret123"})
    headers = {"Authorization": f"Bearer {login.json()['result']['token']}"}

    updated = await client.put(f"/api/v1/users/{user_id}", json={"password": "another123"}, headers=headers)
    assert updated.status_code == 200, updated.text

    deleted = await client.delete(f"/api/v1/users/{user_id}", headers=headers)
    assert deleted.status_code == 200, deleted.text
