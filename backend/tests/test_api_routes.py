from __future__ import annotations

import itertools
import random
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ai.providers.simulated import SimulatedOpenAIProvider  # noqa: E402
from auth.utils import create_token  # noqa: E402
from db.repository import Storage  # noqa: E402
from main import create_app  # noqa: E402
from services.seed_service import seed_demo_data  # noqa: E402
from services.slack_service import SimulatedSlackSender  # noqa: E402


def _build_app(storage: Storage | None = None, demo_auto_login: bool = False):
    counter = itertools.count(1)
    storage = storage or Storage(id_factory=lambda: f"id-{next(counter)}")
    app = create_app(
        storage,
        draft_provider=SimulatedOpenAIProvider(latency_scale=0, rng=random.Random(1)),
        message_sender=SimulatedSlackSender(latency_scale=0),
        seed=False,
        demo_auto_login=demo_auto_login,
    )
    return app, storage


def _register(client: TestClient, email: str, password: str = "Secret!123") -> dict:
    resp = client.post("/api/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def app_and_storage():
    return _build_app()


@pytest.fixture
def client(app_and_storage):
    app, _ = app_and_storage
    client = TestClient(app)
    _register(client, "agent@expiestack.com")
    return client


def test_health_check(app_and_storage):
    app, _ = app_and_storage
    resp = TestClient(app).get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_register_login_me_logout_flow(app_and_storage):
    app, _ = app_and_storage
    client = TestClient(app)

    user = _register(client, "Agent@ExpieStack.com")
    assert user["email"] == "agent@expiestack.com"
    assert "password" not in user

    dup = client.post("/api/auth/register", json={"email": "agent@expiestack.com", "password": "Secret!123"})
    assert dup.status_code == 400

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]

    assert client.post("/api/auth/logout").json() == {"message": "Logged out successfully"}
    client.cookies.clear()
    assert client.get("/api/auth/me").status_code == 401

    bad = client.post("/api/auth/login", json={"email": "agent@expiestack.com", "password": "wrong"})
    assert bad.status_code == 401
    ok = client.post("/api/auth/login", json={"email": "agent@expiestack.com", "password": "Secret!123"})
    assert ok.status_code == 200
    assert client.get("/api/auth/me").status_code == 200


def test_bearer_token_is_accepted(app_and_storage):
    app, storage = app_and_storage
    user = storage.users.create(email="bearer@expiestack.com", password="hash")
    resp = TestClient(app).get("/api/auth/me", headers={"Authorization": f"Bearer {create_token(user.id)}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "bearer@expiestack.com"


def test_demo_auto_login_uses_seeded_user():
    storage = Storage()
    seed_demo_data(storage, password="demo-pass")
    app, _ = _build_app(storage, demo_auto_login=True)
    resp = TestClient(app).get("/api/auth/me")
    assert resp.status_code == 200
    assert resp.json()["email"] == "sarah@expiestack.com"


def test_validation_errors_map_to_400(client):
    resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid input data"
    assert body["errors"]

    assert client.post("/api/time-saved", json={"action_type": "x", "minutes_saved": -1}).status_code == 400
    assert client.patch("/api/user/settings", json={"mode": "sleepy"}).status_code == 400


def test_user_settings_patch(client):
    resp = client.patch("/api/user/settings", json={"mode": "focus", "onboarding_complete": True})
    assert resp.status_code == 200
    assert resp.json()["mode"] == "focus"
    assert resp.json()["onboarding_complete"] is True


def test_tools_connect_and_update(client):
    created = client.post("/api/tools", json={"tool_name": "slack"})
    assert created.status_code == 201
    assert created.json()["status"] == "pending"

    tool_id = created.json()["id"]
    updated = client.patch(f"/api/tools/{tool_id}", json={"status": "connected"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "connected"
    assert len(client.get("/api/tools").json()) == 1
    assert client.patch("/api/tools/missing", json={"status": "connected"}).status_code == 404


def test_canned_response_lifecycle(client):
    created = client.post(
        "/api/canned-responses",
        json={"title": "FAQ answer", "content": "Thanks for asking", "tags": ["faq", "faq"]},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["tags"] == ["faq"]
    assert body["usage_count"] == 0
    client.post("/api/canned-responses", json={"title": "Pitch", "content": "Buy now", "tags": ["sales"]})

    faq = client.get("/api/canned-responses", params={"tag": "faq"}).json()
    assert [r["id"] for r in faq] == [body["id"]]

    used = client.post(f"/api/canned-responses/{body['id']}/use")
    assert used.json() == {"message": "Usage incremented and time saved logged"}
    assert client.get(f"/api/canned-responses/{body['id']}").json()["usage_count"] == 1

    patched = client.patch(f"/api/canned-responses/{body['id']}", json={"title": "FAQ v2"})
    assert patched.json()["title"] == "FAQ v2"
    assert patched.json()["content"] == "Thanks for asking"

    assert client.delete(f"/api/canned-responses/{body['id']}").status_code == 204
    assert client.delete(f"/api/canned-responses/{body['id']}").status_code == 404
    assert client.get(f"/api/canned-responses/{body['id']}").status_code == 404

    assert client.get("/api/time-saved/total").json()["minutes"] == 1


def test_canned_response_suggestion(client):
    resp = client.post("/api/canned-responses/suggest", json={"title": "Pricing question", "tags": ["fees"]})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Pricing question"
    assert resp.json()["content"].startswith("[fees]")


def test_other_users_records_look_missing(app_and_storage, client):
    app, _ = app_and_storage
    response_id = client.post("/api/canned-responses", json={"title": "Mine", "content": "C"}).json()["id"]
    item_id = client.post("/api/action-items", json={"text": "Mine"}).json()["id"]

    intruder = TestClient(app)
    _register(intruder, "intruder@expiestack.com")
    assert intruder.get(f"/api/canned-responses/{response_id}").status_code == 404
    assert intruder.post(f"/api/canned-responses/{response_id}/use").status_code == 404
    assert intruder.patch(f"/api/action-items/{item_id}", json={"status": "completed"}).status_code == 404
    assert intruder.delete(f"/api/action-items/{item_id}").status_code == 404
    assert intruder.get("/api/canned-responses").json() == []
    assert client.get(f"/api/canned-responses/{response_id}").json()["usage_count"] == 0


def test_action_items_crud_and_status_filter(client):
    first = client.post("/api/action-items", json={"text": "Call lender", "source": "email"}).json()
    client.post("/api/action-items", json={"text": "Send comps", "status": "in_progress"})

    updated = client.patch(f"/api/action-items/{first['id']}", json={"status": "completed"}).json()
    assert updated["status"] == "completed"
    assert updated["text"] == "Call lender"
    assert updated["source"] == "email"

    completed = client.get("/api/action-items", params={"status": "completed"}).json()
    assert [i["id"] for i in completed] == [first["id"]]
    assert len(client.get("/api/action-items").json()) == 2
    assert client.get("/api/action-items", params={"status": "bogus"}).status_code == 400

    assert client.delete(f"/api/action-items/{first['id']}").status_code == 204
    assert len(client.get("/api/action-items").json()) == 1


def test_action_item_patch_with_null_clears_optional_fields(client):
    item = client.post(
        "/api/action-items",
        json={"text": "Send comps", "due_date": "2026-05-01T09:00:00Z", "source": "email"},
    ).json()
    assert item["due_date"] is not None

    untouched = client.patch(f"/api/action-items/{item['id']}", json={"status": "in_progress"}).json()
    assert untouched["due_date"] == item["due_date"]
    assert untouched["source"] == "email"

    cleared = client.patch(f"/api/action-items/{item['id']}", json={"due_date": None, "source": None})
    assert cleared.status_code == 200
    assert cleared.json()["due_date"] is None
    assert cleared.json()["source"] is None
    assert cleared.json()["text"] == "Send comps"
    assert cleared.json()["status"] == "in_progress"

    kept = client.patch(f"/api/action-items/{item['id']}", json={"text": None, "status": None}).json()
    assert kept["text"] == "Send comps"
    assert kept["status"] == "in_progress"


def test_action_item_draft_and_outputs(client):
    item = client.post("/api/action-items", json={"text": "Draft copy for a LinkedIn post"}).json()
    output = client.post(f"/api/action-items/{item['id']}/gpt")
    assert output.status_code == 200
    assert output.json()["tool_used"] == "openai"
    assert "LinkedIn Post Draft" in output.json()["output"]

    outputs = client.get(f"/api/action-items/{item['id']}/outputs").json()
    assert [o["id"] for o in outputs] == [output.json()["id"]]
    assert client.get("/api/time-saved/total").json()["minutes"] == 2
    assert client.post("/api/action-items/missing/gpt").status_code == 404


def test_transcript_extraction(client):
    resp = client.post("/api/action-items/extract", json={"transcript": "Quick sync"})
    assert resp.status_code == 201
    items = resp.json()
    assert 3 <= len(items) <= 5
    assert all(i["source"] == "transcript" and i["status"] == "pending" for i in items)
    assert client.get("/api/time-saved/total").json()["minutes"] == 2 * len(items)


def test_automation_lifecycle(client):
    created = client.post(
        "/api/automations",
        json={"trigger_type": "weekly", "action": "Send check-in", "tool": "slack"},
    )
    assert created.status_code == 201
    automation = created.json()
    assert automation["last_run"] is None
    assert automation["is_enabled"] is True

    ran = client.post(f"/api/automations/{automation['id']}/run").json()
    assert ran["last_run"] is not None
    assert ran["is_enabled"] is True

    toggled = client.patch(f"/api/automations/{automation['id']}", json={"is_enabled": False}).json()
    assert toggled["is_enabled"] is False
    assert toggled["last_run"] == ran["last_run"]

    assert client.get("/api/time-saved/total").json() == {"minutes": 8, "hours": 8 / 60}
    assert client.post("/api/automations/missing/run").status_code == 404
    assert client.delete(f"/api/automations/{automation['id']}").status_code == 204
    assert client.get("/api/automations").json() == []


def test_automation_suggestion(client):
    resp = client.post("/api/automations/suggest", json={"activity_history": "many client emails"})
    assert resp.status_code == 200
    assert resp.json()["tool"] == "Gmail"
    assert set(resp.json()) == {"trigger", "action", "tool", "timeSaved", "description"}
    assert resp.json()["timeSaved"] > 0


def test_time_saved_ledger(client):
    for minutes in (5, 3, 10):
        assert client.post("/api/time-saved", json={"action_type": "automation", "minutes_saved": minutes}).status_code == 201
    assert len(client.get("/api/time-saved").json()) == 3
    assert client.get("/api/time-saved/total").json()["minutes"] == 18


def test_achievements(client):
    created = client.post("/api/achievements", json={"badge": "first_login"})
    assert created.status_code == 201
    assert created.json()["earned_at"] is not None
    assert [a["badge"] for a in client.get("/api/achievements").json()] == ["first_login"]


def test_accessibility_defaults_create_then_update(app_and_storage, client):
    _, storage = app_and_storage
    assert client.get("/api/accessibility").json() == {
        "large_text": False,
        "dark_mode": False,
        "reduce_motion": False,
        "high_contrast": False,
    }

    first = client.post("/api/accessibility", json={"dark_mode": True})
    assert first.status_code == 201
    second = client.post("/api/accessibility", json={"large_text": True})
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["dark_mode"] is True
    assert second.json()["large_text"] is True
    assert len(storage.db.table("accessibility_preferences")) == 1


def test_slack_routes(client):
    channels = client.get("/api/slack/channels").json()
    assert len(channels) == 5
    assert channels[0]["name"] == "general"

    sent = client.post("/api/slack/send", json={"channel": "#leads", "text": "New lead"})
    assert sent.status_code == 200
    assert sent.json()["channel"] == "C111222JKLM"
    assert sent.json()["ts"]

    assert client.post("/api/slack/send", json={"channel": "#nope", "text": "x"}).status_code == 404

    response_id = client.post("/api/canned-responses", json={"title": "T", "content": "Hello team"}).json()["id"]
    shared = client.post(f"/api/slack/canned-responses/{response_id}", json={"channel": "general"})
    assert shared.status_code == 200
    assert shared.json()["text"] == "Hello team"
    assert client.get(f"/api/canned-responses/{response_id}").json()["usage_count"] == 1
    assert client.post("/api/slack/canned-responses/missing", json={"channel": "general"}).status_code == 404


def test_unhandled_errors_return_500(app_and_storage, client):
    app, storage = app_and_storage

    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    storage.time_saved.sum_by_owner = broken
    token = create_token(client.get("/api/auth/me").json()["id"])
    resp = TestClient(app, raise_server_exceptions=False).get(
        "/api/time-saved/total", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}
