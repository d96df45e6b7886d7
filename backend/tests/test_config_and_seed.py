from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from auth.utils import verify_password  # noqa: E402
from config import Settings  # noqa: E402
from db.repository import Storage  # noqa: E402
from services.seed_service import DEMO_BADGES, seed_demo_data  # noqa: E402


def _hardened(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "production",
        "SECRET_KEY": "a-long-and-unique-production-secret",
        "DEMO_AUTO_LOGIN": False,
        "SEED_DEMO_DATA": False,
        "AUTH_COOKIE_SECURE": True,
    }
    values.update(overrides)
    return Settings(**values)


def test_development_settings_skip_the_security_gate():
    Settings(ENVIRONMENT="development").validate_security_configuration()


def test_hardened_production_settings_pass():
    _hardened().validate_security_configuration()


@pytest.mark.parametrize(
    "overrides",
    [
        {"SECRET_KEY": "change-me-in-production"},
        {"SECRET_KEY": "short"},
        {"DEMO_AUTO_LOGIN": True},
        {"SEED_DEMO_DATA": True},
        {"AUTH_COOKIE_SECURE": False},
    ],
)
def test_production_security_gate_rejects_unsafe_values(overrides):
    with pytest.raises(RuntimeError):
        _hardened(**overrides).validate_security_configuration()


def test_seeding_creates_demo_users_and_main_workspace():
    storage = Storage()
    users = seed_demo_data(storage, password="demo-pass")

    assert [u.email for u in users] == [
        "sarah@expiestack.com",
        "michael@expiestack.com",
        "alex@expiestack.com",
    ]
    sarah = users[0]
    assert sarah.mode == "hype"
    assert verify_password("demo-pass", sarah.password)

    assert len(storage.connected_tools.list_by_owner(sarah.id)) == 5
    responses = storage.canned_responses.list_by_owner(sarah.id)
    assert len(responses) == 3
    assert all(r.usage_count == 0 for r in responses)
    assert len(storage.action_items.list_by_owner(sarah.id)) == 4
    automations = storage.automations.list_by_owner(sarah.id)
    assert len(automations) == 3
    assert all(a.last_run is None for a in automations)
    assert storage.time_saved.sum_by_owner(sarah.id) == 47
    assert sorted(a.badge for a in storage.user_achievements.list_by_owner(sarah.id)) == sorted(DEMO_BADGES)
    assert storage.accessibility_preferences.get_by_owner(sarah.id).dark_mode is True

    assert storage.canned_responses.list_by_owner(users[1].id) == []


def test_seeding_twice_does_not_duplicate():
    storage = Storage()
    first = seed_demo_data(storage, password="demo-pass")
    second = seed_demo_data(storage, password="demo-pass")

    assert [u.id for u in first] == [u.id for u in second]
    assert len(storage.db.table("users")) == 3
    assert len(storage.canned_responses.list_by_owner(first[0].id)) == 3
