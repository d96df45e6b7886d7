"""Repository contract over the in-memory tables.

One repository per entity kind. Lookups signal "not found" with ``None`` (or
``False`` for boolean operations) instead of raising. Updates are partial and
restricted to a whitelist of patchable fields per kind; identity and ownership
fields can never be rewritten through ``update``.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Generic, TypeVar

from db.database import Clock, IdFactory, MemoryDatabase
from db.models import (
    AccessibilityPreference,
    ActionItem,
    ActionItemOutput,
    Automation,
    CannedResponse,
    ConnectedTool,
    Record,
    TimeSaved,
    User,
    UserAchievement,
    normalize_tags,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

PROTECTED_FIELDS = frozenset({"id", "user_id", "created_at"})


class Repository(Generic[R]):
    model: type[R]
    table_name: str

    def __init__(self, db: MemoryDatabase):
        self._db = db
        self._table = db.table(self.table_name)

    def create(self, **values: Any) -> R:
        now = self._db.clock()
        payload = self._normalize({k: v for k, v in values.items() if k not in ("id", "created_at")})
        payload.update(self._creation_overrides(now))
        record = self.model(id=self._db.id_factory(), created_at=now, **payload)
        return self._table.insert(record)

    def get(self, record_id: str) -> R | None:
        return self._table.get(record_id)

    def _creation_overrides(self, now: datetime) -> dict[str, Any]:
        return {}

    def _update_overrides(self, now: datetime) -> dict[str, Any]:
        return {}

    def _normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        return values

    def _patch(self, record_id: str, changes: dict[str, Any]) -> R | None:
        existing = self._table.get(record_id)
        if existing is None:
            return None
        payload = self._normalize(dict(changes))
        payload.update(self._update_overrides(self._db.clock()))
        return self._table.replace(replace(existing, **payload))


class OwnedMixin:
    def list_by_owner(self, user_id: str) -> list:
        return [record for record in self._table.scan() if record.user_id == user_id]


class PatchMixin:
    patchable: frozenset[str] = frozenset()

    def update(self, record_id: str, **changes: Any):
        accepted = {key: value for key, value in changes.items() if key in self.patchable}
        rejected = sorted(set(changes) - set(accepted))
        if rejected:
            protected = [key for key in rejected if key in PROTECTED_FIELDS]
            logger.warning(
                "%s: dropping non-patchable fields %s (protected: %s)",
                self.table_name,
                rejected,
                protected,
            )
        return self._patch(record_id, accepted)


class DeleteMixin:
    def delete(self, record_id: str) -> bool:
        return self._table.remove(record_id)


class UserRepository(PatchMixin, Repository[User]):
    model = User
    table_name = "users"
    patchable = frozenset({"mode", "onboarding_complete"})

    def get_by_email(self, email: str) -> User | None:
        return next((user for user in self._table.scan() if user.email == email), None)


class ConnectedToolRepository(OwnedMixin, PatchMixin, Repository[ConnectedTool]):
    model = ConnectedTool
    table_name = "connected_tools"
    patchable = frozenset({"status"})

    def _creation_overrides(self, now: datetime) -> dict[str, Any]:
        return {"connected_at": now}

    def update_status(self, record_id: str, status: str) -> ConnectedTool | None:
        return self.update(record_id, status=status)


class CannedResponseRepository(OwnedMixin, PatchMixin, DeleteMixin, Repository[CannedResponse]):
    model = CannedResponse
    table_name = "canned_responses"
    patchable = frozenset({"title", "content", "tags"})

    def _creation_overrides(self, now: datetime) -> dict[str, Any]:
        return {"usage_count": 0}

    def _normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        if "tags" in values:
            values["tags"] = normalize_tags(values["tags"])
        return values

    def list_by_owner(self, user_id: str, tag: str | None = None) -> list[CannedResponse]:
        responses = super().list_by_owner(user_id)
        if tag:
            responses = [response for response in responses if tag in response.tags]
        return responses

    def increment_usage(self, record_id: str) -> bool:
        existing = self._table.get(record_id)
        if existing is None:
            return False
        self._table.replace(replace(existing, usage_count=existing.usage_count + 1))
        return True


class ActionItemRepository(OwnedMixin, PatchMixin, DeleteMixin, Repository[ActionItem]):
    model = ActionItem
    table_name = "action_items"
    patchable = frozenset({"text", "status", "transcript", "due_date", "source"})


class ActionItemOutputRepository(OwnedMixin, Repository[ActionItemOutput]):
    model = ActionItemOutput
    table_name = "action_item_outputs"

    def list_by_action_item(self, action_item_id: str) -> list[ActionItemOutput]:
        return [output for output in self._table.scan() if output.action_item_id == action_item_id]


class AutomationRepository(OwnedMixin, PatchMixin, DeleteMixin, Repository[Automation]):
    model = Automation
    table_name = "automations"
    patchable = frozenset({"trigger_type", "action", "tool", "is_enabled"})

    def _creation_overrides(self, now: datetime) -> dict[str, Any]:
        return {"last_run": None}

    def run(self, record_id: str) -> Automation | None:
        # last_run is not user-patchable; this is the only path that sets it.
        return self._patch(record_id, {"last_run": self._db.clock()})


class TimeSavedRepository(OwnedMixin, Repository[TimeSaved]):
    model = TimeSaved
    table_name = "time_saved"

    def sum_by_owner(self, user_id: str) -> int:
        return sum(entry.minutes_saved for entry in self.list_by_owner(user_id))


class UserAchievementRepository(OwnedMixin, Repository[UserAchievement]):
    model = UserAchievement
    table_name = "user_achievements"

    def _creation_overrides(self, now: datetime) -> dict[str, Any]:
        return {"earned_at": now}


class AccessibilityPreferenceRepository(OwnedMixin, PatchMixin, Repository[AccessibilityPreference]):
    model = AccessibilityPreference
    table_name = "accessibility_preferences"
    patchable = frozenset({"large_text", "dark_mode", "reduce_motion", "high_contrast"})

    def _creation_overrides(self, now: datetime) -> dict[str, Any]:
        return {"updated_at": now}

    def _update_overrides(self, now: datetime) -> dict[str, Any]:
        return {"updated_at": now}

    def get_by_owner(self, user_id: str) -> AccessibilityPreference | None:
        return next(iter(self.list_by_owner(user_id)), None)


class Storage:
    """Composition root: one repository per entity kind over a shared in-memory database."""

    def __init__(self, id_factory: IdFactory | None = None, clock: Clock | None = None):
        self.db = MemoryDatabase(id_factory=id_factory, clock=clock)
        self.users = UserRepository(self.db)
        self.connected_tools = ConnectedToolRepository(self.db)
        self.canned_responses = CannedResponseRepository(self.db)
        self.action_items = ActionItemRepository(self.db)
        self.action_item_outputs = ActionItemOutputRepository(self.db)
        self.automations = AutomationRepository(self.db)
        self.time_saved = TimeSavedRepository(self.db)
        self.user_achievements = UserAchievementRepository(self.db)
        self.accessibility_preferences = AccessibilityPreferenceRepository(self.db)

    @property
    def clock(self) -> Clock:
        return self.db.clock
