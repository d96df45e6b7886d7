from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any


USER_MODES = {"hype", "zen", "chaos", "focus"}
TOOL_STATUSES = {"pending", "connected"}
ACTION_ITEM_STATUSES = {"pending", "in_progress", "completed"}


@dataclass(frozen=True, kw_only=True)
class Record:
    id: str
    created_at: datetime


@dataclass(frozen=True, kw_only=True)
class User(Record):
    email: str
    password: str  # bcrypt hash
    mode: str = "zen"  # hype | zen | chaos | focus
    onboarding_complete: bool = False


@dataclass(frozen=True, kw_only=True)
class ConnectedTool(Record):
    user_id: str
    tool_name: str
    status: str = "pending"  # pending | connected
    connected_at: datetime | None = None


@dataclass(frozen=True, kw_only=True)
class CannedResponse(Record):
    user_id: str
    title: str
    content: str
    tags: tuple[str, ...] = ()
    usage_count: int = 0


@dataclass(frozen=True, kw_only=True)
class ActionItem(Record):
    user_id: str
    text: str
    status: str = "pending"  # pending | in_progress | completed
    transcript: str | None = None
    due_date: datetime | None = None
    source: str | None = None


@dataclass(frozen=True, kw_only=True)
class ActionItemOutput(Record):
    user_id: str
    action_item_id: str
    output: str
    tool_used: str


@dataclass(frozen=True, kw_only=True)
class Automation(Record):
    user_id: str
    trigger_type: str
    action: str
    tool: str
    is_enabled: bool = True
    last_run: datetime | None = None


@dataclass(frozen=True, kw_only=True)
class TimeSaved(Record):
    user_id: str
    action_type: str
    minutes_saved: int


@dataclass(frozen=True, kw_only=True)
class UserAchievement(Record):
    user_id: str
    badge: str
    earned_at: datetime | None = None


@dataclass(frozen=True, kw_only=True)
class AccessibilityPreference(Record):
    user_id: str
    large_text: bool = False
    dark_mode: bool = False
    reduce_motion: bool = False
    high_contrast: bool = False
    updated_at: datetime | None = None


def normalize_tags(tags) -> tuple[str, ...]:
    if not tags:
        return ()
    seen: list[str] = []
    for tag in tags:
        value = str(tag).strip()
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


def _render(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    return value


def record_to_dict(record: Record, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    return {
        f.name: _render(getattr(record, f.name))
        for f in fields(record)
        if f.name not in exclude
    }


def user_to_dict(user: User) -> dict[str, Any]:
    return record_to_dict(user, exclude=("password",))
