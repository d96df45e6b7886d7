"""Multi-step flows that combine repository calls with the integrations.

Each flow is best-effort: records written before a failing step stay written.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ai.providers.base import DraftProvider
from db.models import ActionItem, ActionItemOutput, AccessibilityPreference, Automation
from db.repository import Storage
from services.slack_service import MessageSender, SentMessage

logger = logging.getLogger(__name__)

# Minutes credited to the time-saved ledger per action.
MINUTES_CANNED_RESPONSE_USE = 1
MINUTES_GPT_DRAFT = 2
MINUTES_AUTOMATION_CREATED = 3
MINUTES_AUTOMATION_RUN = 5
MINUTES_PER_EXTRACTED_ITEM = 2

EMPTY_DRAFT_PLACEHOLDER = "No content generated"

ACCESSIBILITY_DEFAULTS = {
    "large_text": False,
    "dark_mode": False,
    "reduce_motion": False,
    "high_contrast": False,
}


@dataclass(frozen=True)
class SavedPreferences:
    record: AccessibilityPreference
    created: bool


def use_canned_response(storage: Storage, user_id: str, response_id: str) -> bool:
    if not storage.canned_responses.increment_usage(response_id):
        return False
    storage.time_saved.create(
        user_id=user_id,
        action_type="canned_response",
        minutes_saved=MINUTES_CANNED_RESPONSE_USE,
    )
    return True


def create_automation(storage: Storage, user_id: str, **values: Any) -> Automation:
    automation = storage.automations.create(user_id=user_id, **values)
    storage.time_saved.create(
        user_id=user_id,
        action_type="automation_created",
        minutes_saved=MINUTES_AUTOMATION_CREATED,
    )
    return automation


def run_automation(storage: Storage, user_id: str, automation_id: str) -> Automation | None:
    updated = storage.automations.run(automation_id)
    if updated is None:
        return None
    storage.time_saved.create(
        user_id=user_id,
        action_type="automation_run",
        minutes_saved=MINUTES_AUTOMATION_RUN,
    )
    logger.info("Automation %s run (tool=%s, action=%s)", updated.id, updated.tool, updated.action)
    return updated


async def generate_draft_for_action_item(
    storage: Storage,
    provider: DraftProvider,
    user_id: str,
    item: ActionItem,
) -> ActionItemOutput:
    prompt = item.transcript or item.text
    content = await provider.generate_action_item_draft(
        item.text,
        prompt if prompt != item.text else None,
    )
    storage.time_saved.create(
        user_id=user_id,
        action_type="gpt_draft",
        minutes_saved=MINUTES_GPT_DRAFT,
    )
    return storage.action_item_outputs.create(
        user_id=user_id,
        action_item_id=item.id,
        output=content or EMPTY_DRAFT_PLACEHOLDER,
        tool_used="openai",
    )


async def extract_action_items_from_transcript(
    storage: Storage,
    provider: DraftProvider,
    user_id: str,
    transcript: str,
) -> list[ActionItem]:
    texts = await provider.extract_action_items(transcript)
    created: list[ActionItem] = []
    for text in texts:
        created.append(storage.action_items.create(user_id=user_id, text=text, source="transcript"))
    if created:
        storage.time_saved.create(
            user_id=user_id,
            action_type="action_items_extracted",
            minutes_saved=len(created) * MINUTES_PER_EXTRACTED_ITEM,
        )
    return created


async def send_canned_response_to_slack(
    storage: Storage,
    sender: MessageSender,
    user_id: str,
    response_id: str,
    channel: str,
) -> SentMessage | None:
    response = storage.canned_responses.get(response_id)
    if response is None or response.user_id != user_id:
        return None
    message = await sender.send_message(channel, response.content)
    use_canned_response(storage, user_id, response_id)
    return message


def save_accessibility_preferences(storage: Storage, user_id: str, **values: Any) -> SavedPreferences:
    existing = storage.accessibility_preferences.get_by_owner(user_id)
    if existing is not None:
        updated = storage.accessibility_preferences.update(existing.id, **values)
        return SavedPreferences(record=updated, created=False)
    payload = {**ACCESSIBILITY_DEFAULTS, **values}
    created = storage.accessibility_preferences.create(user_id=user_id, **payload)
    return SavedPreferences(record=created, created=True)


def total_time_saved(storage: Storage, user_id: str) -> dict[str, float]:
    minutes = storage.time_saved.sum_by_owner(user_id)
    return {"minutes": minutes, "hours": minutes / 60}
