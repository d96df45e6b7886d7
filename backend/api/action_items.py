from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from ai.providers import DraftProvider, get_draft_provider
from auth.utils import get_current_user, owned_or_404
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage
from services.activity_service import (
    extract_action_items_from_transcript,
    generate_draft_for_action_item,
)

router = APIRouter(prefix="/action-items", tags=["action-items"])

NOT_FOUND = "Action item not found"

ActionItemStatus = Literal["pending", "in_progress", "completed"]


class ActionItemCreate(BaseModel):
    text: str = Field(min_length=1)
    status: ActionItemStatus = "pending"
    transcript: Optional[str] = None
    due_date: Optional[datetime] = None
    source: Optional[str] = None


class ActionItemUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ActionItemStatus] = None
    due_date: Optional[datetime] = None
    source: Optional[str] = None


class TranscriptRequest(BaseModel):
    transcript: str = Field(min_length=1)


@router.get("")
def list_action_items(
    status: Optional[ActionItemStatus] = None,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    items = storage.action_items.list_by_owner(user.id)
    if status:
        items = [item for item in items if item.status == status]
    return [record_to_dict(item) for item in items]


@router.post("", status_code=201)
def create_action_item(
    req: ActionItemCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    item = storage.action_items.create(
        user_id=user.id,
        text=req.text.strip(),
        status=req.status,
        transcript=req.transcript,
        due_date=req.due_date,
        source=req.source,
    )
    return record_to_dict(item)


@router.post("/extract", status_code=201)
async def extract_from_transcript(
    req: TranscriptRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    provider: DraftProvider = Depends(get_draft_provider),
):
    items = await extract_action_items_from_transcript(storage, provider, user.id, req.transcript)
    return [record_to_dict(item) for item in items]


@router.patch("/{item_id}")
def update_action_item(
    item_id: str,
    req: ActionItemUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.action_items.get(item_id), user, NOT_FOUND)
    # Sent fields overwrite; an explicit null clears due_date/source.
    changes = req.model_dump(exclude_unset=True)
    for required in ("text", "status"):
        if changes.get(required, "") is None:
            changes.pop(required)
    if "text" in changes:
        changes["text"] = changes["text"].strip()

    updated = storage.action_items.update(item_id, **changes)
    if not updated:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return record_to_dict(updated)


@router.delete("/{item_id}", status_code=204)
def delete_action_item(
    item_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.action_items.get(item_id), user, NOT_FOUND)
    if not storage.action_items.delete(item_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=204)


@router.post("/{item_id}/gpt")
async def generate_draft(
    item_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    provider: DraftProvider = Depends(get_draft_provider),
):
    item = owned_or_404(storage.action_items.get(item_id), user, NOT_FOUND)
    output = await generate_draft_for_action_item(storage, provider, user.id, item)
    return record_to_dict(output)


@router.get("/{item_id}/outputs")
def list_outputs(
    item_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    outputs = storage.action_item_outputs.list_by_action_item(item_id)
    return [record_to_dict(output) for output in outputs if output.user_id == user.id]
