from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from ai.providers import DraftProvider, get_draft_provider
from auth.utils import get_current_user, owned_or_404
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage
from services.activity_service import create_automation, run_automation

router = APIRouter(prefix="/automations", tags=["automations"])

NOT_FOUND = "Automation not found"


class AutomationCreate(BaseModel):
    trigger_type: str = Field(min_length=1, max_length=100)
    action: str = Field(min_length=1)
    tool: str = Field(min_length=1, max_length=100)
    is_enabled: bool = True


class AutomationUpdate(BaseModel):
    trigger_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    action: Optional[str] = Field(default=None, min_length=1)
    tool: Optional[str] = Field(default=None, min_length=1, max_length=100)
    is_enabled: Optional[bool] = None


class AutomationSuggestRequest(BaseModel):
    activity_history: str = ""


@router.get("")
def list_automations(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return [record_to_dict(a) for a in storage.automations.list_by_owner(user.id)]


@router.post("", status_code=201)
def create(
    req: AutomationCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    automation = create_automation(
        storage,
        user.id,
        trigger_type=req.trigger_type,
        action=req.action,
        tool=req.tool,
        is_enabled=req.is_enabled,
    )
    return record_to_dict(automation)


@router.post("/suggest")
async def suggest(
    req: AutomationSuggestRequest,
    user: User = Depends(get_current_user),
    provider: DraftProvider = Depends(get_draft_provider),
):
    suggestion = await provider.suggest_automation(req.activity_history)
    payload = asdict(suggestion)
    payload["timeSaved"] = payload.pop("time_saved")
    return payload


@router.patch("/{automation_id}")
def update_automation(
    automation_id: str,
    req: AutomationUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.automations.get(automation_id), user, NOT_FOUND)
    changes = {}
    if req.trigger_type is not None:
        changes["trigger_type"] = req.trigger_type
    if req.action is not None:
        changes["action"] = req.action
    if req.tool is not None:
        changes["tool"] = req.tool
    if req.is_enabled is not None:
        changes["is_enabled"] = req.is_enabled

    updated = storage.automations.update(automation_id, **changes)
    if not updated:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return record_to_dict(updated)


@router.delete("/{automation_id}", status_code=204)
def delete_automation(
    automation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.automations.get(automation_id), user, NOT_FOUND)
    if not storage.automations.delete(automation_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=204)


@router.post("/{automation_id}/run")
def run(
    automation_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.automations.get(automation_id), user, NOT_FOUND)
    updated = run_automation(storage, user.id, automation_id)
    if not updated:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return record_to_dict(updated)
