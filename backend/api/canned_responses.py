from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from ai.providers import DraftProvider, get_draft_provider
from auth.utils import get_current_user, owned_or_404
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage
from services.activity_service import use_canned_response

router = APIRouter(prefix="/canned-responses", tags=["canned-responses"])

NOT_FOUND = "Canned response not found"


class CannedResponseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)


class CannedResponseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[list[str]] = None


class CannedResponseSuggestRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    tags: list[str] = Field(default_factory=list)


@router.get("")
def list_canned_responses(
    tag: Optional[str] = None,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    responses = storage.canned_responses.list_by_owner(user.id, tag=tag)
    return [record_to_dict(r) for r in responses]


@router.post("", status_code=201)
def create_canned_response(
    req: CannedResponseCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    response = storage.canned_responses.create(
        user_id=user.id,
        title=req.title.strip(),
        content=req.content,
        tags=req.tags,
    )
    return record_to_dict(response)


@router.post("/suggest")
async def suggest_canned_response(
    req: CannedResponseSuggestRequest,
    user: User = Depends(get_current_user),
    provider: DraftProvider = Depends(get_draft_provider),
):
    content = await provider.suggest_canned_response(req.title, req.tags or None)
    return {"title": req.title, "content": content}


@router.get("/{response_id}")
def get_canned_response(
    response_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    response = owned_or_404(storage.canned_responses.get(response_id), user, NOT_FOUND)
    return record_to_dict(response)


@router.patch("/{response_id}")
def update_canned_response(
    response_id: str,
    req: CannedResponseUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.canned_responses.get(response_id), user, NOT_FOUND)
    changes = {}
    if req.title is not None:
        changes["title"] = req.title.strip()
    if req.content is not None:
        changes["content"] = req.content
    if req.tags is not None:
        changes["tags"] = req.tags

    updated = storage.canned_responses.update(response_id, **changes)
    if not updated:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return record_to_dict(updated)


@router.delete("/{response_id}", status_code=204)
def delete_canned_response(
    response_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.canned_responses.get(response_id), user, NOT_FOUND)
    if not storage.canned_responses.delete(response_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=204)


@router.post("/{response_id}/use")
def use_response(
    response_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.canned_responses.get(response_id), user, NOT_FOUND)
    if not use_canned_response(storage, user.id, response_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Usage incremented and time saved logged"}
