from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from auth.utils import get_current_user, owned_or_404
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage

router = APIRouter(prefix="/tools", tags=["tools"])

ToolStatus = Literal["pending", "connected"]


class ConnectToolRequest(BaseModel):
    tool_name: str = Field(min_length=1, max_length=100)
    status: ToolStatus = "pending"


class ToolStatusUpdate(BaseModel):
    status: ToolStatus


@router.get("")
def list_tools(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return [record_to_dict(tool) for tool in storage.connected_tools.list_by_owner(user.id)]


@router.post("", status_code=201)
def connect_tool(
    req: ConnectToolRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    tool = storage.connected_tools.create(user_id=user.id, tool_name=req.tool_name.strip(), status=req.status)
    return record_to_dict(tool)


@router.patch("/{tool_id}")
def update_tool_status(
    tool_id: str,
    req: ToolStatusUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    owned_or_404(storage.connected_tools.get(tool_id), user, "Tool not found")
    updated = storage.connected_tools.update_status(tool_id, req.status)
    return record_to_dict(updated)
