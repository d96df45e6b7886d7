from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from auth.utils import get_current_user
from db.database import get_storage
from db.models import User
from db.repository import Storage
from services.activity_service import send_canned_response_to_slack
from services.slack_service import ChannelNotFoundError, MessageSender, get_message_sender

router = APIRouter(prefix="/slack", tags=["slack"])


class SlackSendRequest(BaseModel):
    channel: str = Field(min_length=1)
    text: str = Field(min_length=1)


class SlackCannedRequest(BaseModel):
    channel: str = Field(min_length=1)


@router.get("/channels")
async def list_channels(
    user: User = Depends(get_current_user),
    sender: MessageSender = Depends(get_message_sender),
):
    channels = await sender.list_channels()
    return [{"id": c.id, "name": c.name, "member_count": c.members} for c in channels]


@router.post("/send")
async def send_message(
    req: SlackSendRequest,
    user: User = Depends(get_current_user),
    sender: MessageSender = Depends(get_message_sender),
):
    try:
        message = await sender.send_message(req.channel, req.text)
    except ChannelNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"message": "Message sent", "ts": message.timestamp, **asdict(message)}


@router.post("/canned-responses/{response_id}")
async def send_canned_response(
    response_id: str,
    req: SlackCannedRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    sender: MessageSender = Depends(get_message_sender),
):
    try:
        message = await send_canned_response_to_slack(storage, sender, user.id, response_id, req.channel)
    except ChannelNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if message is None:
        raise HTTPException(status_code=404, detail="Canned response not found")
    return {**asdict(message), "simulated": True, "canned_response_id": response_id}
