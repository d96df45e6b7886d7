from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from auth.utils import get_current_user
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage
from services.activity_service import total_time_saved

router = APIRouter(prefix="/time-saved", tags=["time-saved"])


class TimeSavedCreate(BaseModel):
    action_type: str = Field(min_length=1, max_length=100)
    minutes_saved: int = Field(ge=0)


@router.get("")
def list_entries(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return [record_to_dict(entry) for entry in storage.time_saved.list_by_owner(user.id)]


@router.get("/total")
def get_total(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    """Running total of the ledger, recomputed on every call."""
    return total_time_saved(storage, user.id)


@router.post("", status_code=201)
def log_entry(
    req: TimeSavedCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    entry = storage.time_saved.create(
        user_id=user.id,
        action_type=req.action_type,
        minutes_saved=req.minutes_saved,
    )
    return record_to_dict(entry)
