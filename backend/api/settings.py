from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from auth.models import UserMode
from auth.utils import get_current_user
from db.database import get_storage
from db.models import User, user_to_dict
from db.repository import Storage

router = APIRouter(prefix="/user", tags=["settings"])


class UserSettingsUpdate(BaseModel):
    mode: Optional[UserMode] = None
    onboarding_complete: Optional[bool] = None


@router.patch("/settings")
def update_user_settings(
    req: UserSettingsUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    changes = {}
    if req.mode is not None:
        changes["mode"] = req.mode
    if req.onboarding_complete is not None:
        changes["onboarding_complete"] = req.onboarding_complete

    updated = storage.users.update(user.id, **changes)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return user_to_dict(updated)
