from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from auth.utils import get_current_user
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage
from services.activity_service import ACCESSIBILITY_DEFAULTS, save_accessibility_preferences

router = APIRouter(prefix="/accessibility", tags=["accessibility"])


class AccessibilityRequest(BaseModel):
    large_text: Optional[bool] = None
    dark_mode: Optional[bool] = None
    reduce_motion: Optional[bool] = None
    high_contrast: Optional[bool] = None


@router.get("")
def get_preferences(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    preferences = storage.accessibility_preferences.get_by_owner(user.id)
    if not preferences:
        return dict(ACCESSIBILITY_DEFAULTS)
    return record_to_dict(preferences)


@router.post("", status_code=status.HTTP_201_CREATED)
def save_preferences(
    req: AccessibilityRequest,
    response: Response,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    values = {key: value for key, value in req.model_dump().items() if value is not None}
    saved = save_accessibility_preferences(storage, user.id, **values)
    if not saved.created:
        response.status_code = status.HTTP_200_OK
    return record_to_dict(saved.record)
