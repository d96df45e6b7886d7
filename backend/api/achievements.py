from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from auth.utils import get_current_user
from db.database import get_storage
from db.models import User, record_to_dict
from db.repository import Storage

router = APIRouter(prefix="/achievements", tags=["achievements"])


class AchievementCreate(BaseModel):
    badge: str = Field(min_length=1, max_length=100)


@router.get("")
def list_achievements(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return [record_to_dict(a) for a in storage.user_achievements.list_by_owner(user.id)]


@router.post("", status_code=201)
def add_achievement(
    req: AchievementCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    achievement = storage.user_achievements.create(user_id=user.id, badge=req.badge.strip())
    return record_to_dict(achievement)
