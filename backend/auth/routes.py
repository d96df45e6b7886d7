import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from auth.models import LoginRequest, RegisterRequest, UserResponse
from auth.utils import (
    cookie_name,
    create_token,
    get_current_user,
    hash_password,
    normalize_email,
    verify_password,
)
from config import settings
from db.database import get_storage
from db.models import User, user_to_dict
from db.repository import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str, *, max_age_seconds: int) -> None:
    samesite = (settings.AUTH_COOKIE_SAMESITE or "lax").strip().lower()
    if samesite not in {"strict", "lax", "none"}:
        samesite = "lax"
    response.set_cookie(
        key=cookie_name(),
        value=token,
        httponly=bool(settings.AUTH_COOKIE_HTTPONLY),
        secure=bool(settings.AUTH_COOKIE_SECURE),
        samesite=samesite,  # type: ignore[arg-type]
        domain=settings.AUTH_COOKIE_DOMAIN,
        path=settings.AUTH_COOKIE_PATH or "/",
        max_age=max(int(max_age_seconds), 1),
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=cookie_name(),
        domain=settings.AUTH_COOKIE_DOMAIN,
        path=settings.AUTH_COOKIE_PATH or "/",
    )


def _start_session(response: Response, user: User) -> None:
    token = create_token(user.id)
    _set_session_cookie(response, token, max_age_seconds=max(int(settings.JWT_EXPIRY_HOURS), 1) * 3600)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest, response: Response, storage: Storage = Depends(get_storage)):
    email = normalize_email(req.email)
    if storage.users.get_by_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    user = storage.users.create(
        email=email,
        password=hash_password(req.password),
        mode=req.mode,
        onboarding_complete=req.onboarding_complete,
    )
    logger.info("Registered user %s", user.id)
    _start_session(response, user)
    return user_to_dict(user)


@router.post("/login", response_model=UserResponse)
def login(req: LoginRequest, response: Response, storage: Storage = Depends(get_storage)):
    user = storage.users.get_by_email(normalize_email(req.email))
    if not user or not verify_password(req.password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    _start_session(response, user)
    return user_to_dict(user)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user_to_dict(user)


@router.post("/logout")
def logout(response: Response):
    _clear_session_cookie(response)
    return {"message": "Logged out successfully"}
