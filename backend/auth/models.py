from typing import Literal

from pydantic import BaseModel, Field


UserMode = Literal["hype", "zen", "chaos", "focus"]


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6)
    mode: UserMode = "zen"
    onboarding_complete: bool = False


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    mode: str
    onboarding_complete: bool
    created_at: str
