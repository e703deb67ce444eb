from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from mall_admin.modules.users.schemas import UserRole


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class LoginResponse(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None
    redirect_to: str = "/"


class MeResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    roles: List[UserRole]
    permissions: List[str]
    accessible_modules: List[str]
    highest_role: Optional[str] = None
    is_super_admin: bool = False


class RouteAccessResponse(BaseModel):
    path: str
    allowed: bool
