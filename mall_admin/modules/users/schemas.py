import re
from pydantic import BaseModel, EmailStr, Field, PrivateAttr, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams
from mall_admin.core.schemas import FormModel, UUID, check_pattern, check_url

PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not PASSWORD_RULE.match(value):
        raise ValueError("Password must contain uppercase, lowercase, and number")
    return value


def check_role_ids(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return values
    if not values:
        raise ValueError("At least one role is required")
    for value in values:
        check_pattern(value, UUID, "Invalid role ID")
    return list(dict.fromkeys(values))


class UserBase(FormModel):
    email: EmailStr
    full_name: str = Field(min_length=2, max_length=100)
    avatar_url: Optional[str] = None
    is_active: bool = True
    role_ids: List[str]

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("avatar_url")
    @classmethod
    def check_avatar(cls, v):
        return check_url(v, "Invalid avatar URL")

    @field_validator("role_ids")
    @classmethod
    def check_roles(cls, v):
        return check_role_ids(v)


class UserCreate(UserBase):
    # Left blank, a temporary password is generated and returned once.
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_new_password(cls, v):
        return check_password(v)


class UserUpdate(UserBase):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    is_active: Optional[bool] = None
    role_ids: Optional[List[str]] = None


class ResetPasswordRequest(BaseModel):
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v):
        return check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v):
        return check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ProfileUpdate(FormModel):
    full_name: str = Field(min_length=2, max_length=100)
    avatar_url: Optional[str] = None

    @field_validator("avatar_url")
    @classmethod
    def check_avatar(cls, v):
        return check_url(v, "Invalid avatar URL")


class UserRole(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    color: Optional[str] = None

    class Config:
        from_attributes = True


class AdminUserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    roles: List[UserRole] = []

    class Config:
        from_attributes = True


class UserListParams(ListParams):
    per_page: int = Field(default=20, ge=1, le=100, alias="perPage")
    status: Optional[Literal["all", "active", "inactive"]] = None
    role_id: Optional[str] = Field(default=None, alias="roleId")

    # Member ids of role_id, resolved before the query runs.
    _user_ids: Optional[List[str]] = PrivateAttr(default=None)
