# projectdocs/schemas/user.py
from typing import List, Optional

from pydantic import Field, field_validator

from .base import BaseSchema, TimestampMixin
from ..models.member import PERMISSIONS


class UserCreate(BaseSchema):
    login: str = Field(min_length=1, max_length=255)
    firstname: str = ""
    lastname: str = ""
    mail: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    admin: bool = False


class User(UserCreate, TimestampMixin):
    id: int
    name: str


class NotificationSettingUpdate(BaseSchema):
    project_id: Optional[int] = None
    document_added: bool


class NotificationSetting(NotificationSettingUpdate):
    id: int
    user_id: int
    channel: str


class RoleCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    permissions: List[str] = []

    @field_validator("permissions")
    @classmethod
    def known_permissions(cls, value: List[str]) -> List[str]:
        unknown = sorted(set(value) - set(PERMISSIONS))
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(unknown)}")
        return sorted(set(value))


class Role(RoleCreate):
    id: int
