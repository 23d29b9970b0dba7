# projectdocs/schemas/project.py
from typing import List, Optional

from pydantic import Field

from .base import BaseSchema, TimestampMixin

IDENTIFIER_PATTERN = r"^[a-z][a-z0-9_\-]{0,99}$"


class ProjectBase(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectCreate(ProjectBase):
    identifier: str = Field(pattern=IDENTIFIER_PATTERN)


class ProjectUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None


class Project(ProjectBase, TimestampMixin):
    id: int
    identifier: str


class ProjectDetail(Project):
    document_count: int = 0


class CategoryCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    position: int = 0


class Category(CategoryCreate):
    id: int
    project_id: int


class MemberCreate(BaseSchema):
    user_id: int
    role_ids: List[int] = Field(min_length=1)


class Member(BaseSchema):
    id: int
    project_id: int
    user_id: int
    role_ids: List[int] = []
    permissions: List[str] = []
