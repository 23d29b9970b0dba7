# projectdocs/schemas/document.py
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from .base import BaseSchema


class DocumentBase(BaseSchema):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None

    @field_validator("category_id", mode="before")
    @classmethod
    def blank_category(cls, value):
        # HTML selects submit "" for "no category"
        if value == "":
            return None
        return value


class DocumentCreate(DocumentBase):
    project_id: int


class DocumentUpdate(DocumentBase):
    pass
