# projectdocs/schemas/attachment.py
from typing import Optional

from .base import BaseSchema, TimestampMixin


class Attachment(BaseSchema, TimestampMixin):
    id: int
    container_id: Optional[int] = None
    author_id: int
    filename: str
    content_type: Optional[str] = None
    filesize: int
    description: Optional[str] = None
