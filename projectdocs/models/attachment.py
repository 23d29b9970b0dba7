# projectdocs/models/attachment.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    # NULL while the upload is not linked to any document yet
    container_id = Column(Integer, ForeignKey("documents.id", ondelete="SET NULL"), nullable=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    filename = Column(String(255), nullable=False)
    disk_filename = Column(String(255), nullable=False)
    content_type = Column(String(255), nullable=True)
    filesize = Column(Integer, nullable=False, server_default='0')
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    container = relationship("Document", back_populates="attachments")
    author = relationship("User")

    @property
    def is_uncontained(self) -> bool:
        return self.container_id is None
