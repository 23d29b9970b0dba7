# projectdocs/models/project.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    identifier = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    categories = relationship(
        "DocumentCategory",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="[DocumentCategory.position, DocumentCategory.name]"
    )
    documents = relationship("Document", back_populates="project", cascade="all, delete-orphan")
    members = relationship("Member", back_populates="project", cascade="all, delete-orphan")


class DocumentCategory(Base):
    __tablename__ = "document_categories"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, server_default='0', default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("Project", back_populates="categories")
    documents = relationship("Document", back_populates="category")
