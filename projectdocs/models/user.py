# projectdocs/models/user.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(255), nullable=False, unique=True)
    firstname = Column(String(255), nullable=False, server_default='')
    lastname = Column(String(255), nullable=False, server_default='')
    mail = Column(String(255), nullable=False)
    admin = Column(Boolean, nullable=False, server_default='0', default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    memberships = relationship("Member", back_populates="user", cascade="all, delete-orphan")
    notification_settings = relationship(
        "NotificationSetting",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    @property
    def name(self) -> str:
        full = f"{self.firstname or ''} {self.lastname or ''}".strip()
        return full or self.login


class NotificationSetting(Base):
    __tablename__ = "notification_settings"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", "channel", name="uq_notification_settings_scope"),
    )

    MAIL = "mail"
    DOCUMENT_ADDED = "document_added"
    EVENT_KINDS = (DOCUMENT_ADDED,)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # NULL project means the user's default for every project
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    channel = Column(String(20), nullable=False, server_default=MAIL, default=MAIL)
    document_added = Column(Boolean, nullable=False, server_default='0', default=False)

    user = relationship("User", back_populates="notification_settings")
