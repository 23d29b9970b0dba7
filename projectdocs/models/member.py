# projectdocs/models/member.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base

VIEW_DOCUMENTS = "view_documents"
MANAGE_DOCUMENTS = "manage_documents"
PERMISSIONS = (VIEW_DOCUMENTS, MANAGE_DOCUMENTS)

member_roles = Table(
    "member_roles",
    Base.metadata,
    Column("member_id", Integer, ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    permissions = Column(JSON, nullable=False, default=list)

    members = relationship("Member", secondary=member_roles, back_populates="roles")


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_members_project_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("Project", back_populates="members")
    user = relationship("User", back_populates="memberships")
    roles = relationship("Role", secondary=member_roles, back_populates="members")

    @property
    def permissions(self) -> set:
        return {permission for role in self.roles for permission in (role.permissions or [])}
