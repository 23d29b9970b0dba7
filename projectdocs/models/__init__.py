# projectdocs/models/__init__.py
from ..database import Base
from .user import User, NotificationSetting
from .member import Role, Member, member_roles
from .project import Project, DocumentCategory
from .document import Document
from .attachment import Attachment

__all__ = [
    "Base",
    "User",
    "NotificationSetting",
    "Role",
    "Member",
    "member_roles",
    "Project",
    "DocumentCategory",
    "Document",
    "Attachment"
]
