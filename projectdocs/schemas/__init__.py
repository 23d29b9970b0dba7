# projectdocs/schemas/__init__.py
from .project import Project, ProjectCreate, ProjectUpdate, ProjectDetail, Category, CategoryCreate, Member, MemberCreate
from .document import DocumentCreate, DocumentUpdate
from .attachment import Attachment
from .user import User, UserCreate, Role, RoleCreate, NotificationSetting, NotificationSettingUpdate

__all__ = [
    "Project", "ProjectCreate", "ProjectUpdate", "ProjectDetail",
    "Category", "CategoryCreate", "Member", "MemberCreate",
    "DocumentCreate", "DocumentUpdate",
    "Attachment",
    "User", "UserCreate", "Role", "RoleCreate",
    "NotificationSetting", "NotificationSettingUpdate"
]
