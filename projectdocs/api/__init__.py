# projectdocs/api/__init__.py
from .projects import router as projects_router
from .documents import router as documents_router
from .attachments import router as attachments_router
from .users import router as users_router

__all__ = ["projects_router", "documents_router", "attachments_router", "users_router"]
