# projectdocs/api/deps.py
from functools import lru_cache
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models import Project, User
from ..services.mailer import MailDelivery, Notifier, build_notifier
from ..services.notifications import NotificationDispatcher
from ..services.permissions import has_permission
from ..utils.logging import api_logger


def get_current_user(
        x_user_id: Optional[int] = Header(default=None),
        db: Session = Depends(get_db)
) -> User:
    """Resolve the acting user from the X-User-Id header"""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == x_user_id).first()
    if user is None:
        api_logger.warning("Unknown acting user", extra={"user_id": x_user_id})
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.admin:
        raise HTTPException(status_code=403, detail="Administrator permission required")
    return current_user


def load_project(db: Session, project_ref: str) -> Project:
    """Find a project by identifier, falling back to its numeric id"""
    project = db.query(Project).filter(Project.identifier == project_ref).first()
    if project is None and str(project_ref).isdigit():
        project = db.query(Project).filter(Project.id == int(project_ref)).first()
    if project is None:
        api_logger.warning("Project not found", extra={"project_ref": project_ref})
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def authorize(user: User, project: Project, permission: str) -> None:
    if not has_permission(user, project, permission):
        api_logger.warning("Permission denied", extra={
            "user_id": user.id,
            "project_id": project.id,
            "permission": permission
        })
        raise HTTPException(status_code=403, detail="You are not authorized to access this page")


@lru_cache
def get_notifier() -> Notifier:
    return build_notifier()


def get_dispatcher(notifier: Notifier = Depends(get_notifier)) -> NotificationDispatcher:
    return NotificationDispatcher(notifier)


async def schedule_deliveries(background_tasks: BackgroundTasks, dispatcher: NotificationDispatcher,
                              deliveries: List[MailDelivery]) -> None:
    if not deliveries:
        return
    if settings.NOTIFICATIONS_DEFERRED:
        background_tasks.add_task(dispatcher.deliver, deliveries)
    else:
        await dispatcher.deliver(deliveries)
