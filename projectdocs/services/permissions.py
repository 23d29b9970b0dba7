# projectdocs/services/permissions.py
"""Capability checks.

Both functions only read attributes that are already loaded on the given
objects and never write, so they are safe to call on snapshots taken inside a
request.
"""
from typing import Optional

from ..models import Member, NotificationSetting, Project, User


def membership(user: User, project: Project) -> Optional[Member]:
    for member in user.memberships:
        if member.project_id == project.id:
            return member
    return None


def has_permission(user: User, project: Project, permission: str) -> bool:
    if user is None:
        return False
    if user.admin:
        return True
    member = membership(user, project)
    return member is not None and permission in member.permissions


def notification_enabled(user: User, event_kind: str, project: Optional[Project] = None) -> bool:
    """Resolve the user's mail setting for an event, project specific first"""
    if event_kind not in NotificationSetting.EVENT_KINDS:
        raise ValueError(f"Unknown notification event: {event_kind}")

    mail_settings = [s for s in user.notification_settings if s.channel == NotificationSetting.MAIL]

    if project is not None:
        for setting in mail_settings:
            if setting.project_id == project.id:
                return bool(getattr(setting, event_kind))

    for setting in mail_settings:
        if setting.project_id is None:
            return bool(getattr(setting, event_kind))

    return False
