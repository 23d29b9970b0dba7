# projectdocs/api/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import NotificationSetting, Project, Role, User
from ..schemas.user import (
    NotificationSetting as NotificationSettingSchema,
    NotificationSettingUpdate,
    Role as RoleSchema,
    RoleCreate,
    User as UserSchema,
    UserCreate,
)
from ..utils.logging import api_logger
from .deps import require_admin

router = APIRouter(prefix="/api", tags=["users"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=List[UserSchema])
async def list_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.login).all()


@router.post("/users", response_model=UserSchema, status_code=201)
async def create_user(user: UserCreate, db: Session = Depends(get_db)):
    api_logger.info("Creating user", extra={"login": user.login})

    if db.query(User).filter(User.login == user.login).first():
        raise HTTPException(status_code=409, detail="Login has already been taken")

    db_user = User(**user.model_dump())
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    api_logger.info("User created", extra={"user_id": db_user.id})
    return db_user


@router.put("/users/{user_id}/notification-settings", response_model=NotificationSettingSchema)
async def update_notification_settings(user_id: int, setting: NotificationSettingUpdate,
                                       db: Session = Depends(get_db)):
    """Create or update a user's mail setting, globally or for one project"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if setting.project_id is not None and not db.query(Project).filter(Project.id == setting.project_id).first():
        raise HTTPException(status_code=404, detail="Project not found")

    db_setting = db.query(NotificationSetting).filter(
        NotificationSetting.user_id == user.id,
        NotificationSetting.project_id == setting.project_id,
        NotificationSetting.channel == NotificationSetting.MAIL
    ).first()
    if db_setting is None:
        db_setting = NotificationSetting(user_id=user.id, project_id=setting.project_id,
                                         channel=NotificationSetting.MAIL)
        db.add(db_setting)

    db_setting.document_added = setting.document_added
    db.commit()
    db.refresh(db_setting)

    api_logger.info("Updated notification settings", extra={
        "user_id": user.id,
        "project_id": setting.project_id,
        "document_added": setting.document_added
    })
    return db_setting


@router.get("/roles", response_model=List[RoleSchema])
async def list_roles(db: Session = Depends(get_db)):
    return db.query(Role).order_by(Role.name).all()


@router.post("/roles", response_model=RoleSchema, status_code=201)
async def create_role(role: RoleCreate, db: Session = Depends(get_db)):
    api_logger.info("Creating role", extra={
        "role_name": role.name,
        "permissions": role.permissions
    })

    if db.query(Role).filter(Role.name == role.name).first():
        raise HTTPException(status_code=409, detail="Name has already been taken")

    db_role = Role(**role.model_dump())
    db.add(db_role)
    db.commit()
    db.refresh(db_role)
    return db_role
