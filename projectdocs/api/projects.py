# projectdocs/api/projects.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from ..database import get_db
from ..models import Document, DocumentCategory, Member, Project, Role, User
from ..schemas.project import (
    Category as CategorySchema,
    CategoryCreate,
    Member as MemberSchema,
    MemberCreate,
    Project as ProjectSchema,
    ProjectCreate,
    ProjectDetail,
    ProjectUpdate,
)
from ..utils.logging import api_logger
from .deps import require_admin

router = APIRouter(prefix="/api/projects", tags=["projects"], dependencies=[Depends(require_admin)])


def _get_project(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        api_logger.warning("Project not found", extra={"project_id": project_id})
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _member_schema(member: Member) -> MemberSchema:
    return MemberSchema(
        id=member.id,
        project_id=member.project_id,
        user_id=member.user_id,
        role_ids=sorted(role.id for role in member.roles),
        permissions=sorted(member.permissions)
    )


@router.get("", response_model=List[ProjectSchema])
async def list_projects(db: Session = Depends(get_db)):
    """List all projects"""
    api_logger.info("Starting projects list operation", extra={
        "endpoint": "/api/projects",
        "method": "GET"
    })
    projects = db.query(Project).order_by(Project.name).all()
    api_logger.info(f"Found {len(projects)} projects")
    return projects


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: int, db: Session = Depends(get_db)):
    api_logger.info("Fetching project", extra={"project_id": project_id})

    project = _get_project(db, project_id)
    doc_count = db.query(func.count(Document.id)) \
        .filter(Document.project_id == project_id) \
        .scalar()

    detail = ProjectDetail.model_validate(project)
    detail.document_count = doc_count or 0

    api_logger.info("Project retrieved successfully", extra={
        "project_id": project_id,
        "document_count": doc_count
    })
    return detail


@router.post("", response_model=ProjectSchema, status_code=201)
async def create_project(project: ProjectCreate, db: Session = Depends(get_db)):
    api_logger.info("Creating new project", extra={
        "project_name": project.name,
        "identifier": project.identifier
    })

    if db.query(Project).filter(Project.identifier == project.identifier).first():
        raise HTTPException(status_code=409, detail="Identifier has already been taken")

    try:
        db_project = Project(**project.model_dump())
        db.add(db_project)
        db.commit()
        db.refresh(db_project)
    except Exception as e:
        api_logger.error("Failed to create project", extra={
            "project_name": project.name,
            "error": str(e)
        })
        db.rollback()
        raise

    api_logger.info("Project created successfully", extra={
        "project_id": db_project.id,
        "project_name": db_project.name
    })
    return db_project


@router.put("/{project_id}", response_model=ProjectSchema)
async def update_project(project_id: int, project: ProjectUpdate, db: Session = Depends(get_db)):
    api_logger.info("Updating project", extra={"project_id": project_id})

    db_project = _get_project(db, project_id)
    try:
        for field, value in project.model_dump(exclude_unset=True).items():
            setattr(db_project, field, value)
        db.commit()
        db.refresh(db_project)
    except Exception as e:
        api_logger.error("Failed to update project", extra={
            "project_id": project_id,
            "error": str(e)
        })
        db.rollback()
        raise

    api_logger.info("Project updated successfully", extra={"project_id": project_id})
    return db_project


@router.delete("/{project_id}")
async def delete_project(project_id: int, db: Session = Depends(get_db)):
    api_logger.info("Deleting project", extra={"project_id": project_id})

    project = _get_project(db, project_id)
    try:
        # Attachments outlive their documents as uncontained uploads
        for document in project.documents:
            for attachment in list(document.attachments):
                attachment.container = None
        db.delete(project)
        db.commit()
    except Exception as e:
        db.rollback()
        api_logger.error(f"Failed to delete project: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    api_logger.info(f"Successfully deleted project {project_id}")
    return {"success": True}


@router.get("/{project_id}/categories", response_model=List[CategorySchema])
async def list_categories(project_id: int, db: Session = Depends(get_db)):
    return _get_project(db, project_id).categories


@router.post("/{project_id}/categories", response_model=CategorySchema, status_code=201)
async def create_category(project_id: int, category: CategoryCreate, db: Session = Depends(get_db)):
    project = _get_project(db, project_id)
    api_logger.info("Creating document category", extra={
        "project_id": project.id,
        "category_name": category.name
    })

    db_category = DocumentCategory(project_id=project.id, **category.model_dump())
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


@router.get("/{project_id}/members", response_model=List[MemberSchema])
async def list_members(project_id: int, db: Session = Depends(get_db)):
    return [_member_schema(member) for member in _get_project(db, project_id).members]


@router.post("/{project_id}/members", response_model=MemberSchema, status_code=201)
async def create_member(project_id: int, member: MemberCreate, db: Session = Depends(get_db)):
    project = _get_project(db, project_id)
    api_logger.info("Adding project member", extra={
        "project_id": project.id,
        "user_id": member.user_id,
        "role_ids": member.role_ids
    })

    user = db.query(User).filter(User.id == member.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    roles = db.query(Role).filter(Role.id.in_(member.role_ids)).all()
    if len(roles) != len(set(member.role_ids)):
        raise HTTPException(status_code=404, detail="Role not found")

    try:
        db_member = Member(project=project, user=user, roles=roles)
        db.add(db_member)
        db.commit()
        db.refresh(db_member)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="User is already a member of this project")

    return _member_schema(db_member)
