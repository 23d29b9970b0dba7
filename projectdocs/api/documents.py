# projectdocs/api/documents.py
import time
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Document, Project, User
from ..models.member import MANAGE_DOCUMENTS, VIEW_DOCUMENTS
from ..services.attachments import attachment_linker
from ..services.documents import SORT_OPTIONS, document_store
from ..services.exceptions import (
    AttachmentNotFoundError,
    AttachmentUploadError,
    DocumentNotFoundError,
    DocumentValidationError,
)
from ..services.notifications import NotificationDispatcher
from ..services.permissions import has_permission
from ..utils.logging import api_logger
from .deps import authorize, get_current_user, get_dispatcher, load_project, schedule_deliveries
from .templating import templates

router = APIRouter(tags=["documents"])


def project_documents_path(project: Project) -> str:
    return f"/projects/{project.identifier}/documents"


def document_path(document: Document) -> str:
    return f"/documents/{document.id}"


def _load_document(db: Session, document_id: int) -> Document:
    try:
        return document_store.get(db, document_id)
    except DocumentNotFoundError:
        api_logger.warning("Document not found", extra={"document_id": document_id})
        raise HTTPException(status_code=404, detail="Document not found")


def _render_form(request: Request, template: str, project: Project, current_user: User,
                 values: dict, errors: Optional[dict] = None, document: Optional[Document] = None):
    return templates.TemplateResponse(
        request,
        template,
        {
            "project": project,
            "document": document,
            "categories": project.categories,
            "values": values,
            "errors": errors or {},
            "current_user": current_user,
        },
        status_code=200
    )


@router.get("/projects/{project_ref}/documents", response_class=HTMLResponse)
async def index(
        request: Request,
        project_ref: str,
        sort_by: Optional[str] = None,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    api_logger.info("Listing documents for project", extra={
        "project_ref": project_ref,
        "sort_by": sort_by,
        "operation": "index"
    })
    project = load_project(db, project_ref)
    authorize(current_user, project, VIEW_DOCUMENTS)

    start_time = time.time()
    grouped = document_store.list_by_project(db, project, sort_by)

    api_logger.info("Successfully listed project documents", extra={
        "project_id": project.id,
        "group_count": len(grouped),
        "document_count": sum(len(docs) for docs in grouped.values()),
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return templates.TemplateResponse(request, "documents/index.html", {
        "project": project,
        "grouped": grouped,
        "sort_by": sort_by if sort_by in SORT_OPTIONS else "category",
        "sort_options": SORT_OPTIONS,
        "can_manage": has_permission(current_user, project, MANAGE_DOCUMENTS),
        "current_user": current_user,
    })


@router.get("/projects/{project_ref}/documents/new", response_class=HTMLResponse)
async def new(
        request: Request,
        project_ref: str,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    project = load_project(db, project_ref)
    authorize(current_user, project, MANAGE_DOCUMENTS)

    default_category = project.categories[0].id if project.categories else None
    return _render_form(request, "documents/new.html", project, current_user,
                        {"category_id": default_category})


@router.post("/projects/{project_ref}/documents", response_class=HTMLResponse)
async def create(
        request: Request,
        project_ref: str,
        background_tasks: BackgroundTasks,
        title: str = Form(default=""),
        category_id: str = Form(default=""),
        description: str = Form(default=""),
        attachment_ids: List[int] = Form(default=[]),
        files: List[UploadFile] = File(default=[]),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    project = load_project(db, project_ref)
    authorize(current_user, project, MANAGE_DOCUMENTS)

    values = {"title": title, "category_id": category_id, "description": description}
    api_logger.info("Creating new document", extra={
        "project_id": project.id,
        "document_title": title,
        "attachment_ids": attachment_ids,
        "upload_count": len(files)
    })

    start_time = time.time()
    try:
        stored = await attachment_linker.store_uploads(db, files, current_user)
    except AttachmentUploadError as e:
        return _render_form(request, "documents/new.html", project, current_user, values,
                            {"files": str(e)})

    try:
        document = document_store.create(
            db, project, values, current_user, set(attachment_ids) | {a.id for a in stored}
        )
    except DocumentValidationError as e:
        await attachment_linker.discard(db, stored)
        api_logger.info("Document form invalid", extra={
            "project_id": project.id,
            "errors": e.errors
        })
        return _render_form(request, "documents/new.html", project, current_user, values, e.errors)
    except AttachmentNotFoundError as e:
        await attachment_linker.discard(db, stored)
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        await attachment_linker.discard(db, stored)
        api_logger.error("Error creating document", extra={
            "project_id": project.id,
            "document_title": title,
            "error": str(e)
        })
        raise

    deliveries = dispatcher.prepare_document_added(document, current_user)
    await schedule_deliveries(background_tasks, dispatcher, deliveries)

    api_logger.info("Successfully created document", extra={
        "document_id": document.id,
        "project_id": project.id,
        "recipient_count": len(deliveries),
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return RedirectResponse(project_documents_path(project), status_code=302)


@router.get("/documents/{document_id}", response_class=HTMLResponse)
async def show(
        request: Request,
        document_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    api_logger.info("Retrieving document details", extra={"document_id": document_id})
    document = _load_document(db, document_id)
    authorize(current_user, document.project, VIEW_DOCUMENTS)

    return templates.TemplateResponse(request, "documents/show.html", {
        "project": document.project,
        "document": document,
        "attachments": document.attachments,
        "can_manage": has_permission(current_user, document.project, MANAGE_DOCUMENTS),
        "current_user": current_user,
    })


@router.get("/documents/{document_id}/edit", response_class=HTMLResponse)
async def edit(
        request: Request,
        document_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    document = _load_document(db, document_id)
    authorize(current_user, document.project, MANAGE_DOCUMENTS)

    values = {
        "title": document.title,
        "category_id": document.category_id,
        "description": document.description or ""
    }
    return _render_form(request, "documents/edit.html", document.project, current_user, values,
                        document=document)


@router.post("/documents/{document_id}", response_class=HTMLResponse)
async def update(
        request: Request,
        document_id: int,
        title: str = Form(default=""),
        category_id: str = Form(default=""),
        description: str = Form(default=""),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    document = _load_document(db, document_id)
    authorize(current_user, document.project, MANAGE_DOCUMENTS)

    values = {"title": title, "category_id": category_id, "description": description}
    api_logger.info("Updating document", extra={
        "document_id": document_id,
        "update_fields": sorted(values)
    })
    try:
        document_store.update(db, document, values)
    except DocumentValidationError as e:
        return _render_form(request, "documents/edit.html", document.project, current_user, values,
                            e.errors, document=document)
    except Exception as e:
        api_logger.error("Error updating document", extra={
            "document_id": document_id,
            "error": str(e)
        })
        raise

    api_logger.info("Successfully updated document", extra={"document_id": document_id})
    return RedirectResponse(document_path(document), status_code=302)


@router.post("/documents/{document_id}/attachments")
async def add_attachment(
        document_id: int,
        background_tasks: BackgroundTasks,
        attachment_ids: List[int] = Form(default=[]),
        files: List[UploadFile] = File(default=[]),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
        dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    document = _load_document(db, document_id)
    authorize(current_user, document.project, MANAGE_DOCUMENTS)

    api_logger.info("Adding attachments to document", extra={
        "document_id": document_id,
        "attachment_ids": attachment_ids,
        "upload_count": len(files)
    })

    try:
        added = await attachment_linker.add_to_document(db, document, files, attachment_ids, current_user)
    except AttachmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttachmentUploadError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        api_logger.error("Error adding attachments", extra={
            "document_id": document_id,
            "error": str(e)
        })
        raise

    deliveries = dispatcher.prepare_attachments_added(document, added, current_user)
    await schedule_deliveries(background_tasks, dispatcher, deliveries)

    api_logger.info("Successfully added attachments", extra={
        "document_id": document_id,
        "added_count": len(added),
        "recipient_count": len(deliveries)
    })
    return RedirectResponse(document_path(document), status_code=302)


async def _destroy(document_id: int, db: Session, current_user: User) -> RedirectResponse:
    api_logger.info("Deleting document", extra={"document_id": document_id})

    document = _load_document(db, document_id)
    authorize(current_user, document.project, MANAGE_DOCUMENTS)

    try:
        project = document_store.destroy(db, document_id)
    except Exception as e:
        api_logger.error(f"Failed to delete document: {str(e)}", extra={"document_id": document_id})
        raise

    api_logger.info(f"Successfully deleted document {document_id}")
    return RedirectResponse(project_documents_path(project), status_code=302)


@router.delete("/documents/{document_id}")
async def destroy(
        document_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    return await _destroy(document_id, db, current_user)


@router.post("/documents/{document_id}/delete")
async def destroy_from_form(
        document_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    return await _destroy(document_id, db, current_user)
