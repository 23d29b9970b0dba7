# projectdocs/api/attachments.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Attachment, User
from ..models.member import VIEW_DOCUMENTS
from ..schemas.attachment import Attachment as AttachmentSchema
from ..services.attachments import attachment_linker
from ..services.exceptions import AttachmentInUseError, AttachmentPermissionError, AttachmentUploadError
from ..utils.logging import api_logger
from .deps import authorize, get_current_user

router = APIRouter(prefix="/api/attachments", tags=["attachments"])


def _get_visible_attachment(db: Session, attachment_id: int, current_user: User) -> Attachment:
    attachment = db.query(Attachment).filter(Attachment.id == attachment_id).first()
    if attachment is None:
        raise HTTPException(status_code=404, detail="Attachment not found")

    if attachment.container is not None:
        authorize(current_user, attachment.container.project, VIEW_DOCUMENTS)
    elif not (current_user.admin or attachment.author_id == current_user.id):
        # Uncontained uploads are private to their author
        raise HTTPException(status_code=404, detail="Attachment not found")
    return attachment


@router.post("", response_model=AttachmentSchema, status_code=201)
async def upload_attachment(
        file: UploadFile = File(...),
        description: Optional[str] = Form(default=None),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
):
    """Upload a file that can later be attached to a document"""
    api_logger.info("Uploading attachment", extra={
        "upload_filename": file.filename,
        "author_id": current_user.id
    })
    try:
        return await attachment_linker.store_upload(db, file, current_user, description)
    except AttachmentUploadError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{attachment_id}", response_model=AttachmentSchema)
async def get_attachment(attachment_id: int, db: Session = Depends(get_db),
                         current_user: User = Depends(get_current_user)):
    return _get_visible_attachment(db, attachment_id, current_user)


@router.get("/{attachment_id}/content")
async def download_attachment(attachment_id: int, db: Session = Depends(get_db),
                              current_user: User = Depends(get_current_user)):
    attachment = _get_visible_attachment(db, attachment_id, current_user)
    file_path = attachment_linker.file_path(attachment)
    if not file_path.exists():
        api_logger.error("Attachment file missing", extra={
            "attachment_id": attachment.id,
            "disk_filename": attachment.disk_filename
        })
        raise HTTPException(status_code=404, detail="Attachment file not found")

    return FileResponse(
        file_path,
        media_type=attachment.content_type or "application/octet-stream",
        filename=attachment.filename
    )


@router.delete("/{attachment_id}")
async def delete_attachment(attachment_id: int, db: Session = Depends(get_db),
                            current_user: User = Depends(get_current_user)):
    attachment = _get_visible_attachment(db, attachment_id, current_user)
    try:
        await attachment_linker.delete(db, attachment, current_user)
    except AttachmentInUseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AttachmentPermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"success": True}
