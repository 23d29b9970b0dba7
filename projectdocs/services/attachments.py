# projectdocs/services/attachments.py
from pathlib import Path
from typing import Iterable, List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Attachment, Document, User
from ..utils.files import delete_file, get_relative_path, safe_filename, save_upload_file
from ..utils.logging import service_logger
from .exceptions import (
    AttachmentInUseError,
    AttachmentNotFoundError,
    AttachmentPermissionError,
    AttachmentUploadError,
)


class AttachmentLinker:
    """Stores uploads and moves them into documents"""

    @staticmethod
    def file_path(attachment: Attachment) -> Path:
        return settings.STORAGE_PATH / attachment.disk_filename

    async def store_upload(self, db: Session, upload: UploadFile, author: User,
                           description: Optional[str] = None) -> Attachment:
        """Save an upload as an attachment that no document owns yet"""
        file_path = await save_upload_file(upload, settings.ATTACHMENTS_PATH)
        filesize = file_path.stat().st_size

        if filesize == 0 or filesize > settings.MAX_ATTACHMENT_SIZE:
            await delete_file(file_path)
            service_logger.warning("Rejected upload", extra={
                "upload_filename": upload.filename,
                "filesize": filesize
            })
            if filesize == 0:
                raise AttachmentUploadError("File is empty")
            raise AttachmentUploadError(
                f"File exceeds the maximum size of {settings.MAX_ATTACHMENT_SIZE} bytes"
            )

        attachment = Attachment(
            container_id=None,
            author_id=author.id,
            filename=safe_filename(upload.filename),
            disk_filename=get_relative_path(file_path, settings.STORAGE_PATH),
            content_type=upload.content_type,
            filesize=filesize,
            description=description
        )
        try:
            db.add(attachment)
            db.commit()
        except Exception:
            db.rollback()
            await delete_file(file_path)
            raise

        db.refresh(attachment)
        service_logger.info("Stored attachment", extra={
            "attachment_id": attachment.id,
            "author_id": author.id,
            "filesize": filesize
        })
        return attachment

    async def store_uploads(self, db: Session, uploads: Iterable[UploadFile],
                            author: User) -> List[Attachment]:
        """Store several uploads, removing the ones already stored if any fails"""
        stored = []
        try:
            for upload in uploads:
                if not upload.filename:
                    continue
                stored.append(await self.store_upload(db, upload, author))
        except Exception:
            await self.discard(db, stored)
            raise
        return stored

    @staticmethod
    def attachable(attachment: Attachment, document: Document, acting_user: User) -> bool:
        if attachment.container_id is not None:
            return attachment.container_id == document.id
        return acting_user.admin or attachment.author_id == acting_user.id

    def resolve(self, db: Session, document: Document, attachment_ids: Iterable[int],
                acting_user: User) -> List[Attachment]:
        """Load the referenced attachments, raising unless every one is attachable"""
        attachment_ids = set(attachment_ids)
        if not attachment_ids:
            return []

        attachments = db.query(Attachment) \
            .filter(Attachment.id.in_(attachment_ids)) \
            .order_by(Attachment.id) \
            .all()

        usable = [a for a in attachments if self.attachable(a, document, acting_user)]
        missing = attachment_ids - {a.id for a in usable}
        if missing:
            service_logger.warning("Attachments not attachable", extra={
                "document_id": document.id,
                "attachment_ids": sorted(missing)
            })
            raise AttachmentNotFoundError(missing)
        return usable

    def attach(self, db: Session, document: Document, attachment_ids: Iterable[int],
               acting_user: User, commit: bool = True) -> List[Attachment]:
        """Link attachments to a document, all or nothing.

        Returns only the attachments this call moved into the document.
        """
        usable = self.resolve(db, document, attachment_ids, acting_user)
        if not usable:
            return []

        added = [a for a in usable if a.container_id is None]
        for attachment in added:
            attachment.container = document

        if commit:
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise

        service_logger.info("Attached files to document", extra={
            "document_id": document.id,
            "added_count": len(added)
        })
        return added

    async def add_to_document(self, db: Session, document: Document, uploads: Iterable[UploadFile],
                              attachment_ids: Iterable[int], acting_user: User) -> List[Attachment]:
        """Store new uploads and link them together with existing attachments.

        Referenced ids are checked before anything is written, and uploads stored
        by this call are removed again when linking fails.
        """
        attachment_ids = set(attachment_ids)
        self.resolve(db, document, attachment_ids, acting_user)

        stored = await self.store_uploads(db, uploads, acting_user)
        try:
            return self.attach(db, document, attachment_ids | {a.id for a in stored}, acting_user)
        except Exception:
            await self.discard(db, stored)
            raise

    @staticmethod
    def detach_all(document: Document) -> int:
        attachments = list(document.attachments)
        for attachment in attachments:
            attachment.container = None
        return len(attachments)

    async def discard(self, db: Session, attachments: List[Attachment]) -> None:
        """Remove attachment rows and their stored files"""
        if not attachments:
            return
        removed = [(a.id, self.file_path(a)) for a in attachments]
        try:
            for attachment in attachments:
                db.delete(attachment)
            db.commit()
        except Exception:
            db.rollback()
            raise

        for attachment_id, file_path in removed:
            await delete_file(file_path)
            service_logger.info("Deleted attachment", extra={"attachment_id": attachment_id})

    async def delete(self, db: Session, attachment: Attachment, acting_user: User) -> None:
        """Delete an upload no document owns, on behalf of its author or an admin"""
        if not attachment.is_uncontained:
            raise AttachmentInUseError(attachment.id)
        if not (acting_user.admin or attachment.author_id == acting_user.id):
            raise AttachmentPermissionError(attachment.id)
        await self.discard(db, [attachment])


attachment_linker = AttachmentLinker()
