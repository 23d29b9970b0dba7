# projectdocs/services/documents.py
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session, joinedload

from ..models import Document, DocumentCategory, Project, User
from ..schemas.document import DocumentCreate, DocumentUpdate
from ..utils.logging import service_logger
from .attachments import attachment_linker
from .exceptions import DocumentNotFoundError, DocumentValidationError

UNCATEGORIZED = "Uncategorized"
SORT_OPTIONS = ("category", "date", "title")


def _validation_errors(error: ValidationError) -> Dict[str, str]:
    errors = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "document"
        errors.setdefault(field, item["msg"])
    return errors


class DocumentStore:
    """Persistence and grouping of project documents"""

    @staticmethod
    def _check_category(db: Session, project: Project, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        category = db.query(DocumentCategory).filter(DocumentCategory.id == category_id).first()
        if category is None or category.project_id != project.id:
            raise DocumentValidationError({"category_id": "Category does not belong to this project"})

    def create(self, db: Session, project: Project, attributes: dict, acting_user: User,
               attachment_ids: Iterable[int] = ()) -> Document:
        """Create a document, linking any uploaded attachments in the same transaction"""
        try:
            data = DocumentCreate(**{**attributes, "project_id": project.id})
        except ValidationError as e:
            raise DocumentValidationError(_validation_errors(e))

        self._check_category(db, project, data.category_id)

        try:
            document = Document(**data.model_dump())
            db.add(document)
            db.flush()

            attachment_ids = set(attachment_ids)
            if attachment_ids:
                attachment_linker.attach(db, document, attachment_ids, acting_user, commit=False)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(document)
        service_logger.info("Created document", extra={
            "document_id": document.id,
            "project_id": project.id,
            "attachment_count": len(document.attachments)
        })
        return document

    def list_by_project(self, db: Session, project: Project,
                        sort_by: Optional[str] = None) -> Dict[str, List[Document]]:
        """Documents of a project grouped for display.

        Grouped by category name unless `sort_by` asks for "date" or "title".
        """
        documents = db.query(Document) \
            .options(joinedload(Document.category)) \
            .filter(Document.project_id == project.id) \
            .order_by(Document.created_at.desc(), Document.id.desc()) \
            .all()

        if sort_by == "date":
            return self._group_by_date(documents)
        if sort_by == "title":
            return self._group_by_title(documents)
        return self._group_by_category(project, documents)

    @staticmethod
    def _group_by_category(project: Project, documents: List[Document]) -> Dict[str, List[Document]]:
        by_category = {}
        for document in documents:
            by_category.setdefault(document.category_id, []).append(document)

        grouped = OrderedDict()
        for category in project.categories:
            if category.id in by_category:
                grouped.setdefault(category.name, []).extend(by_category[category.id])
        if None in by_category:
            grouped.setdefault(UNCATEGORIZED, []).extend(by_category[None])
        return grouped

    @staticmethod
    def _group_by_date(documents: List[Document]) -> Dict[str, List[Document]]:
        grouped = OrderedDict()
        for document in documents:
            key = document.created_at.date().isoformat() if document.created_at else ""
            grouped.setdefault(key, []).append(document)
        return grouped

    @staticmethod
    def _group_by_title(documents: List[Document]) -> Dict[str, List[Document]]:
        grouped = OrderedDict()
        for document in sorted(documents, key=lambda d: (d.title.lower(), d.id)):
            grouped.setdefault(document.title[:1].upper(), []).append(document)
        return grouped

    def get(self, db: Session, document_id: int) -> Document:
        document = db.query(Document).filter(Document.id == document_id).first()
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def count(self, db: Session, project: Project) -> int:
        return db.query(Document).filter(Document.project_id == project.id).count()

    def update(self, db: Session, document: Document, attributes: dict) -> Document:
        try:
            data = DocumentUpdate(**attributes)
        except ValidationError as e:
            raise DocumentValidationError(_validation_errors(e))

        self._check_category(db, document.project, data.category_id)

        try:
            for field, value in data.model_dump().items():
                setattr(document, field, value)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(document)
        service_logger.info("Updated document", extra={"document_id": document.id})
        return document

    def destroy(self, db: Session, document_id: int) -> Project:
        """Delete a document, leaving its attachments uncontained"""
        document = self.get(db, document_id)
        project = document.project

        try:
            detached = attachment_linker.detach_all(document)
            db.delete(document)
            db.commit()
        except Exception:
            db.rollback()
            raise

        service_logger.info("Destroyed document", extra={
            "document_id": document_id,
            "project_id": project.id,
            "detached_attachments": detached
        })
        return project


document_store = DocumentStore()
