# projectdocs/services/exceptions.py


class ProjectDocsError(Exception):
    """Base class for domain errors raised by the service layer"""


class ProjectNotFoundError(ProjectDocsError):
    def __init__(self, project_ref):
        self.project_ref = project_ref
        super().__init__(f"Project {project_ref} not found")


class DocumentNotFoundError(ProjectDocsError):
    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found")


class AttachmentNotFoundError(ProjectDocsError):
    def __init__(self, attachment_ids):
        self.attachment_ids = sorted(attachment_ids)
        ids = ", ".join(str(i) for i in self.attachment_ids)
        super().__init__(f"Attachments not found: {ids}")


class DocumentValidationError(ProjectDocsError):
    """Carries field -> message errors for re-rendering a form"""

    def __init__(self, errors: dict):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))


class AttachmentUploadError(ProjectDocsError):
    pass


class AttachmentInUseError(ProjectDocsError):
    def __init__(self, attachment_id: int):
        self.attachment_id = attachment_id
        super().__init__("Attachment belongs to a document")


class AttachmentPermissionError(ProjectDocsError):
    def __init__(self, attachment_id: int):
        self.attachment_id = attachment_id
        super().__init__("Only the author can delete this attachment")
