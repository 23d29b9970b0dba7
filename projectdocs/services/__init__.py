# projectdocs/services/__init__.py
from .attachments import attachment_linker
from .documents import document_store
from .mailer import Notifier, build_notifier
from .notifications import NotificationDispatcher

__all__ = ["attachment_linker", "document_store", "Notifier", "build_notifier", "NotificationDispatcher"]
