# projectdocs/services/notifications.py
from typing import Iterable, List, Set

from ..models import Attachment, Document, NotificationSetting, User
from ..models.member import VIEW_DOCUMENTS
from ..utils.logging import service_logger
from .mailer import ATTACHMENTS_ADDED, DOCUMENT_ADDED, MailDelivery, Notifier
from .permissions import has_permission, notification_enabled


class NotificationDispatcher:
    """Decides who hears about new documents and attachments, then delivers.

    Recipient selection runs while the request's session is still open and
    produces frozen `MailDelivery` snapshots; `deliver` only touches those
    snapshots, so it can run after the response in a background task.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    def recipients(self, document: Document, acting_user: User) -> List[User]:
        project = document.project
        selected = []
        for member in project.members:
            user = member.user
            if acting_user is not None and user.id == acting_user.id:
                continue
            if not has_permission(user, project, VIEW_DOCUMENTS):
                continue
            if not notification_enabled(user, NotificationSetting.DOCUMENT_ADDED, project):
                continue
            selected.append(user)

        service_logger.debug("Selected notification recipients", extra={
            "document_id": document.id,
            "member_count": len(project.members),
            "recipient_count": len(selected)
        })
        return selected

    def _snapshot(self, kind: str, document: Document, recipient: User, acting_user: User,
                  attachments: Iterable[Attachment] = ()) -> MailDelivery:
        return MailDelivery(
            kind=kind,
            recipient_id=recipient.id,
            recipient_mail=recipient.mail,
            recipient_name=recipient.name,
            author_name=acting_user.name if acting_user is not None else "",
            project_name=document.project.name,
            project_identifier=document.project.identifier,
            document_id=document.id,
            document_title=document.title,
            attachment_filenames=tuple(a.filename for a in attachments)
        )

    def prepare_attachments_added(self, document: Document, attachments: List[Attachment],
                                  acting_user: User) -> List[MailDelivery]:
        # One mail per recipient for the whole batch of attachments
        if not attachments:
            return []
        return [
            self._snapshot(ATTACHMENTS_ADDED, document, recipient, acting_user, attachments)
            for recipient in self.recipients(document, acting_user)
        ]

    def prepare_document_added(self, document: Document, acting_user: User) -> List[MailDelivery]:
        return [
            self._snapshot(DOCUMENT_ADDED, document, recipient, acting_user, document.attachments)
            for recipient in self.recipients(document, acting_user)
        ]

    async def deliver(self, deliveries: List[MailDelivery]) -> Set[int]:
        """Send every delivery; a failing recipient never blocks the others"""
        notified = set()
        for delivery in deliveries:
            try:
                await self.notifier.send(delivery)
                notified.add(delivery.recipient_id)
            except Exception as e:
                service_logger.error("Notification delivery failed", extra={
                    "kind": delivery.kind,
                    "recipient_id": delivery.recipient_id,
                    "document_id": delivery.document_id,
                    "error": str(e)
                }, exc_info=True)

        if deliveries:
            service_logger.info("Delivered notifications", extra={
                "kind": deliveries[0].kind,
                "document_id": deliveries[0].document_id,
                "attempted": len(deliveries),
                "delivered": len(notified)
            })
        return notified

    async def notify_attachments_added(self, document: Document, attachments: List[Attachment],
                                       acting_user: User) -> Set[int]:
        deliveries = self.prepare_attachments_added(document, attachments, acting_user)
        return await self.deliver(deliveries)

    async def notify_document_added(self, document: Document, acting_user: User) -> Set[int]:
        deliveries = self.prepare_document_added(document, acting_user)
        return await self.deliver(deliveries)
