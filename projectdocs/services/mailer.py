# projectdocs/services/mailer.py
import abc
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Tuple

import aiosmtplib
import jinja2

from ..config import settings
from ..utils.logging import mail_logger

TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "templates" / "mails"

template_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(searchpath=str(TEMPLATES_PATH)),
    autoescape=jinja2.select_autoescape(enabled_extensions=("html",), default_for_string=False),
    trim_blocks=True,
    lstrip_blocks=True
)

ATTACHMENTS_ADDED = "attachments_added"
DOCUMENT_ADDED = "document_added"


@dataclass(frozen=True)
class MailDelivery:
    """Everything a notifier needs, copied out of the ORM objects"""
    kind: str
    recipient_id: int
    recipient_mail: str
    recipient_name: str
    author_name: str
    project_name: str
    project_identifier: str
    document_id: int
    document_title: str
    attachment_filenames: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def subject(self) -> str:
        if self.kind == ATTACHMENTS_ADDED:
            return f"[{self.project_name}] New file(s) in document {self.document_title}"
        return f"[{self.project_name}] New document: {self.document_title}"

    @property
    def document_url(self) -> str:
        return f"{settings.APP_URL.rstrip('/')}/documents/{self.document_id}"


class Notifier(abc.ABC):
    """Delivers a single prepared notification to its recipient"""

    @abc.abstractmethod
    async def send(self, delivery: MailDelivery) -> None:
        pass

    def render(self, delivery: MailDelivery) -> Tuple[str, str]:
        """Render the (text, html) bodies for a delivery"""
        context = {"delivery": delivery, "app_url": settings.APP_URL}
        text = template_env.get_template(f"{delivery.kind}.txt").render(**context)
        html = template_env.get_template(f"{delivery.kind}.html").render(**context)
        return text, html


class SmtpNotifier(Notifier):
    def __init__(self):
        self.hostname = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.start_tls = settings.SMTP_STARTTLS
        self.from_email = settings.MAIL_FROM

    def build_message(self, delivery: MailDelivery) -> MIMEMultipart:
        text, html = self.render(delivery)

        message = MIMEMultipart("alternative")
        message["Subject"] = delivery.subject
        message["From"] = self.from_email
        message["To"] = delivery.recipient_mail
        message.attach(MIMEText(text, "plain", "utf-8"))
        message.attach(MIMEText(html, "html", "utf-8"))
        return message

    async def send(self, delivery: MailDelivery) -> None:
        message = self.build_message(delivery)
        await aiosmtplib.send(
            message,
            hostname=self.hostname,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.start_tls
        )
        mail_logger.info("Mail sent", extra={
            "kind": delivery.kind,
            "recipient_id": delivery.recipient_id,
            "document_id": delivery.document_id
        })


class LogNotifier(Notifier):
    """Used when no SMTP host is configured"""

    async def send(self, delivery: MailDelivery) -> None:
        text, _ = self.render(delivery)
        mail_logger.info(f"DEV MODE - Would send mail to {delivery.recipient_mail}", extra={
            "kind": delivery.kind,
            "subject": delivery.subject,
            "recipient_id": delivery.recipient_id
        })
        mail_logger.debug(f"Content: {text[:200]}...")


def build_notifier() -> Notifier:
    if settings.smtp_configured:
        return SmtpNotifier()
    return LogNotifier()
