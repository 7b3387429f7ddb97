"""Email notification service.

Templates are rendered by ``src.services.email_templates`` and handed to a
``MailTransport``. The transport is injected so tests can capture messages
instead of talking to an SMTP server.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from src.config import Settings, get_settings
from src.exceptions import NotificationError
from src.services.email_templates import TEMPLATES, EmailTemplate, NotificationEvent

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    """Anything that can deliver a MIME message."""

    def send(self, message: MIMEMultipart) -> None: ...


class SmtpTransport:
    """Deliver messages through an SMTP server using STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpTransport":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_password,
        )

    def send(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)


class EmailService:
    """Render templated emails for lifecycle events and send them."""

    def __init__(self, transport: MailTransport, settings: Settings | None = None) -> None:
        self.transport = transport
        self.settings = settings or get_settings()

    @property
    def sender(self) -> str:
        address = self.settings.email_user or "no-reply@localhost"
        return f"{self.settings.email_from_name} <{address}>"

    def build_message(self, to: str, template: EmailTemplate) -> MIMEMultipart:
        """Build a multipart/alternative message with text and HTML parts."""
        message = MIMEMultipart("alternative")
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = template.subject
        message.attach(MIMEText(template.text, "plain", "utf-8"))
        message.attach(MIMEText(template.html, "html", "utf-8"))
        return message

    def send_email(self, to: str, template: EmailTemplate) -> None:
        """Send a rendered template, raising ``NotificationError`` on transport failure."""
        try:
            self.transport.send(self.build_message(to, template))
        except Exception as e:
            logger.error(f"Failed to send '{template.subject}' to {to}: {e}")
            raise NotificationError(f"Failed to send email to {to}") from e

    def render(self, event: NotificationEvent, **data) -> EmailTemplate:
        """Select the template for ``event`` and bind ``data`` into it."""
        template_fn = TEMPLATES[NotificationEvent(event)]
        data.setdefault("base_url", self.settings.frontend_url)
        return template_fn(**data)

    def dispatch(self, event: NotificationEvent, to: str, **data) -> EmailTemplate:
        """Render and send the email for ``event``."""
        template = self.render(event, **data)
        self.send_email(to, template)
        logger.info(f"Sent {NotificationEvent(event).value} email to {to}")
        return template

    def dispatch_quietly(self, event: NotificationEvent, to: str, **data) -> bool:
        """Dispatch without raising; used after a lifecycle write has committed.

        Returns True if the email was handed to the transport.
        """
        try:
            self.dispatch(event, to, **data)
        except NotificationError as e:
            logger.warning(f"Dropped {NotificationEvent(event).value} email to {to}: {e.message}")
            return False
        return True

    def send_welcome_email(self, user_email: str, user_name: str) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.WELCOME, user_email, user_name=user_name, user_email=user_email
        )

    def send_subscription_reminder(
        self, user_email: str, user_name: str, subscription: dict
    ) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.REMINDER, user_email, user_name=user_name, subscription=subscription
        )

    def send_password_reset_email(
        self, user_email: str, user_name: str, reset_token: str, expires_in: int = 15
    ) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.PASSWORD_RESET,
            user_email,
            user_name=user_name,
            reset_token=reset_token,
            expires_in=expires_in,
        )

    def send_monthly_report(self, user_email: str, user_name: str, report: dict) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.MONTHLY_REPORT, user_email, user_name=user_name, report=report
        )

    def send_email_verification(
        self, user_email: str, user_name: str, verification_token: str
    ) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.VERIFICATION,
            user_email,
            user_name=user_name,
            verification_token=verification_token,
        )

    def send_subscription_cancelled(
        self, user_email: str, user_name: str, subscription: dict
    ) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.CANCELLATION,
            user_email,
            user_name=user_name,
            subscription=subscription,
        )

    def send_notification(
        self,
        user_email: str,
        user_name: str,
        title: str,
        message: str,
        level: str = "info",
        action_url: str | None = None,
        action_text: str = "Learn More",
    ) -> EmailTemplate:
        return self.dispatch(
            NotificationEvent.NOTIFICATION,
            user_email,
            user_name=user_name,
            title=title,
            message=message,
            level=level,
            action_url=action_url,
            action_text=action_text,
        )

    def send_bulk_emails(
        self, recipients: list[dict], title: str, message: str, level: str = "info"
    ) -> list[dict]:
        """Send one notification per ``{"email", "name"}`` recipient.

        Failures are collected per recipient instead of raised.
        """
        results = []
        for recipient in recipients:
            try:
                self.send_notification(recipient["email"], recipient["name"], title, message, level)
                results.append({"email": recipient["email"], "success": True})
            except NotificationError as e:
                results.append({"email": recipient["email"], "success": False, "error": e.message})
        return results


def get_email_service() -> EmailService:
    """Get an email service backed by the configured SMTP server."""
    settings = get_settings()
    return EmailService(SmtpTransport.from_settings(settings), settings)
