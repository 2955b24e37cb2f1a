from __future__ import annotations

import logging
import smtplib
import ssl
import threading
from dataclasses import dataclass
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from jinja2 import Environment

from . import templates
from .notifier import Notifier

logger = logging.getLogger(__name__)

# Subjects are plain text; bodies are HTML and escape user-supplied values.
_subjects = Environment(autoescape=False)
_bodies = Environment(autoescape=True)


def render_subject(source: str, context: dict) -> str:
    return _subjects.from_string(source).render(context)


def render_body(source: str, context: dict) -> str:
    return _bodies.from_string(source).render(context)


@dataclass(frozen=True)
class MailConfig:
    host: str
    port: int
    username: str
    password: str
    sender: str
    use_tls: bool = True

    @classmethod
    def from_settings(cls, settings) -> Optional["MailConfig"]:
        host = getattr(settings, "MAIL_SERVER", None)
        if not host:
            return None
        username = getattr(settings, "MAIL_USERNAME", "") or ""
        return cls(
            host=str(host),
            port=int(getattr(settings, "MAIL_PORT", 587)),
            username=username,
            password=getattr(settings, "MAIL_PASSWORD", "") or "",
            sender=getattr(settings, "MAIL_DEFAULT_SENDER", None) or username,
            use_tls=bool(getattr(settings, "MAIL_USE_TLS", True)),
        )


class SmtpNotifier(Notifier):
    """Renders Jinja2 templates and sends over SMTP on a daemon thread."""

    def __init__(self, config: MailConfig, *, background: bool = True):
        self._config = config
        self._background = background

    def registration_approved(
        self, *, to: str, full_name: str, course_name: str, class_name: str, sessions: list[str], qr_png: Optional[bytes]
    ) -> None:
        context = {
            "full_name": full_name,
            "course_name": course_name,
            "class_name": class_name,
            "sessions": sessions,
            "has_qr": qr_png is not None,
        }
        self._dispatch(
            to,
            render_subject(templates.REGISTRATION_APPROVED_SUBJECT, context),
            render_body(templates.REGISTRATION_APPROVED, context),
            attachment=qr_png,
        )

    def registration_rejected(self, *, to: str, full_name: str, course_name: str, reason: Optional[str]) -> None:
        context = {"full_name": full_name, "course_name": course_name, "reason": reason}
        self._dispatch(
            to,
            render_subject(templates.REGISTRATION_REJECTED_SUBJECT, context),
            render_body(templates.REGISTRATION_REJECTED, context),
        )

    def password_reset(self, *, to: str, full_name: str, temporary_password: str) -> None:
        context = {"full_name": full_name, "temporary_password": temporary_password}
        self._dispatch(
            to,
            render_subject(templates.PASSWORD_RESET_SUBJECT, context),
            render_body(templates.PASSWORD_RESET, context),
        )

    def _dispatch(self, to: str, subject: str, body: str, *, attachment: Optional[bytes] = None) -> None:
        msg = self.build_message(to, subject, body, attachment=attachment)
        if not self._background:
            self._send(msg)
            return
        threading.Thread(target=self._send, args=(msg,), daemon=True).start()

    def build_message(self, to: str, subject: str, body: str, *, attachment: Optional[bytes] = None) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = self._config.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "html"))
        if attachment is not None:
            image = MIMEImage(attachment, _subtype="png")
            image.add_header("Content-Disposition", "attachment", filename="attendance-qr.png")
            msg.attach(image)
        return msg

    def _send(self, msg: MIMEMultipart) -> None:
        try:
            with smtplib.SMTP(self._config.host, self._config.port, timeout=30) as server:
                if self._config.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self._config.username:
                    server.login(self._config.username, self._config.password)
                server.send_message(msg)
            logger.info("Email sent to %s: %s", msg["To"], msg["Subject"])
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", msg["To"])
