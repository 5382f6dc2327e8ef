# app/services/mailer.py
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from app.background import run_sync
from app.settings.config import settings

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    pass


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    subtype: str = "pdf"


class DeliveryChannel(Protocol):
    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        attachment: Optional[Attachment] = None,
    ) -> None: ...


def build_message(
    from_addr: str,
    to_email: str,
    subject: str,
    html_body: str,
    attachment: Optional[Attachment] = None,
    reply_to: Optional[str] = None,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["From"] = from_addr
    msg["To"] = to_email
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to

    msg.attach(MIMEText(html_body, "html", "utf-8"))
    if attachment:
        part = MIMEApplication(attachment.content, _subtype=attachment.subtype)
        part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
        msg.attach(part)
    return msg


def send_email(
    to_email: str,
    subject: str,
    html_body: str,
    attachment: Optional[Attachment] = None,
    reply_to: Optional[str] = None,
) -> None:
    """
    Sends an email using SMTP or 'dummy' transport (logs only).
    Uses STARTTLS/SSL based on settings; logs in if SMTP_USERNAME is provided.
    Keeps From == authenticated user for Gmail; puts branded address in Reply-To.
    Raises DeliveryError when the SMTP exchange fails.
    """
    transport = (settings.EMAIL_TRANSPORT or "smtp").lower()

    if transport == "dummy":
        logger.info(
            "DUMMY EMAIL (not sent) to=%s subject=%r attachment=%s (%d bytes)\n%s",
            to_email,
            subject,
            attachment.filename if attachment else None,
            len(attachment.content) if attachment else 0,
            html_body,
        )
        return

    from_addr = (settings.SMTP_FROM or settings.SMTP_USERNAME or "").strip()

    # Gmail enforces From to match the authenticated account; push branded address into Reply-To
    if settings.SMTP_USERNAME and from_addr and from_addr.lower() != settings.SMTP_USERNAME.lower():
        if not reply_to:
            reply_to = from_addr
        from_addr = settings.SMTP_USERNAME
    if not from_addr:
        raise DeliveryError("SMTP_FROM or SMTP_USERNAME must be configured")

    msg = build_message(from_addr, to_email, subject, html_body, attachment, reply_to)

    host = settings.SMTP_HOST
    port = int(settings.SMTP_PORT or 587)

    try:
        if settings.SMTP_USE_SSL:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(host, port, context=context, timeout=30) as s:
                if settings.SMTP_USERNAME:
                    s.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
                s.sendmail(from_addr, [to_email], msg.as_string())
        else:
            with smtplib.SMTP(host, port, timeout=30) as s:
                s.ehlo()
                if settings.SMTP_USE_TLS:
                    context = ssl.create_default_context()
                    s.starttls(context=context)
                    s.ehlo()
                if settings.SMTP_USERNAME:
                    s.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
                s.sendmail(from_addr, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        raise DeliveryError(f"SMTP error: {e}") from e
    logger.info("Email %r sent to %s", subject, to_email)


class SmtpDeliveryChannel:
    async def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        attachment: Optional[Attachment] = None,
    ) -> None:
        await run_sync(send_email, to_email, subject, html_body, attachment)


def get_delivery_channel() -> DeliveryChannel:
    return SmtpDeliveryChannel()
