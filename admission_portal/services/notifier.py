# admission_portal/services/notifier.py
"""
Email notifications for lifecycle events.

Dispatch is fire-and-forget: routers schedule ``send_email`` on FastAPI
BackgroundTasks and nothing waits on the result. Failures are logged and
reported as ``False``, never raised.
"""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Callable, Dict, Tuple

from admission_portal.core.config import settings

logger = logging.getLogger(__name__)

SIGNATURE = "Best regards,\nThe Admission Team"


def _welcome(name: str) -> Tuple[str, str]:
    return (
        "Welcome to Our College Admission System",
        f"Dear {name},\n\nThank you for registering with our college admission system. "
        f"You can now log in and apply for our programs.\n\n{SIGNATURE}",
    )


def _application_submitted(name: str, application_number: str, program_name: str) -> Tuple[str, str]:
    return (
        "Application Submitted Successfully",
        f"Dear {name},\n\nYour application ({application_number}) for {program_name} has been "
        f"submitted successfully. You can check the status of your application by logging "
        f"into your account.\n\n{SIGNATURE}",
    )


def _application_status_update(name: str, application_number: str, program_name: str, status: str) -> Tuple[str, str]:
    return (
        "Application Status Updated",
        f"Dear {name},\n\nThe status of your application ({application_number}) for {program_name} "
        f'has been updated to "{status}". Please log in to your account for more details.\n\n{SIGNATURE}',
    )


def _document_verified(name: str, document_name: str, status: str) -> Tuple[str, str]:
    outcome = "verified and approved" if status == "Approved" else "reviewed but needs attention"
    follow_up = ""
    if status == "Rejected":
        follow_up = " Please log in to your account to see the remarks and resubmit the document."
    return (
        "Document Verification Update",
        f'Dear {name},\n\nYour document "{document_name}" has been {outcome}.{follow_up}\n\n{SIGNATURE}',
    )


TEMPLATES: Dict[str, Callable[..., Tuple[str, str]]] = {
    "welcome": _welcome,
    "application_submitted": _application_submitted,
    "application_status_update": _application_status_update,
    "document_verified": _document_verified,
}


def render(template: str, **data) -> Tuple[str, str]:
    try:
        builder = TEMPLATES[template]
    except KeyError:
        raise ValueError(f"Unknown email template: {template}")
    return builder(**data)


def send_email(to: str, template: str, **data) -> bool:
    try:
        subject, body = render(template, **data)
    except (ValueError, TypeError):
        logger.exception("Could not render email template %s", template)
        return False

    if not settings.EMAIL_ENABLED:
        logger.info("Email disabled; would send %r to %s", template, to)
        return True

    msg = EmailMessage()
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("Email sending error (template=%s, to=%s)", template, to)
        return False

    logger.info("Email sent: %s to %s", template, to)
    return True
