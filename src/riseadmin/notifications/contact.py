"""Contact-form notifications: one mail to the school, one to the parent."""

from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .. import config
from ..errors import RiseAdminError, ValidationError
from .transport import EmailMessage, IEmailTransport

_LOGGER = logging.getLogger(__name__)

_NOT_PROVIDED = "Not provided"


@dataclass(frozen=True)
class ContactFormData:
    parent_name: str
    email: str
    phone: Optional[str] = None
    student_name: Optional[str] = None
    grade_level: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_mapping(cls, payload: Any) -> "ContactFormData":
        if not isinstance(payload, Mapping):
            raise ValidationError("Contact form payload must be a JSON object")

        def text(key: str) -> Optional[str]:
            value = payload.get(key)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        parent_name = text("parent_name")
        email = text("email")
        if not parent_name:
            raise ValidationError("parent_name is required")
        if not email or "@" not in email:
            raise ValidationError("A valid email is required")
        return cls(
            parent_name=parent_name,
            email=email,
            phone=text("phone"),
            student_name=text("student_name"),
            grade_level=text("grade_level"),
            message=text("message"),
        )


@dataclass(frozen=True)
class ContactReceipt:
    admin: Dict[str, Any]
    confirmation: Dict[str, Any]


def _esc(value: Optional[str], fallback: str = _NOT_PROVIDED) -> str:
    return html.escape(value) if value else fallback


def build_admin_message(
    form: ContactFormData,
    *,
    sender: str = config.EMAIL_SENDER,
    recipients: Optional[List[str]] = None,
) -> EmailMessage:
    body = (
        "<h1>New Contact Form Submission</h1>"
        "<h2>Contact Details</h2>"
        "<ul>"
        f"<li><strong>Parent/Guardian Name:</strong> {_esc(form.parent_name)}</li>"
        f"<li><strong>Email:</strong> {_esc(form.email)}</li>"
        f"<li><strong>Phone:</strong> {_esc(form.phone)}</li>"
        f"<li><strong>Student Name:</strong> {_esc(form.student_name)}</li>"
        f"<li><strong>Grade Level:</strong> {_esc(form.grade_level)}</li>"
        "</ul>"
        "<h2>Message</h2>"
        f"<p>{_esc(form.message, 'No message provided')}</p>"
    )
    return EmailMessage(
        sender=sender,
        to=list(recipients or config.EMAIL_ADMIN_RECIPIENTS),
        subject=f"New Contact Form Submission from {form.parent_name}",
        html=body,
    )


def build_confirmation_message(
    form: ContactFormData,
    *,
    sender: str = config.EMAIL_SENDER,
    phone: str = config.EMAIL_CONTACT_PHONE,
    school: str = config.SCHOOL_NAME,
) -> EmailMessage:
    body = (
        f"<h1>Thank you for reaching out, {_esc(form.parent_name)}!</h1>"
        f"<p>We have received your inquiry and appreciate your interest in {html.escape(school)}.</p>"
        "<p>Our admissions team will review your message and get back to you within 24-48 hours.</p>"
        f"<p>If you have any urgent questions, please don't hesitate to call us at {html.escape(phone)}.</p>"
        "<br>"
        "<p>Best regards,</p>"
        f"<p><strong>The {html.escape(school)} Team</strong></p>"
    )
    return EmailMessage(
        sender=sender,
        to=[form.email],
        subject=f"Thank you for contacting {school}",
        html=body,
    )


class ContactNotifier:
    """Send the admin notification first, then the parent confirmation."""

    def __init__(
        self,
        transport: IEmailTransport,
        *,
        sender: str = config.EMAIL_SENDER,
        admin_recipients: Optional[List[str]] = None,
        contact_phone: str = config.EMAIL_CONTACT_PHONE,
    ) -> None:
        self._transport = transport
        self._sender = sender
        self._admin_recipients = list(admin_recipients or config.EMAIL_ADMIN_RECIPIENTS)
        self._phone = contact_phone

    def notify(self, form: ContactFormData) -> ContactReceipt:
        _LOGGER.info("Contact form submission from %s", form.parent_name)
        admin = self._transport.send(
            build_admin_message(form, sender=self._sender, recipients=self._admin_recipients)
        )
        confirmation = self._transport.send(
            build_confirmation_message(form, sender=self._sender, phone=self._phone)
        )
        return ContactReceipt(admin=admin, confirmation=confirmation)


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


def _json_response(status: int, payload: Any) -> HttpResponse:
    headers = {"Content-Type": "application/json", **config.CORS_HEADERS}
    return HttpResponse(status=status, body=json.dumps(payload).encode("utf-8"), headers=headers)


def handle_contact_request(method: str, body: bytes, notifier: ContactNotifier) -> HttpResponse:
    """Serve one request to the contact-notification endpoint."""

    if method.upper() == "OPTIONS":
        return HttpResponse(status=200, headers=dict(config.CORS_HEADERS))
    try:
        form = ContactFormData.from_mapping(json.loads(body or b"null"))
        receipt = notifier.notify(form)
    except (ValueError, RiseAdminError) as exc:
        # ``json.JSONDecodeError`` is a ``ValueError``.
        _LOGGER.error("Contact notification failed: %s", exc)
        return _json_response(500, {"error": str(exc)})
    return _json_response(
        200,
        {"success": True, "adminEmail": receipt.admin, "confirmationEmail": receipt.confirmation},
    )


__all__ = [
    "ContactFormData",
    "ContactNotifier",
    "ContactReceipt",
    "HttpResponse",
    "build_admin_message",
    "build_confirmation_message",
    "handle_contact_request",
]
