from .contact import ContactFormData, ContactNotifier, handle_contact_request
from .transport import EmailMessage, IEmailTransport, RecordingTransport, ResendTransport

__all__ = [
    "ContactFormData",
    "ContactNotifier",
    "EmailMessage",
    "IEmailTransport",
    "RecordingTransport",
    "ResendTransport",
    "handle_contact_request",
]
