import json
from unittest.mock import Mock

import pytest

from riseadmin.errors import EmailDeliveryError, ValidationError
from riseadmin.notifications.contact import (
    ContactFormData,
    ContactNotifier,
    build_admin_message,
    build_confirmation_message,
    handle_contact_request,
)
from riseadmin.notifications.transport import IEmailTransport, RecordingTransport

SUBMISSION = {
    "parent_name": "Daw Aye",
    "email": "aye@example.com",
    "phone": "+95 9 123",
    "student_name": "Mg Mg",
    "grade_level": "Grade 5",
    "message": "Do you have places for <next> term?",
}


def test_form_requires_name_and_email():
    with pytest.raises(ValidationError):
        ContactFormData.from_mapping({"email": "a@b.c"})
    with pytest.raises(ValidationError):
        ContactFormData.from_mapping({"parent_name": "A", "email": "not-an-email"})
    with pytest.raises(ValidationError):
        ContactFormData.from_mapping(["not", "a", "mapping"])


def test_admin_message_lists_details_and_escapes_html():
    form = ContactFormData.from_mapping(SUBMISSION)

    message = build_admin_message(form, recipients=["office@example.org"])

    assert message.subject == "New Contact Form Submission from Daw Aye"
    assert message.to == ["office@example.org"]
    assert "Grade 5" in message.html
    assert "&lt;next&gt;" in message.html
    assert "<next>" not in message.html


def test_optional_fields_use_placeholders():
    form = ContactFormData.from_mapping({"parent_name": "U Ba", "email": "ba@example.com", "phone": "  "})

    html = build_admin_message(form).html

    assert html.count("Not provided") == 3
    assert "No message provided" in html


def test_confirmation_goes_to_parent():
    form = ContactFormData.from_mapping(SUBMISSION)

    message = build_confirmation_message(form, phone="+95 1 234")

    assert message.to == ["aye@example.com"]
    assert message.subject == "Thank you for contacting Rise Learning Provision"
    assert "Thank you for reaching out, Daw Aye!" in message.html
    assert "+95 1 234" in message.html


def test_notifier_sends_admin_then_confirmation():
    transport = RecordingTransport()
    notifier = ContactNotifier(transport, sender="School <noreply@example.org>", admin_recipients=["office@example.org"])

    receipt = notifier.notify(ContactFormData.from_mapping(SUBMISSION))

    assert [message.to for message in transport.sent] == [["office@example.org"], ["aye@example.com"]]
    assert all(message.sender == "School <noreply@example.org>" for message in transport.sent)
    assert receipt.admin == {"id": "dry-run-1"}
    assert receipt.confirmation == {"id": "dry-run-2"}


def test_handler_success_response():
    notifier = ContactNotifier(RecordingTransport())

    response = handle_contact_request("POST", json.dumps(SUBMISSION).encode(), notifier)

    assert response.status == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Content-Type"] == "application/json"
    assert response.json() == {
        "success": True,
        "adminEmail": {"id": "dry-run-1"},
        "confirmationEmail": {"id": "dry-run-2"},
    }


def test_handler_preflight():
    response = handle_contact_request("options", b"", ContactNotifier(RecordingTransport()))

    assert response.status == 200
    assert response.body is None
    assert "Access-Control-Allow-Headers" in response.headers


@pytest.mark.parametrize("body", [b"{not json", b"", json.dumps({"email": "x@y.z"}).encode()])
def test_handler_reports_bad_requests_as_500(body):
    response = handle_contact_request("POST", body, ContactNotifier(RecordingTransport()))

    assert response.status == 500
    assert "error" in response.json()
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_handler_reports_delivery_failure():
    transport = Mock(spec=IEmailTransport)
    transport.send.side_effect = EmailDeliveryError("Email API returned 403: forbidden")

    response = handle_contact_request("POST", json.dumps(SUBMISSION).encode(), ContactNotifier(transport))

    assert response.status == 500
    assert response.json() == {"error": "Email API returned 403: forbidden"}
