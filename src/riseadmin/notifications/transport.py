"""Transactional email transports."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import EMAIL_API_BASE_URL, EMAIL_TIMEOUT_SEC
from ..errors import EmailDeliveryError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    sender: str
    to: List[str]
    subject: str
    html: str

    def as_payload(self) -> Dict[str, Any]:
        return {"from": self.sender, "to": list(self.to), "subject": self.subject, "html": self.html}


class IEmailTransport(ABC):
    @abstractmethod
    def send(self, message: EmailMessage) -> Dict[str, Any]:
        """Deliver *message* and return the provider's receipt"""
        pass


class ResendTransport(IEmailTransport):
    """Send mail through the Resend HTTP API."""

    def __init__(self, api_key: str, base_url: str = EMAIL_API_BASE_URL, timeout: float = EMAIL_TIMEOUT_SEC):
        if not api_key:
            raise EmailDeliveryError("No email API key configured")
        self._api_key = api_key
        self._endpoint = base_url.rstrip("/") + "/emails"
        self._timeout = timeout

    def send(self, message: EmailMessage) -> Dict[str, Any]:
        body = json.dumps(message.as_payload()).encode("utf-8")
        request = Request(
            self._endpoint,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )
        try:
            with urlopen(request, timeout=self._timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", "replace")
            raise EmailDeliveryError(f"Email API returned {exc.code}: {detail}") from exc
        except (URLError, OSError) as exc:
            raise EmailDeliveryError(f"Email API unreachable: {exc}") from exc
        try:
            receipt = json.loads(raw or b"{}")
        except ValueError as exc:
            raise EmailDeliveryError("Email API returned a malformed receipt") from exc
        _LOGGER.info("Email %r sent to %s", message.subject, ", ".join(message.to))
        return receipt


@dataclass
class RecordingTransport(IEmailTransport):
    """Keep messages in memory; used for dry runs from the CLI."""

    sent: List[EmailMessage] = field(default_factory=list)

    def send(self, message: EmailMessage) -> Dict[str, Any]:
        self.sent.append(message)
        return {"id": f"dry-run-{len(self.sent)}"}


__all__ = ["EmailMessage", "IEmailTransport", "RecordingTransport", "ResendTransport"]
