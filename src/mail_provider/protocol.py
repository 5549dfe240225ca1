"""Mail transport protocol."""

from typing import Protocol

from src.mail_provider.models import SendPayload, SendResult


class MailTransport(Protocol):
    """Submits one message per call."""

    def send(self, payload: SendPayload) -> SendResult:
        """Deliver the message; raises TransportError on failure."""
        ...
