"""Mail provider: Gmail API transport and local mock."""

from src.mail_provider.errors import TransportError
from src.mail_provider.gmail_mock import GmailMockTransport
from src.mail_provider.message import build_message, encode_raw
from src.mail_provider.models import SendPayload, SendResult
from src.mail_provider.protocol import MailTransport

__all__ = [
    "GmailMockTransport",
    "MailTransport",
    "SendPayload",
    "SendResult",
    "TransportError",
    "build_message",
    "encode_raw",
]
