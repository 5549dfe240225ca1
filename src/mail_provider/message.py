"""Build the RFC 2822 envelope and the base64url `raw` field Gmail expects."""

import base64
import uuid
from email.message import EmailMessage
from email.utils import formatdate

from src.mail_provider.models import SendPayload


def new_message_id(sender: str) -> str:
    domain = sender.rsplit("@", 1)[-1].strip(" >") if "@" in sender else "localhost"
    return f"<{uuid.uuid4()}@{domain}>"


def build_message(payload: SendPayload) -> EmailMessage:
    """From/To/Subject/Date plus a unique Message-ID, with a UTF-8 text body."""
    message = EmailMessage()
    message["From"] = payload.sender
    message["To"] = payload.to
    message["Subject"] = payload.subject
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = new_message_id(payload.sender)
    message.set_content(payload.body)
    return message


def encode_raw(message: EmailMessage) -> str:
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")
