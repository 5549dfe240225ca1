"""Gmail API transport (users.messages.send as the authorized user)."""

from typing import Any, Callable

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from src.auth.manager import AuthorizedContext
from src.mail_provider.errors import TransportError
from src.mail_provider.message import build_message, encode_raw
from src.mail_provider.models import SendPayload, SendResult
from src.utils.logger import get_logger

logger = get_logger("gmail_mailer.gmail_transport")

ServiceFactory = Callable[[AuthorizedContext], Any]


def default_service_factory(context: AuthorizedContext) -> Any:
    return build("gmail", "v1", credentials=context.credentials, cache_discovery=False)


class GmailTransport:
    """Sends through the Gmail REST API using the context's credentials.

    The underlying HTTP transport refreshes an expired access token before the
    first request when a refresh token is available.
    """

    def __init__(self, context: AuthorizedContext, service_factory: ServiceFactory | None = None):
        self._context = context
        self._service_factory = service_factory or default_service_factory
        self._service = None

    @property
    def service(self) -> Any:
        if self._service is None:
            self._service = self._service_factory(self._context)
        return self._service

    def send(self, payload: SendPayload) -> SendResult:
        log = logger.bind(to=payload.to, subject=payload.subject)
        message = build_message(payload)
        body = {"raw": encode_raw(message)}
        log.info("gmail_transport.send", message_id=message["Message-ID"])
        try:
            response = self.service.users().messages().send(userId="me", body=body).execute()
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            status = int(status) if status is not None else None
            log.error("gmail_transport.send.http_error", status_code=status, error=str(e))
            raise TransportError(f"Gmail send failed: {e}", status_code=status) from e
        except (GoogleAuthError, OSError, httplib2.HttpLib2Error) as e:
            log.error("gmail_transport.send.error", error_type=type(e).__name__, error=str(e))
            raise TransportError(f"Gmail send failed: {e}") from e

        result = SendResult.model_validate({**response, "status_code": 200})
        log.info("gmail_transport.sent", gmail_id=result.id, thread_id=result.thread_id)
        return result
