"""Send one message as the authorized Gmail user."""

from pathlib import Path
from typing import Callable

from src.auth import ClientCredential, ConsolePrompt, Prompt, TokenAcquirer, TokenManager
from src.auth.manager import AuthorizedContext
from src.config import GMAIL_SCOPES
from src.mail_provider import MailTransport, SendPayload, SendResult
from src.utils.logger import get_logger

logger = get_logger("gmail_mailer.mailer")

TransportFactory = Callable[[AuthorizedContext], MailTransport]


def _gmail_transport(context: AuthorizedContext) -> MailTransport:
    from src.mail_provider.gmail_real import GmailTransport

    return GmailTransport(context)


def authorize(
    credentials_path: str | Path,
    cache_path: str | Path,
    prompt: Prompt | None = None,
    manager: TokenManager | None = None,
) -> tuple[ClientCredential, TokenManager, AuthorizedContext]:
    """Load the client credential and return an authorized context for it.

    Raises ConfigError for a bad client-secrets file and AuthorizationFailed when
    interactive acquisition fails.
    """
    credential = ClientCredential.from_file(credentials_path, scopes=GMAIL_SCOPES)
    manager = manager or TokenManager(TokenAcquirer(prompt or ConsolePrompt()))
    context = manager.get_authorized_context(credential, cache_path)
    return credential, manager, context


def send_mail(
    sender: str,
    to: str,
    subject: str,
    body: str,
    credentials_path: str | Path,
    cache_path: str | Path,
    prompt: Prompt | None = None,
    manager: TokenManager | None = None,
    transport_factory: TransportFactory | None = None,
) -> SendResult:
    """Authorize, then submit a single message. TransportError propagates unretried."""
    log = logger.bind(to=to, cache_path=str(cache_path))
    _, manager, context = authorize(credentials_path, cache_path, prompt=prompt, manager=manager)

    transport = (transport_factory or _gmail_transport)(context)
    try:
        result = transport.send(SendPayload(sender=sender, to=to, subject=subject, body=body))
    finally:
        # A refresh may have happened even if the send itself failed.
        manager.persist(context, cache_path)
    log.info("mailer.sent", gmail_id=result.id, status_code=result.status_code)
    return result
