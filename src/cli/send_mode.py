"""Send mode: authorize (interactively on first run) and send one plain-text email."""

from pathlib import Path

import typer

from src.auth import AuthorizationFailed, ConfigError
from src.config import GMAIL_SENDER
from src.mail_provider import GmailMockTransport, TransportError
from src.mailer import send_mail
from src.utils.logger import bind_context, clear_context

from .shared import console, credentials_option, logger, token_option


def send(
    to: str = typer.Option(..., "--to", help="Recipient address"),
    subject: str = typer.Option("", "--subject", "-s", help="Subject line"),
    body: str = typer.Option("", "--body", "-b", help="Plain-text body"),
    sender: str | None = typer.Option(None, "--sender", "-f", help="Override GMAIL_SENDER"),
    credentials: Path = credentials_option(),
    token: Path = token_option(),
    dry_run: Path | None = typer.Option(
        None,
        "--dry-run",
        help="Write the message to this JSON outbox instead of calling Gmail",
    ),
) -> None:
    """Send an email as the authorized Gmail user."""
    effective_sender = (sender or GMAIL_SENDER or "").strip()
    log = logger.bind(command="send", to=to)
    log.info("send.start")

    if not effective_sender:
        console.print("[red]Provide sender via --sender / -f or set GMAIL_SENDER in .env[/red]")
        log.warning("send.missing_sender")
        raise typer.Exit(1)

    bind_context(command="send", to=to)
    transport_factory = None
    if dry_run is not None:

        def transport_factory(_context):
            return GmailMockTransport(dry_run)

    try:
        result = send_mail(
            sender=effective_sender,
            to=to,
            subject=subject,
            body=body,
            credentials_path=credentials,
            cache_path=token,
            transport_factory=transport_factory,
        )
    except ConfigError as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("send.config_error", error=str(e))
        raise typer.Exit(1)
    except AuthorizationFailed as e:
        console.print(f"[red]Authorization failed: {e}[/red]")
        log.error("send.authorization_failed", error=str(e))
        raise typer.Exit(1)
    except TransportError as e:
        console.print(f"[red]Err: {e}[/red]")
        log.error("send.transport_error", status_code=e.status_code, error=str(e))
        raise typer.Exit(1)
    finally:
        clear_context()

    console.print(f"[green]Sent.[/green] Status code: {result.status_code}  Id: {result.id}")
    log.info("send.complete", gmail_id=result.id, thread_id=result.thread_id)
