"""Shared CLI helpers: console, logger, option defaults, token summary."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from src.auth import Token
from src.config import GMAIL_CREDENTIALS_PATH, GMAIL_TOKEN_PATH
from src.utils.logger import get_logger

console = Console()
logger = get_logger("gmail_mailer.cli")


def credentials_option():
    return typer.Option(
        GMAIL_CREDENTIALS_PATH,
        "--credentials",
        "-c",
        help="OAuth client secrets JSON (GMAIL_CREDENTIALS_PATH)",
    )


def token_option():
    return typer.Option(
        GMAIL_TOKEN_PATH,
        "--token",
        "-t",
        help="Token cache file (GMAIL_TOKEN_PATH)",
    )


def token_table(token: Token, path: Path) -> Table:
    """Summary of a cached token; never shows the secret values."""
    table = Table(title="Cached token", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Path", str(path))
    table.add_row("Type", token.token_type)
    if token.expiry is None:
        expiry = "(none)"
    else:
        expiry = token.expiry.isoformat().replace("+00:00", "Z")
        if token.expired:
            expiry += " [yellow](expired)[/yellow]"
    table.add_row("Expiry", expiry)
    table.add_row("Refresh token", "yes" if token.refresh_token else "[red]no[/red]")
    table.add_row("Scopes", "\n".join(token.scopes) or "(not recorded)")
    return table
