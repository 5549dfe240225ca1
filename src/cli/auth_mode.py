"""Token commands: authorize, status, logout."""

from pathlib import Path

import typer

from src.auth import AuthorizationFailed, CacheMissError, ConfigError, delete_token, load_token
from src.mailer import authorize as authorize_context

from .shared import console, credentials_option, logger, token_option, token_table


def authorize(
    credentials: Path = credentials_option(),
    token: Path = token_option(),
    force: bool = typer.Option(False, "--force", help="Discard the cached token and sign in again"),
) -> None:
    """Make sure a usable token is cached, running the consent flow if needed."""
    log = logger.bind(command="authorize", token_path=str(token))
    log.info("authorize.start", force=force)

    if force:
        delete_token(token)

    try:
        _, _, context = authorize_context(credentials, token)
    except ConfigError as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("authorize.config_error", error=str(e))
        raise typer.Exit(1)
    except AuthorizationFailed as e:
        console.print(f"[red]Authorization failed: {e}[/red]")
        log.error("authorize.failed", error=str(e))
        raise typer.Exit(1)

    if context.source == "cache":
        console.print(f"[green]Using cached token[/green] ({token})")
    elif token.exists():
        console.print(f"[green]Authorized.[/green] Saved credential file to: {token}")
    else:
        console.print("[yellow]Authorized, but the token could not be cached; sign-in will be needed next run.[/yellow]")
    log.info("authorize.complete", source=context.source)


def status(token: Path = token_option()) -> None:
    """Show what the token cache holds."""
    log = logger.bind(command="status", token_path=str(token))
    try:
        cached = load_token(token)
    except CacheMissError as e:
        console.print(f"[yellow]{e}[/yellow]")
        log.info("status.cache_miss", reason=type(e).__name__)
        raise typer.Exit(1)
    console.print(token_table(cached, token))
    log.info("status.ok", expired=cached.expired, has_refresh_token=bool(cached.refresh_token))


def logout(token: Path = token_option()) -> None:
    """Delete the cached token (required after changing the requested scopes)."""
    log = logger.bind(command="logout", token_path=str(token))
    if delete_token(token):
        console.print(f"Removed {token}")
    else:
        console.print(f"[dim]No cached token at {token}[/dim]")
    log.info("logout.complete")
