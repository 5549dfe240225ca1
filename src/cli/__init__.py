"""CLI commands: one module per mode (send, token management)."""

from typer import Typer

from src.cli import auth_mode, send_mode

app = Typer(help="Send email through the Gmail API with a cached OAuth2 token")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(send_mode.send)
    app.command()(auth_mode.authorize)
    app.command()(auth_mode.status)
    app.command()(auth_mode.logout)


register_commands()
