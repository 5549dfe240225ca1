"""Interactive channel for the authorization code: show a URL, read one line back."""

import sys
from typing import Protocol, TextIO

from rich.console import Console

from src.auth.errors import UserAbortError

INSTRUCTIONS = "Go to the following link in your browser then type the authorization code:"


class Prompt(Protocol):
    """Synchronous request -> response exchange with the operator."""

    def __call__(self, authorization_url: str) -> str:
        """Present the URL and return the line the operator typed (code or redirected URL)."""
        ...


class StreamPrompt:
    """Plain text streams; defaults to stdin/stdout."""

    def __init__(self, input_stream: TextIO | None = None, output_stream: TextIO | None = None):
        self._input = input_stream
        self._output = output_stream

    def __call__(self, authorization_url: str) -> str:
        out = self._output or sys.stdout
        inp = self._input or sys.stdin
        out.write(f"{INSTRUCTIONS}\n{authorization_url}\n")
        out.flush()
        line = inp.readline()
        if not line:
            raise UserAbortError("Unable to read authorization code: end of input")
        return line.strip()


class ConsolePrompt:
    """Rich console prompt used by the CLI."""

    def __init__(self, console: Console | None = None):
        self._console = console or Console()

    def __call__(self, authorization_url: str) -> str:
        self._console.print(f"[bold]{INSTRUCTIONS}[/bold]")
        self._console.print(authorization_url, markup=False, soft_wrap=True)
        try:
            return self._console.input("\nAuthorization code: ").strip()
        except (EOFError, KeyboardInterrupt) as e:
            raise UserAbortError("Unable to read authorization code: input closed") from e
