"""Interactive authorization-code exchange (three-legged OAuth2, installed app)."""

import os
import secrets
from contextlib import contextmanager
from typing import Any, Callable, Iterator
from urllib.parse import parse_qs, urlparse

import requests
from google.auth.exceptions import GoogleAuthError
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from src.auth.errors import ExchangeError, UserAbortError
from src.auth.models import ClientCredential, Token
from src.auth.prompt import Prompt
from src.utils.logger import get_logger

logger = get_logger("gmail_mailer.auth.acquirer")

FlowFactory = Callable[[ClientCredential], Any]


def default_flow_factory(credential: ClientCredential) -> Flow:
    return Flow.from_client_config(
        credential.to_client_config(),
        scopes=list(credential.scopes),
        redirect_uri=credential.redirect_uri,
    )


# oauthlib raises a Warning when the granted scope set differs from the requested one
RELAX_SCOPE_ENV = "OAUTHLIB_RELAX_TOKEN_SCOPE"


@contextmanager
def _relaxed_token_scope() -> Iterator[None]:
    """Accept a narrower grant from the token endpoint; restores the previous env value."""
    previous = os.environ.get(RELAX_SCOPE_ENV)
    os.environ[RELAX_SCOPE_ENV] = "1"
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop(RELAX_SCOPE_ENV, None)
        else:
            os.environ[RELAX_SCOPE_ENV] = previous


def _new_state() -> str:
    return secrets.token_urlsafe(24)


def parse_reply(reply: str, expected_state: str) -> str:
    """Extract the authorization code from what the operator typed.

    Accepts either the bare code or the full URL the browser was redirected to.
    """
    reply = (reply or "").strip()
    if not reply:
        raise UserAbortError("No authorization code entered")
    if "://" not in reply and not reply.startswith("?"):
        return reply

    params = parse_qs(urlparse(reply).query)
    if "error" in params:
        raise ExchangeError(f"Authorization denied: {params['error'][0]}")
    returned_state = params.get("state", [None])[0]
    if returned_state is not None and returned_state != expected_state:
        raise UserAbortError("Authorization response state does not match the request")
    code = params.get("code", [""])[0].strip()
    if not code:
        raise UserAbortError("Redirect URL does not contain an authorization code")
    return code


class TokenAcquirer:
    """Runs the consent flow once per call: URL -> operator -> code -> token endpoint.

    A rejected exchange is not retried; the caller has to start over.
    """

    def __init__(
        self,
        prompt: Prompt,
        flow_factory: FlowFactory | None = None,
        state_factory: Callable[[], str] | None = None,
    ):
        self._prompt = prompt
        self._flow_factory = flow_factory or default_flow_factory
        self._state_factory = state_factory or _new_state

    def acquire(self, credential: ClientCredential) -> Token:
        log = logger.bind(client_id=credential.client_id[:12], scopes=list(credential.scopes))
        flow = self._flow_factory(credential)
        state = self._state_factory()
        auth_url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=state,
        )
        log.info("acquirer.consent_requested", redirect_uri=credential.redirect_uri)

        code = parse_reply(self._prompt(auth_url), state)

        try:
            with _relaxed_token_scope():
                flow.fetch_token(code=code)
        except (OAuth2Error, GoogleAuthError, requests.RequestException, ValueError) as e:
            log.error("acquirer.exchange_failed", error_type=type(e).__name__, error=str(e))
            raise ExchangeError(f"Unable to retrieve token from web: {e}") from e

        creds = flow.credentials
        if not creds.token:
            log.error("acquirer.exchange_failed", error="response carried no access token")
            raise ExchangeError("Token endpoint response carried no access token")
        token = Token.from_google(creds)
        if not token.covers(credential.scopes):
            log.warning("acquirer.partial_grant", granted=list(token.scopes))
        log.info(
            "acquirer.exchange_ok",
            has_refresh_token=bool(token.refresh_token),
            expiry=token.expiry.isoformat() if token.expiry else None,
        )
        return token
