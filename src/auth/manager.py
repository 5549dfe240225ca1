"""Token lifecycle: load cached token, or acquire and persist a new one."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2.credentials import Credentials

from src.auth.acquirer import TokenAcquirer
from src.auth.errors import (
    AuthorizationFailed,
    CacheMissError,
    ExchangeError,
    PersistError,
    UserAbortError,
)
from src.auth.models import ClientCredential, Token
from src.auth.token_store import load_token, save_token
from src.utils.logger import get_logger

logger = get_logger("gmail_mailer.auth.manager")


@dataclass
class AuthorizedContext:
    """Capability for authorized calls.

    The wrapped google-auth Credentials attach the bearer token and refresh it
    lazily on first use when it has expired and a refresh token is present.
    """

    credentials: Credentials
    source: Literal["cache", "acquired"]
    _issued_access_token: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._issued_access_token is None:
            self._issued_access_token = self.credentials.token

    @property
    def token(self) -> Token:
        """Snapshot of the current token (reflects refreshes)."""
        return Token.from_google(self.credentials)

    @property
    def refreshed(self) -> bool:
        """True when the transport replaced the access token since it was issued or last persisted."""
        return self.credentials.token != self._issued_access_token

    def mark_persisted(self) -> None:
        self._issued_access_token = self.credentials.token

    def session(self) -> AuthorizedSession:
        return AuthorizedSession(self.credentials)

    def authorize(
        self,
        headers: dict[str, str],
        request: Any = None,
        method: str = "GET",
        url: str = "",
    ) -> dict[str, str]:
        """Add the Authorization header to `headers`, refreshing first if the token is stale."""
        self.credentials.before_request(request or Request(), method, url, headers)
        return headers


class TokenManager:
    """START -> LOADING -> AUTHORIZED, or LOADING -> ACQUIRING -> AUTHORIZED | FAILED."""

    def __init__(self, acquirer: TokenAcquirer):
        self._acquirer = acquirer

    def get_authorized_context(
        self,
        credential: ClientCredential,
        cache_path: str | Path,
    ) -> AuthorizedContext:
        """Return a context for `credential`, using the token cached at `cache_path` when present.

        A cached token is used as-is; staleness is handled by the transport on first use.
        On a cache miss the acquirer runs exactly once and the new token is saved
        best-effort. Acquisition failures raise AuthorizationFailed.
        """
        cache_path = Path(cache_path)
        log = logger.bind(cache_path=str(cache_path))

        try:
            token = load_token(cache_path)
        except CacheMissError as miss:
            log.info("token_manager.cache_miss", reason=type(miss).__name__)
        else:
            if not token.covers(credential.scopes):
                # Stale grants are only reported; `logout` clears the cache.
                log.warning(
                    "token_manager.scope_mismatch",
                    granted=list(token.scopes),
                    requested=list(credential.scopes),
                )
            log.info("token_manager.authorized", source="cache")
            return AuthorizedContext(credentials=token.to_google(credential), source="cache")

        log.info("token_manager.acquire")
        try:
            token = self._acquirer.acquire(credential)
        except (UserAbortError, ExchangeError) as e:
            log.error("token_manager.failed", error_type=type(e).__name__, error=str(e))
            raise AuthorizationFailed(str(e)) from e

        try:
            save_token(cache_path, token)
        except PersistError as e:
            # Token stays usable for this process; it just won't survive a restart.
            log.error("token_manager.persist_failed", error=str(e))

        log.info("token_manager.authorized", source="acquired")
        return AuthorizedContext(credentials=token.to_google(credential), source="acquired")

    def persist(self, context: AuthorizedContext, cache_path: str | Path) -> bool:
        """Write back a token the transport refreshed during use. Best-effort."""
        if not context.refreshed or not context.credentials.token:
            return False
        try:
            save_token(cache_path, context.token)
        except PersistError as e:
            logger.error("token_manager.persist_failed", cache_path=str(cache_path), error=str(e))
            return False
        context.mark_persisted()
        logger.info("token_manager.refreshed_token_saved", cache_path=str(cache_path))
        return True
