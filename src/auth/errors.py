"""Error taxonomy for the OAuth2 token lifecycle."""

from pathlib import Path


class AuthError(Exception):
    """Base class for every authorization failure raised by src.auth."""


class ConfigError(AuthError):
    """Client-secrets file is missing or malformed. Not recoverable in-process."""


class CacheMissError(AuthError):
    """No usable token in the cache; recoverable by running acquisition."""

    def __init__(self, path: str | Path, message: str):
        self.path = Path(path)
        super().__init__(message)


class TokenNotFoundError(CacheMissError):
    def __init__(self, path: str | Path):
        super().__init__(path, f"No cached token at {path}")


class TokenDecodeError(CacheMissError):
    def __init__(self, path: str | Path, reason: str):
        self.reason = reason
        super().__init__(path, f"Cached token at {path} is not a token record: {reason}")


class PersistError(AuthError):
    """Writing the token cache failed."""


class TokenWriteError(PersistError):
    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Unable to cache oauth token at {path}: {reason}")


class UserAbortError(AuthError):
    """Operator did not supply a usable authorization code."""


class ExchangeError(AuthError):
    """Authorization endpoint rejected the code or could not be reached."""


class AuthorizationFailed(AuthError):
    """Interactive acquisition failed; the caller is expected to stop."""
