"""OAuth2 token lifecycle for delegated Gmail access."""

from src.auth.acquirer import TokenAcquirer
from src.auth.errors import (
    AuthError,
    AuthorizationFailed,
    CacheMissError,
    ConfigError,
    ExchangeError,
    PersistError,
    TokenDecodeError,
    TokenNotFoundError,
    TokenWriteError,
    UserAbortError,
)
from src.auth.manager import AuthorizedContext, TokenManager
from src.auth.models import ClientCredential, Token
from src.auth.prompt import ConsolePrompt, Prompt, StreamPrompt
from src.auth.token_store import delete_token, load_token, save_token

__all__ = [
    "AuthError",
    "AuthorizationFailed",
    "AuthorizedContext",
    "CacheMissError",
    "ClientCredential",
    "ConfigError",
    "ConsolePrompt",
    "ExchangeError",
    "PersistError",
    "Prompt",
    "StreamPrompt",
    "Token",
    "TokenAcquirer",
    "TokenDecodeError",
    "TokenManager",
    "TokenNotFoundError",
    "TokenWriteError",
    "UserAbortError",
    "delete_token",
    "load_token",
    "save_token",
]
