"""File-backed token cache.

One JSON record per path. Writes truncate in place with no rollback: a failed
save can leave a partial file, which the next load reports as TokenDecodeError
and callers treat like a missing token.
"""

import json
import os
from pathlib import Path

from pydantic import ValidationError

from src.auth.errors import TokenDecodeError, TokenNotFoundError, TokenWriteError
from src.auth.models import Token
from src.utils.logger import get_logger

logger = get_logger("gmail_mailer.auth.token_store")

TOKEN_FILE_MODE = 0o600


def load_token(path: str | Path) -> Token:
    """Read the token cached at `path`.

    Raises TokenNotFoundError if the file does not exist, TokenDecodeError if it
    exists but does not hold a token record.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        logger.debug("token_store.not_found", path=str(path))
        raise TokenNotFoundError(path) from e
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("token_store.read_error", path=str(path), error=str(e))
        raise TokenDecodeError(path, str(e)) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("token_store.decode_error", path=str(path), error=str(e))
        raise TokenDecodeError(path, f"invalid JSON ({e.msg})") from e
    if not isinstance(data, dict):
        logger.warning("token_store.decode_error", path=str(path), error="not an object")
        raise TokenDecodeError(path, "expected a JSON object")

    try:
        token = Token.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        logger.warning("token_store.decode_error", path=str(path), fields=fields)
        raise TokenDecodeError(path, f"invalid fields: {', '.join(fields)}") from e

    logger.debug(
        "token_store.loaded",
        path=str(path),
        has_refresh_token=bool(token.refresh_token),
        expiry=token.expiry.isoformat() if token.expiry else None,
    )
    return token


def save_token(path: str | Path, token: Token) -> None:
    """Write `token` to `path`, creating it (mode 0600) or truncating prior contents.

    Raises TokenWriteError on any I/O failure.
    """
    path = Path(path)
    payload = json.dumps(token.to_record(), indent=2) + "\n"
    logger.info("token_store.saving", path=str(path))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, TOKEN_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
    except OSError as e:
        logger.error("token_store.save_error", path=str(path), error=str(e))
        raise TokenWriteError(path, str(e)) from e


def delete_token(path: str | Path) -> bool:
    """Remove the cached token. Returns False when nothing was cached."""
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("token_store.delete.not_found", path=str(path))
        return False
    logger.info("token_store.deleted", path=str(path))
    return True
