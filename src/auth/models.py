"""Client credential and token models."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from google.oauth2.credentials import Credentials
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.auth.errors import ConfigError
from src.config import GMAIL_SCOPES

DEFAULT_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_REDIRECT_URI = "http://localhost"


def _as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to already be UTC (google-auth convention)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ClientCredential(BaseModel):
    """OAuth client identity loaded once from Google's client-secrets JSON."""

    client_id: str
    client_secret: str
    redirect_uris: tuple[str, ...] = ()
    auth_uri: str = DEFAULT_AUTH_URI
    token_uri: str = DEFAULT_TOKEN_URI
    scopes: tuple[str, ...] = GMAIL_SCOPES

    model_config = {"frozen": True, "extra": "ignore"}

    @property
    def redirect_uri(self) -> str:
        return self.redirect_uris[0] if self.redirect_uris else DEFAULT_REDIRECT_URI

    @classmethod
    def from_file(cls, path: str | Path, scopes: Iterable[str] = GMAIL_SCOPES) -> "ClientCredential":
        """Parse a client-secrets file ("installed" or "web" section).

        Raises ConfigError when the file cannot be read or lacks client_id/client_secret.
        """
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigError(f"Client secret file not found: {path}") from e
        except OSError as e:
            raise ConfigError(f"Unable to read client secret file {path}: {e}") from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Client secret file {path} is not valid JSON: {e}") from e
        return cls.from_client_config(data, scopes=scopes, source=str(path))

    @classmethod
    def from_client_config(
        cls,
        data: Any,
        scopes: Iterable[str] = GMAIL_SCOPES,
        source: str = "client config",
    ) -> "ClientCredential":
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: expected a JSON object")
        section = data.get("installed") or data.get("web")
        if not isinstance(section, dict):
            raise ConfigError(f"{source}: missing 'installed' or 'web' client section")
        try:
            return cls.model_validate({**section, "scopes": tuple(scopes)})
        except ValidationError as e:
            missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise ConfigError(f"{source}: invalid client section ({', '.join(missing)})") from e

    def to_client_config(self) -> dict[str, Any]:
        """Mapping in the shape google_auth_oauthlib.flow.Flow.from_client_config expects."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uris": list(self.redirect_uris) or [DEFAULT_REDIRECT_URI],
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
            }
        }


class Token(BaseModel):
    """Bearer token as persisted in the cache file.

    Field names follow the standard OAuth2 token response (access_token, token_type,
    refresh_token, scope) plus an absolute `expiry`, so records written by other
    OAuth2 clients load unchanged.
    """

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    refresh_token: str | None = None
    expiry: datetime | None = None
    scopes: tuple[str, ...] = Field(default=(), alias="scope")

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    @field_validator("expiry")
    @classmethod
    def _normalize_expiry(cls, value: datetime | None) -> datetime | None:
        # golang.org/x/oauth2 records use the zero time ("0001-01-01T00:00:00Z") for "never expires"
        if value is None or value.year == datetime.min.year:
            return None
        return _as_utc(value)

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scope(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(value.split())
        return value

    @property
    def expired(self) -> bool:
        if self.expiry is None:
            return False
        return datetime.now(timezone.utc) >= self.expiry

    def covers(self, scopes: Iterable[str]) -> bool:
        """True when the granted scopes include every scope in `scopes` (unknown grants count as covering)."""
        if not self.scopes:
            return True
        return set(scopes) <= set(self.scopes)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
        }
        if self.refresh_token:
            record["refresh_token"] = self.refresh_token
        if self.expiry is not None:
            record["expiry"] = self.expiry.isoformat().replace("+00:00", "Z")
        if self.scopes:
            record["scope"] = " ".join(self.scopes)
        return record

    @classmethod
    def from_google(cls, creds: Credentials) -> "Token":
        granted = getattr(creds, "granted_scopes", None) or creds.scopes or ()
        return cls(
            access_token=creds.token,
            refresh_token=creds.refresh_token,
            expiry=creds.expiry,
            scopes=tuple(granted),
        )

    def to_google(self, credential: ClientCredential) -> Credentials:
        """google-auth Credentials able to refresh themselves against the credential's token endpoint."""
        expiry = None
        if self.expiry is not None:
            # google-auth compares against naive UTC
            expiry = self.expiry.astimezone(timezone.utc).replace(tzinfo=None)
        return Credentials(
            token=self.access_token,
            refresh_token=self.refresh_token,
            token_uri=credential.token_uri,
            client_id=credential.client_id,
            client_secret=credential.client_secret,
            scopes=list(credential.scopes),
            granted_scopes=list(self.scopes) or None,
            expiry=expiry,
        )
