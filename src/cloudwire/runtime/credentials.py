"""Credential resolution.

Order: explicit arguments, then ``Settings``, then the
``CLOUDWIRE_*`` / ``AWS_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from cloudwire.core.config import Settings
from cloudwire.core.errors import NoCredentialsError

_ENV_KEYS = {
    "access_key_id": ("CLOUDWIRE_ACCESS_KEY_ID", "AWS_ACCESS_KEY_ID"),
    "secret_access_key": ("CLOUDWIRE_SECRET_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY"),
    "session_token": ("CLOUDWIRE_SESSION_TOKEN", "AWS_SESSION_TOKEN"),
}


@dataclass(frozen=True)
class Credentials:
    access_key_id: str
    secret_access_key: str
    session_token: str | None = None

    def __repr__(self) -> str:
        # Never print the secret
        return f"Credentials(access_key_id={self.access_key_id!r})"


def _from_env(field: str) -> str | None:
    for key in _ENV_KEYS[field]:
        value = os.environ.get(key)
        if value:
            return value
    return None


def resolve_credentials(
    settings: Settings | None = None,
    *,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
    session_token: str | None = None,
) -> Credentials | None:
    """Return credentials, or ``None`` when no source provides a key pair."""
    settings = settings or Settings()
    key = access_key_id or settings.access_key_id or _from_env("access_key_id")
    secret = secret_access_key or settings.secret_access_key or _from_env("secret_access_key")
    token = session_token or settings.session_token or _from_env("session_token")
    if not key or not secret:
        return None
    return Credentials(key, secret, token)


def require_credentials(credentials: Credentials | None) -> Credentials:
    if credentials is None:
        raise NoCredentialsError(
            "Unable to locate credentials. Set CLOUDWIRE_ACCESS_KEY_ID and "
            "CLOUDWIRE_SECRET_ACCESS_KEY (or AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY)."
        )
    return credentials
