"""Data classes used by the prh_virre client.

Credentials and configuration are plain immutable values; AccessToken and
FinancialStatements are built from server responses.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Mapping, Optional, Union

import aiohttp

from .exceptions import ConfigError
from .types import AuthResponse, StatementsMetadata

DEFAULT_BASE_URL = "https://rekisteripalvelut.prh.fi:9193"
TEST_BASE_URL = "https://rekisteripalvelut.asi.prh.fi:9193"
DEFAULT_TIMEOUT_MS = 120000

ENV_PREFIX = "PRH_VIRRE_"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """OAuth2 client and user credentials for the PRH auth server.

    Secrets are left out of ``repr`` so the object can be logged safely.
    """
    client_id: str
    client_secret: str = field(repr=False)
    user_name: str
    password: str = field(repr=False)

    def validate(self) -> None:
        """Raise ConfigError naming the first missing or empty field."""
        for f in fields(self):
            if not getattr(self, f.name):
                raise ConfigError(f.name)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Credentials":
        """Read credentials from ``PRH_VIRRE_*`` environment variables.

        Missing variables become empty strings and are reported by validate().
        """
        env = os.environ if environ is None else environ
        return cls(
            client_id=env.get(ENV_PREFIX + "CLIENT_ID", ""),
            client_secret=env.get(ENV_PREFIX + "CLIENT_SECRET", ""),
            user_name=env.get(ENV_PREFIX + "USER_NAME", ""),
            password=env.get(ENV_PREFIX + "PASSWORD", ""),
        )


@dataclass(frozen=True)
class ClientConfig:
    """Transport configuration for VirreClient.

    Args:
        base_url: Registry base URL. Use TEST_BASE_URL for the test environment.
        timeout: Per-request timeout in milliseconds
        keep_alive: True for a client-owned keep-alive connector, False to
            close connections after each request, or a caller-owned
            aiohttp connector to share
        dns_cache: True to cache DNS lookups with aiohttp's default TTL,
            False to disable, or a TTL in seconds
    """
    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT_MS
    keep_alive: Union[bool, aiohttp.BaseConnector] = True
    dns_cache: Union[bool, int] = True

    @property
    def client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout / 1000)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """Read ``PRH_VIRRE_BASE_URL`` and ``PRH_VIRRE_TIMEOUT`` (ms), falling back to defaults."""
        env = os.environ if environ is None else environ
        timeout = env.get(ENV_PREFIX + "TIMEOUT")
        try:
            timeout_ms = int(timeout) if timeout else DEFAULT_TIMEOUT_MS
        except ValueError:
            raise ConfigError(
                ENV_PREFIX + "TIMEOUT",
                f"Invalid {ENV_PREFIX}TIMEOUT {timeout!r}: expected milliseconds as an integer",
            ) from None
        return cls(
            base_url=env.get(ENV_PREFIX + "BASE_URL") or DEFAULT_BASE_URL,
            timeout=timeout_ms,
        )


@dataclass
class AccessToken:
    access_token: str = field(repr=False)
    expires_in: float
    token_type: str = "bearer"
    scope: Optional[str] = None
    id_token: Optional[str] = field(default=None, repr=False)
    issued_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_response(cls, data: AuthResponse) -> "AccessToken":
        """Build a token from the auth server JSON.

        Raises:
            KeyError: If access_token or expires_in is missing
            ValueError: If expires_in is not numeric
        """
        return cls(
            access_token=data["access_token"],
            expires_in=float(data["expires_in"]),
            token_type=data.get("token_type", "bearer"),
            scope=data.get("scope"),
            id_token=data.get("id_token"),
        )

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"


@dataclass
class Attachment:
    """One binary document of a financial statements response."""
    filename: str
    type: str
    name: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class FinancialStatements:
    metadata: StatementsMetadata
    attachments: List[Attachment] = field(default_factory=list)

    def save_attachments(self, directory: Union[str, Path]) -> List[Path]:
        """Write every attachment into ``directory`` and return the paths.

        The directory is created if needed. Only the final component of an
        attachment's filename is used; a filename that reduces to nothing
        (``""``, ``"."`` or ``".."``) falls back to the attachment name, then
        to ``attachment-<index>``. Repeated names get a ``-<n>`` suffix before
        the extension so no attachment overwrites another.
        """
        target = Path(directory)
        target.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        used = set()
        for index, attachment in enumerate(self.attachments):
            name = _attachment_file_name(attachment, index)
            path = target / name
            n = 1
            while path.name in used:
                stem, suffix = Path(name).stem, Path(name).suffix
                path = target / f"{stem}-{n}{suffix}"
                n += 1
            used.add(path.name)
            path.write_bytes(attachment.data)
            log.debug(f"Saved attachment {attachment.name} to {path} ({attachment.size} bytes)")
            written.append(path)
        return written


def _attachment_file_name(attachment: Attachment, index: int) -> str:
    for candidate in (attachment.filename, attachment.name):
        name = Path(candidate or "").name
        if name not in ("", ".", ".."):
            return name
    return f"attachment-{index}"
