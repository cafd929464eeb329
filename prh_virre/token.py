"""Bearer token cache for the PRH auth server.

TokenCache owns the single access token of a client. The token is fetched
with an OAuth2 password grant on first use and dropped by a loop timer when
``expires_in`` elapses; the next ensure_token() call then fetches a new one.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import aiohttp

from .exceptions import AuthenticationError
from .helpers import basic_auth_header
from .models import AccessToken, Credentials

TOKEN_SCOPE = "openid profile email group_membership"

log = logging.getLogger(__name__)


class TokenCache:
    """Caches one access token and refreshes it on demand.

    Concurrent ensure_token() calls made while no token is cached share a
    single exchange.
    """

    def __init__(self, credentials: Credentials, auth_url: str):
        """Initialize the cache.

        Args:
            credentials: Client and user credentials for the password grant
            auth_url: Token endpoint of the PRH auth server
        """
        self.credentials = credentials
        self.auth_url = auth_url
        self._token: Optional[AccessToken] = None
        self._expiry: Optional[asyncio.TimerHandle] = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Optional[AccessToken]:
        """The cached token, or None when a fresh exchange is needed."""
        return self._token

    async def ensure_token(self, session: aiohttp.ClientSession) -> AccessToken:
        """Return the cached token, fetching a new one if none is cached.

        Args:
            session: Session used for the token request; its timeout applies

        Raises:
            AuthenticationError: If the auth server rejects the request or
                cannot be reached
        """
        token = self._token
        if token is not None:
            return token

        async with self._lock:
            # Another caller may have finished the exchange while we waited
            if self._token is not None:
                return self._token
            token = await self._request_token(session)
            self._store(token)
            return token

    def invalidate(self) -> None:
        """Drop the cached token and cancel its expiry timer."""
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None
        self._token = None

    def _store(self, token: AccessToken) -> None:
        self.invalidate()
        self._token = token
        loop = asyncio.get_running_loop()
        self._expiry = loop.call_later(token.expires_in, self._expire, token)
        log.info(f"Access token cached, expires in {token.expires_in:g} seconds")

    def _expire(self, token: AccessToken) -> None:
        # Timer callback: only ever clears the token it was scheduled for
        if self._token is token:
            self._token = None
            self._expiry = None
            log.debug("Access token expired")

    async def _request_token(self, session: aiohttp.ClientSession) -> AccessToken:
        form = {
            "grant_type": "password",
            "username": self.credentials.user_name,
            "password": self.credentials.password,
            "scope": TOKEN_SCOPE,
        }
        headers = {
            "Accept": "application/json",
            "Authorization": basic_auth_header(self.credentials.client_id, self.credentials.client_secret),
        }

        log.info(f"Requesting access token from {self.auth_url}")
        try:
            async with session.post(self.auth_url, data=form, headers=headers) as resp:
                body = await resp.read()
                if resp.status >= 300:
                    text = body.decode('utf-8', errors='replace')
                    log.error(f"Token request failed with status {resp.status}")
                    raise AuthenticationError(
                        f"Authentication failed with status {resp.status}: {text}",
                        status=resp.status,
                        body=text or None,
                    )
        except aiohttp.ClientError as e:
            log.error(f"Token request failed: {e}")
            raise AuthenticationError(f"Authentication failed: {e}") from e
        except asyncio.TimeoutError as e:
            log.error("Token request timed out")
            raise AuthenticationError("Authentication failed: request timed out") from e

        try:
            return AccessToken.from_response(json.loads(body))
        except (KeyError, TypeError, ValueError) as e:
            log.error(f"Failed to parse token response: {e}")
            raise AuthenticationError(f"Failed to parse token response: {e}") from e
