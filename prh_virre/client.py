"""Virre API client implementation.

This module provides the VirreClient class that handles authentication,
transport configuration and the registry requests of the PRH financial
statements service (ttfs 1.0.0).
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict, Optional, Tuple

import aiohttp
from multidict import CIMultiDictProxy

from .exceptions import DecodeError, DecodeErrorReason, RegistryRequestError
from .helpers import auth_url_for, parse_error_body, serialize_body
from .models import ClientConfig, Credentials, FinancialStatements
from .multipart import decode_statements
from .token import TokenCache
from .types import FinancialPeriods, Register

API_PREFIX = "/ttfs/1.0.0"
REGISTERS = ("krek", "srek")

log = logging.getLogger(__name__)


class VirreClient:
    """Client for the PRH Virre financial statements API.

    The client owns one aiohttp session (created lazily) and one TokenCache.
    Each operation obtains a bearer token first and then issues a single
    registry request.

    Example:
        async with VirreClient(Credentials.from_env()) as client:
            periods = await client.get_financial_periods("1234567-8", "krek")
    """

    def __init__(self, credentials: Credentials, config: Optional[ClientConfig] = None,
                 *, session: Optional[aiohttp.ClientSession] = None):
        """Initialize the client. No network activity happens here.

        Args:
            credentials: OAuth2 client and user credentials
            config: Transport configuration (defaults to production settings)
            session: Caller-owned session to use instead of a client-owned one;
                it is not closed by close()

        Raises:
            ConfigError: If a credential field is missing or empty
        """
        credentials.validate()
        self.credentials = credentials
        self.config = config or ClientConfig()
        self.base_url = self.config.base_url.rstrip('/')
        self.tokens = TokenCache(credentials, auth_url_for(self.base_url))

        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    @classmethod
    async def create(cls, credentials: Credentials, config: Optional[ClientConfig] = None) -> "VirreClient":
        """Create a client and fetch its first access token.

        The client's session is closed again if authentication fails.

        Raises:
            ConfigError: If a credential field is missing or empty
            AuthenticationError: If the token exchange fails
        """
        instance = cls(credentials, config)
        try:
            await instance._ensure_session()
            await instance.tokens.ensure_token(instance._session)
        except Exception:
            await instance.close()
            raise
        return instance

    @classmethod
    def from_env(cls) -> "VirreClient":
        """Build a client from ``PRH_VIRRE_*`` environment variables."""
        return cls(Credentials.from_env(), ClientConfig.from_env())

    async def __aenter__(self) -> "VirreClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _build_connector(self) -> Tuple[aiohttp.BaseConnector, bool]:
        keep_alive = self.config.keep_alive
        if isinstance(keep_alive, aiohttp.BaseConnector):
            return keep_alive, False

        dns_cache = self.config.dns_cache
        kwargs = {"force_close": not keep_alive, "use_dns_cache": bool(dns_cache)}
        if not isinstance(dns_cache, bool):
            kwargs["ttl_dns_cache"] = dns_cache
        return aiohttp.TCPConnector(**kwargs), True

    async def _ensure_session(self) -> None:
        if self._session is None or self._session.closed:
            connector, connector_owner = self._build_connector()
            self._session = aiohttp.ClientSession(
                connector=connector,
                connector_owner=connector_owner,
                timeout=self.config.client_timeout,
            )
            self._owns_session = True

    async def close(self) -> None:
        """Cancel the token timer and close the session if the client owns it."""
        self.tokens.invalidate()
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    # -------------------------
    # HTTP helper
    # -------------------------
    async def _get(self, endpoint: str, params: Dict[str, str],
                   description: str) -> Tuple[CIMultiDictProxy, bytes]:
        """GET a registry endpoint with a bearer token.

        Returns the response headers and raw body of a 2xx response.

        Raises:
            AuthenticationError: If no token could be obtained
            RegistryRequestError: On a non-2xx response
            aiohttp.ClientError, asyncio.TimeoutError: On transport failures,
                unchanged
        """
        await self._ensure_session()
        token = await self.tokens.ensure_token(self._session)

        url = self.base_url + API_PREFIX + endpoint
        log.info(f"Fetching {description} for {params.get('businessId')}")
        try:
            async with self._session.get(url, params=params,
                                         headers={"Authorization": token.authorization}) as resp:
                body = await resp.read()
                log.debug(f"{endpoint} response - status: {resp.status}, "
                          f"content-type: {resp.headers.get('Content-Type')}, length: {len(body)}")

                if resp.status >= 300:
                    error_body = parse_error_body(body.decode('utf-8', errors='replace'))
                    if error_body is not None:
                        message = f"An error occurred while fetching {description}: {serialize_body(error_body)}"
                    else:
                        message = f"An error occurred while fetching {description}: HTTP {resp.status}"
                    log.error(message)
                    raise RegistryRequestError(message, status=resp.status, body=error_body)

                return resp.headers, body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error(f"Request for {description} failed: {e!r}")
            raise

    @staticmethod
    def _check_register(register: str) -> None:
        if register not in REGISTERS:
            raise ValueError(f"Invalid register '{register}'. Must be 'krek' or 'srek'")

    # -------------------------
    # Registry operations
    # -------------------------
    async def get_financial_periods(self, business_id: str, register: Register) -> FinancialPeriods:
        """Return the financial periods of one business.

        Args:
            business_id: Finnish business id, e.g. "1234567-8"
            register: 'krek' for companies or 'srek' for foundations

        Returns:
            The JSON body of the response as-is

        Raises:
            ValueError: If register is not 'krek' or 'srek'
            AuthenticationError: If no token could be obtained
            RegistryRequestError: On a non-2xx response
            DecodeError: If the body is not JSON
        """
        self._check_register(register)
        _, body = await self._get(
            "/financialPeriods",
            {"businessId": business_id, "register": register},
            "financial periods",
        )
        try:
            return json.loads(body.decode('utf-8'))
        except ValueError as e:
            raise DecodeError(
                DecodeErrorReason.INVALID_JSON,
                f"Financial periods response is not valid JSON: {e}",
            ) from e

    async def get_financial_statements(self, business_id: str, register: Register,
                                       period_start_date: str, period_end_date: str) -> FinancialStatements:
        """Return the financial statements filed for one period.

        Args:
            business_id: Finnish business id, e.g. "1234567-8"
            register: 'krek' for companies or 'srek' for foundations
            period_start_date: Start date of the period, YYYY-MM-DD
            period_end_date: End date of the period, YYYY-MM-DD

        Returns:
            FinancialStatements with the filing metadata and its attachments

        Raises:
            ValueError: If register is not 'krek' or 'srek'
            AuthenticationError: If no token could be obtained
            RegistryRequestError: On a non-2xx response
            DecodeError: If the multipart response cannot be decoded
        """
        self._check_register(register)
        headers, body = await self._get(
            "/financialStatements",
            {
                "businessId": business_id,
                "register": register,
                "periodStartDate": period_start_date,
                "periodEndDate": period_end_date,
            },
            "financial statements",
        )
        statements = decode_statements(headers, body)
        log.info(f"Received financial statements with {len(statements.attachments)} attachment(s)")
        return statements
