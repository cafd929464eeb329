"""PRH Virre API Client Package.

This package provides an asyncio client for the financial statements
service (ttfs 1.0.0) of the Finnish Patent and Registration Office (PRH).
It authenticates with an OAuth2 password grant, caches the bearer token
until it expires, and fetches financial periods and financial statements.

Example Usage:
    from prh_virre import ClientConfig, Credentials, VirreClient

    credentials = Credentials(
        client_id='client-id',
        client_secret='client-secret',
        user_name='user',
        password='password',
    )

    async with VirreClient(credentials) as client:
        periods = await client.get_financial_periods('1234567-8', 'krek')
        period = periods['financialPeriods'][0]

        statements = await client.get_financial_statements(
            '1234567-8', 'krek', period['startDate'], period['endDate']
        )
        print(statements.metadata['companyName'])
        statements.save_attachments('statements/')

    # Test environment
    config = ClientConfig(base_url='https://rekisteripalvelut.asi.prh.fi:9193')
"""

from ._version import __version__, __version_info__
from .exceptions import (
    VirreApiException,
    ConfigError,
    AuthenticationError,
    AuthError,
    RegistryRequestError,
    DecodeError,
    DecodeErrorReason,
)
from .models import (
    Credentials,
    ClientConfig,
    AccessToken,
    Attachment,
    FinancialStatements,
    DEFAULT_BASE_URL,
    TEST_BASE_URL,
)
from .types import FinancialPeriods, StatementsMetadata, Register
from .multipart import decode_statements
from .token import TokenCache
from .client import VirreClient

__all__ = [
    # Version
    '__version__',
    '__version_info__',

    # Main classes
    'VirreClient',
    'TokenCache',
    'decode_statements',

    # Exceptions
    'VirreApiException',
    'ConfigError',
    'AuthenticationError',
    'AuthError',
    'RegistryRequestError',
    'DecodeError',
    'DecodeErrorReason',

    # Models
    'Credentials',
    'ClientConfig',
    'AccessToken',
    'Attachment',
    'FinancialStatements',
    'FinancialPeriods',
    'StatementsMetadata',
    'Register',

    # Constants
    'DEFAULT_BASE_URL',
    'TEST_BASE_URL',
]
