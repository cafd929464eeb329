"""Helper functions for the prh_virre package.

This module contains small utilities shared by the token cache and the
client: basic-auth header construction, auth server selection and error
body serialization.
"""

import base64
import json
from typing import Any

PRODUCTION_AUTH_URL = "https://auth.prh.fi/oxauth/restv1/token"
TEST_AUTH_URL = "https://auth.asi.prh.fi/oxauth/restv1/token"


def encode_base64(data: bytes) -> str:
    """Encode bytes to a padded base64 string.

    Example:
        >>> encode_base64(b'id:secret')
        'aWQ6c2VjcmV0'
    """
    return base64.b64encode(data).decode('utf-8')


def basic_auth_header(client_id: str, client_secret: str) -> str:
    """Build the value of an HTTP Basic ``Authorization`` header.

    Example:
        >>> basic_auth_header('id', 'secret')
        'Basic aWQ6c2VjcmV0'
    """
    return "Basic " + encode_base64(f"{client_id}:{client_secret}".encode('utf-8'))


def auth_url_for(base_url: str) -> str:
    """Pick the auth server matching a registry base URL.

    The test environment lives under ``*.asi.prh.fi``; any base URL containing
    ``asi`` is routed to the test auth server.

    Example:
        >>> auth_url_for('https://rekisteripalvelut.asi.prh.fi:9193')
        'https://auth.asi.prh.fi/oxauth/restv1/token'
    """
    return TEST_AUTH_URL if "asi" in base_url else PRODUCTION_AUTH_URL


def parse_error_body(text: str) -> Any:
    """Return an error body as JSON when it parses, otherwise as text.

    Empty bodies become None.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def serialize_body(body: Any) -> str:
    """Serialize a response body for inclusion in an error message.

    Example:
        >>> serialize_body({"error": "forbidden"})
        '{"error":"forbidden"}'
    """
    return json.dumps(body, ensure_ascii=False, separators=(",", ":"))
