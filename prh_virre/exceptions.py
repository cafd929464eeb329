"""Exception classes for the prh_virre package.

This module defines custom exceptions used throughout the prh_virre package
for better error handling and debugging.
"""
from enum import Enum
from typing import Any, Optional


class VirreApiException(Exception):
    """Base exception for all Virre API errors.

    This is the base class for all exceptions raised by the prh_virre package.
    Catching this exception will catch all prh_virre-specific errors.
    """
    pass


class ConfigError(VirreApiException):
    """Raised when the client is constructed with incomplete or invalid settings.

    Attributes:
        field: Name of the missing or invalid setting
    """

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing credential: {field}")


class AuthenticationError(VirreApiException):
    """Raised when the OAuth2 token exchange with the PRH auth server fails.

    This can occur due to:
    - Invalid client id/secret or user credentials (non-2xx response)
    - Network connectivity issues or a timeout during the exchange

    Attributes:
        status: HTTP status of the auth response, None for transport failures
        body: Response body text, if any
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        self.status = status
        self.body = body
        super().__init__(message)


AuthError = AuthenticationError


class RegistryRequestError(VirreApiException):
    """Raised when a registry endpoint answers with a non-2xx status.

    Attributes:
        status: HTTP status code of the response
        body: Parsed response body (JSON value or text), None when empty
    """

    def __init__(self, message: str, status: int, body: Any = None):
        self.status = status
        self.body = body
        super().__init__(message)


class DecodeErrorReason(str, Enum):
    """Why a financial statements response could not be decoded."""

    MISSING_CONTENT_TYPE = "missing_content_type"
    NO_PARTS = "no_parts"
    MISSING_METADATA = "missing_metadata"
    INVALID_METADATA = "invalid_metadata"
    INVALID_ATTACHMENT = "invalid_attachment"
    INVALID_JSON = "invalid_json"


class DecodeError(VirreApiException):
    """Raised when a multipart statements response has an unexpected shape.

    Attributes:
        reason: DecodeErrorReason member describing the failure
    """

    def __init__(self, reason: DecodeErrorReason, message: str):
        self.reason = reason
        super().__init__(message)
