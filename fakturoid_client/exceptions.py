"""
Custom exception types for the Fakturoid API client.

These exceptions allow callers to distinguish between failures
reaching the service, rejected credentials, missing resources and
input data the API refused to accept.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class FakturoidError(Exception):
    """Base exception for all Fakturoid client errors."""


class TransportError(FakturoidError):
    """Raised when the request could not be sent or no response arrived."""


class ResponseDecodeError(FakturoidError):
    """Raised when a successful response body is not the expected JSON."""


class FakturoidAPIError(FakturoidError):
    """Raised when an HTTP request to the Fakturoid API returns an error status.

    Parameters
    ----------
    status_code : int
        HTTP status of the response.
    url : str
        The requested URL.
    body : object, optional
        Parsed JSON error body when available, otherwise the raw text.
    """

    default_message = "Fakturoid API request failed"

    def __init__(
        self,
        status_code: int,
        url: str,
        body: Any = None,
        message: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(message or f"{self.default_message} ({status_code} for {url})")


class AuthenticationError(FakturoidAPIError):
    """Raised on 401: the email/API token pair was rejected."""

    default_message = "Authentication failed"


class ForbiddenError(AuthenticationError):
    """Raised on 403: the credentials are valid but the operation is not allowed."""

    default_message = "Forbidden operation"


class NotFoundError(FakturoidAPIError):
    """Raised on 404: the entity does not exist."""

    default_message = "Entity does not exist"


class ValidationError(FakturoidAPIError):
    """Raised on 422 when the API rejects the submitted data.

    The field-level messages returned by the service are available as
    :attr:`errors`, a mapping of field name to a list of messages.
    """

    default_message = "Malformed input data"

    def __init__(
        self,
        status_code: int,
        url: str,
        body: Any = None,
        message: Optional[str] = None,
    ) -> None:
        self.errors: Dict[str, List[str]] = {}
        if isinstance(body, dict) and isinstance(body.get("errors"), dict):
            self.errors = {
                str(field): [str(m) for m in (msgs if isinstance(msgs, list) else [msgs])]
                for field, msgs in body["errors"].items()
            }
        if message is None and self.errors:
            message = f"Errors in input data: {self.errors}"
        super().__init__(status_code, url, body, message)


class UnexpectedStatusError(FakturoidAPIError):
    """Raised for any other 4xx/5xx status."""

    default_message = "Unexpected response status"


class PaymentRequiredError(UnexpectedStatusError):
    """Raised on 402: the account subscription has lapsed."""

    default_message = "Payment required"


class RateLimitError(UnexpectedStatusError):
    """Raised on 429: the limit of 200 requests per minute was exceeded."""

    default_message = "Request limit exceeded"


class ServiceUnavailableError(UnexpectedStatusError):
    """Raised on 5xx responses."""

    default_message = "Service unavailable"


_STATUS_ERRORS = {
    401: AuthenticationError,
    402: PaymentRequiredError,
    403: ForbiddenError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}


def error_for_status(status_code: int, url: str, body: Any = None) -> FakturoidAPIError:
    """Return the exception instance matching an HTTP error status."""
    if status_code >= 500:
        return ServiceUnavailableError(status_code, url, body)
    error_cls = _STATUS_ERRORS.get(status_code, UnexpectedStatusError)
    return error_cls(status_code, url, body)
