"""
Errors raised by the helpdesk API client.

Hierarchy:
    ClientError
    ├── TransportError          network failure, timeout
    ├── HTTPStatusError         non-2xx response
    ├── MalformedResponseError  body is not the expected JSON envelope
    └── LocalValidationError    rejected before any request is sent

Controllers catch ClientError at the call site and turn it into a
Notification; none of them is fatal.
"""

from typing import Optional


class ClientError(Exception):
    """Base exception of the client library."""

    title = "Request failed"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransportError(ClientError):
    """The server could not be reached."""

    title = "Connection problem"


class HTTPStatusError(ClientError):
    """
    The server answered with a non-2xx status.

    Attributes:
        status_code: HTTP status of the response
        message: The envelope's "error", or the raw response text
    """

    title = "Server error"

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message}"


class MalformedResponseError(ClientError):
    """Body was not JSON or lacked an expected key."""

    title = "Unexpected response"


class LocalValidationError(ClientError):
    """Input refused locally (empty required field, disallowed target)."""

    title = "Invalid input"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
