"""Error taxonomy shared by the HTTP clients, the codec and the stores.

Every failure in this layer is recoverable: facades turn :class:`ClientError`
subclasses into a human-readable ``error_message`` and keep the previously
loaded state, and stores fall back to a default value on :class:`StorageError`.
"""
from typing import Optional


class ClientError(Exception):
    """Base class for every error raised while fetching remote records."""

    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadURLError(ClientError):
    """The request URL could not be constructed or parsed."""

    default_message = "Invalid request URL"


class InvalidResponseError(ClientError):
    """The server answered with a status code outside 200-299."""

    default_message = "The server returned an invalid response"

    def __init__(self, status_code: Optional[int] = None,
                 message: Optional[str] = None) -> None:
        self.status_code = status_code
        if message is None and status_code is not None:
            message = f"{self.default_message} (HTTP {status_code})"
        super().__init__(message)


class DecodeError(ClientError):
    """The payload could not be parsed into the expected shape."""

    default_message = "Could not process the response data"


class TransportError(ClientError):
    """The request never produced an HTTP response (DNS, connection, timeout)."""

    default_message = "Network request failed"


class StorageError(Exception):
    """A read or write against the key-value or collection store failed."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message)
