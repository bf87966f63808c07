"""
Typed Exception Hierarchy

Every failure the client surfaces is one of these types, so callers can tell
apart the main failure classes:

    - TransportError: we couldn't talk to the exchange
    - HTTPStatusError: the exchange rejected the request (4xx/5xx)
    - SerializationError: we couldn't encode the request or decode the response
    - RequestValidationError: the request was malformed and was never sent

Usage:
    from core.errors import KucoinError, HTTPStatusError

    try:
        result = await client.place_order(order)
    except HTTPStatusError as e:
        print(e.status, e.body)
    except KucoinError:
        raise
"""

from typing import Optional


class KucoinError(Exception):
    """Base class for all client errors."""


class TransportError(KucoinError):
    """Network or connection failure. Never retried by the client."""


class HTTPStatusError(KucoinError):
    """
    Non-2xx HTTP response.

    Attributes:
        status: HTTP status code returned by the exchange
        body: Raw response body (usually a JSON error envelope)
    """

    def __init__(self, status: int, body: str, path: Optional[str] = None):
        self.status = status
        self.body = body
        self.path = path
        where = f" on {path}" if path else ""
        super().__init__(f"HTTP {status}{where}: {body}")


class SerializationError(KucoinError):
    """Request body could not be produced or response body did not match the model."""


class RequestValidationError(KucoinError):
    """Request failed local validation before any network call."""


class MissingIsolatedTagError(RequestValidationError):
    """An ISOLATED / ISOLATED_V2 account side is missing its symbol tag."""

    def __init__(self, side: str):
        self.side = side
        super().__init__(f"Account tag is required for {side} ISOLATED account")
