"""Classification of a completed HTTP exchange.

Runs before any JSON parsing: failure bodies are frequently not JSON and are
only kept for diagnostics.
"""

from dataclasses import dataclass
from typing import Optional, Union

import httpx


@dataclass(frozen=True)
class TransportFailure:
    """The request never completed (connect, DNS, timeout, transport fault)."""

    message: str


@dataclass(frozen=True)
class ProtocolFailure:
    """The exchange completed but the service or client reported an error."""

    status_code: Optional[int]
    message: str
    body: str = ""


@dataclass(frozen=True)
class EmptyPayload:
    """Successful exchange with nothing to decode."""

    status_code: int


@dataclass(frozen=True)
class UsablePayload:
    """Successful exchange with a body to decode."""

    body: str


ExchangeResult = Union[TransportFailure, ProtocolFailure, EmptyPayload, UsablePayload]

# Raised by httpx while processing an otherwise delivered response
DATA_PROCESSING_ERRORS = (httpx.DecodingError, httpx.TooManyRedirects)


def classify_error(error: httpx.RequestError) -> ExchangeResult:
    """Classify an exception raised while sending a request."""
    message = str(error) or type(error).__name__
    if isinstance(error, DATA_PROCESSING_ERRORS):
        return ProtocolFailure(status_code=None, message=message)
    return TransportFailure(message=message)


def classify_response(response: httpx.Response) -> ExchangeResult:
    """
    Classify a received response.

    Args:
        response: Response whose body has been read.

    Returns:
        ProtocolFailure for non-2xx statuses, EmptyPayload for blank
        bodies, UsablePayload otherwise.
    """
    body = response.text
    if not response.is_success:
        return ProtocolFailure(
            status_code=response.status_code,
            message=f"HTTP {response.status_code} {response.reason_phrase}".rstrip(),
            body=body,
        )
    if not body.strip():
        return EmptyPayload(status_code=response.status_code)
    return UsablePayload(body=body)
