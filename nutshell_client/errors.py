"""Custom exceptions, shared constants, and user-facing error categories."""

import socket
from dataclasses import dataclass
from enum import Enum

import httpx

# Default timeouts for the summarization service (seconds)
CONNECT_TIMEOUT = 15.0
READ_TIMEOUT = 120.0


class NutshellError(Exception):
    """Base exception for summarization client errors."""
    pass


class ValidationError(NutshellError):
    """Request parameters are invalid; raised before any I/O."""
    pass


class DecodeError(NutshellError):
    """A stream line could not be decoded."""

    def __init__(self, message: str = "", *, line: str = "") -> None:
        super().__init__(message)
        self.line = line


class MalformedEventError(DecodeError):
    """A single frame is not valid JSON or does not match any event shape.

    Recoverable: the session skips the line and keeps reading.
    """
    pass


class ProtocolError(NutshellError):
    """The server reported an error inside the event stream."""
    pass


class TransportError(NutshellError):
    """DNS, connection, timeout, or reset failure talking to the service.

    Raised with the httpx exception as ``__cause__`` so categorize() and
    is_fail_fast() still see the original failure.
    """
    pass


class ExtractionError(NutshellError):
    """Every content extraction strategy failed for a URL."""
    pass


class ErrorCategory(Enum):
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    NO_NETWORK = "no_network"
    EXTRACTION = "extraction"
    INVALID_REQUEST = "invalid_request"
    NETWORK = "network"


ERROR_MESSAGES = {
    ErrorCategory.TIMEOUT: (
        "Request timed out. The summarization service is taking longer "
        "than expected. Please try again."
    ),
    ErrorCategory.UNREACHABLE: (
        "Cannot reach the summarization service. "
        "Please check your network connection."
    ),
    ErrorCategory.NO_NETWORK: (
        "No network connection. Please check your internet connection "
        "and try again."
    ),
    ErrorCategory.EXTRACTION: (
        "Unable to extract content. The website may require JavaScript or "
        "use anti-scraping measures. Please copy and paste the content manually."
    ),
    ErrorCategory.INVALID_REQUEST: "The request is invalid.",
    ErrorCategory.NETWORK: (
        "Network error occurred. Please check your connection and try again."
    ),
}

# Checked in order; the first row whose types match any exception in the
# cause chain wins. httpx.ConnectTimeout is a TimeoutException, so timeouts
# are listed before connection failures.
ERROR_CATEGORY_TABLE: tuple[tuple[tuple[type[BaseException], ...], ErrorCategory], ...] = (
    ((httpx.TimeoutException, TimeoutError, socket.timeout), ErrorCategory.TIMEOUT),
    ((httpx.ConnectError, socket.gaierror, ConnectionRefusedError), ErrorCategory.UNREACHABLE),
    ((ExtractionError,), ErrorCategory.EXTRACTION),
    ((ValidationError,), ErrorCategory.INVALID_REQUEST),
)

# Non-transient failures: retrying will not help
FAIL_FAST_ERRORS: tuple[type[BaseException], ...] = (
    httpx.ConnectError,
    socket.gaierror,
    ConnectionRefusedError,
    ExtractionError,
    ValidationError,
)


@dataclass(frozen=True)
class UserFacingError:
    """A categorized failure message suitable for showing to an end user."""
    category: ErrorCategory
    message: str

    @classmethod
    def from_category(cls, category: ErrorCategory) -> "UserFacingError":
        return cls(category=category, message=ERROR_MESSAGES[category])


def _exception_chain(exc: BaseException) -> list[BaseException]:
    """Return exc followed by its causes, guarding against cycles."""
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def categorize(exc: BaseException | None) -> ErrorCategory:
    """Map an exception to its ErrorCategory using ERROR_CATEGORY_TABLE."""
    if exc is None:
        return ErrorCategory.NETWORK
    chain = _exception_chain(exc)
    for types, category in ERROR_CATEGORY_TABLE:
        if any(isinstance(e, types) for e in chain):
            return category
    return ErrorCategory.NETWORK


def to_user_facing(exc: BaseException | None) -> UserFacingError:
    """Build the UserFacingError for an exception (None means unknown failure)."""
    return UserFacingError.from_category(categorize(exc))


def is_fail_fast(exc: BaseException) -> bool:
    """True for DNS resolution and connection-refused style failures.

    Timeouts are never fail-fast, even when raised while connecting.
    """
    if categorize(exc) is ErrorCategory.TIMEOUT:
        return False
    return any(isinstance(e, FAIL_FAST_ERRORS) for e in _exception_chain(exc))
