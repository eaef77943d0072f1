"""Client-visible results emitted by a stream session."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .events import MetadataEvent
from .patch import PatchOperation
from .summary import StructuredSummary


class ErrorKind(Enum):
    VALIDATION = "validation"
    PROTOCOL = "protocol"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    STREAM_CLOSED = "stream_closed"


@dataclass(frozen=True)
class MetadataResult:
    """Scraping/input details reported before the first progress update."""
    metadata: MetadataEvent


@dataclass(frozen=True)
class ProgressResult:
    """Partial summary snapshot.

    Attributes:
        state: The folded document after this event.
        tokens_used: Tokens generated so far.
        delta: The advisory operation that produced this snapshot, if the
            server sent one. Use it for highlighting only.
    """
    state: StructuredSummary
    tokens_used: int
    delta: PatchOperation | None = None


@dataclass(frozen=True)
class CompleteResult:
    """Generation finished. ``final_summary`` is the frozen final document."""
    final_summary: StructuredSummary
    tokens_used: int
    latency_ms: float | None = None


@dataclass(frozen=True)
class ErrorResult:
    """Terminal failure of a session."""
    message: str
    kind: ErrorKind = ErrorKind.PROTOCOL


ClientResult = Union[MetadataResult, ProgressResult, CompleteResult, ErrorResult]

TERMINAL_RESULTS = (CompleteResult, ErrorResult)


@dataclass(frozen=True)
class SummarizeResponse:
    """Payload of the non-streaming summarize endpoint."""
    summary: str
    model: str
    tokens_used: int | None = None
    latency_ms: float | None = None
