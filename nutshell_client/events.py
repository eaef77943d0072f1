"""Wire-level events decoded from the summary stream."""

from dataclasses import dataclass
from typing import Union

from .patch import PatchOperation
from .summary import StructuredSummary


@dataclass(frozen=True)
class MetadataEvent:
    """First event of a stream when metadata was requested.

    URL inputs carry scraping details (url, title, author, ...); text inputs
    carry ``text_length`` instead.
    """
    input_type: str
    style: str
    url: str | None = None
    title: str | None = None
    author: str | None = None
    date: str | None = None
    site_name: str | None = None
    scrape_method: str | None = None
    scrape_latency_ms: float | None = None
    extracted_text_length: int | None = None
    text_length: int | None = None


@dataclass(frozen=True)
class PatchEvent:
    """A full snapshot of the summary plus advisory change metadata."""
    state: StructuredSummary
    done: bool
    tokens_used: int
    delta: PatchOperation | None = None
    latency_ms: float | None = None  # only meaningful on the final event


@dataclass(frozen=True)
class ErrorEvent:
    """Server-reported failure. Always terminal."""
    message: str
    done: bool = True
    tokens_used: int = 0


StreamEvent = Union[MetadataEvent, PatchEvent, ErrorEvent]
