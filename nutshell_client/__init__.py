"""Nutshell client: stream structured summaries of text and web pages."""

__version__ = "0.4.0"

import asyncio
from collections.abc import AsyncIterator

import httpx

from .api import SummarizerClient
from .config import ClientConfig
from .errors import (
    ErrorCategory,
    ExtractionError,
    NutshellError,
    UserFacingError,
    ValidationError,
)
from .events import ErrorEvent, MetadataEvent, PatchEvent, StreamEvent
from .extract import ExtractedContent, extract
from .patch import AppendItem, DoneMarker, PatchOperation, SetField
from .request import SummaryRequest, SummaryStyle
from .results import (
    ClientResult,
    CompleteResult,
    ErrorKind,
    ErrorResult,
    MetadataResult,
    ProgressResult,
    SummarizeResponse,
)
from .retry import ApiResult
from .session import SessionState, StreamSession
from .summary import Sentiment, StructuredSummary, fold

__all__ = [
    "ApiResult",
    "AppendItem",
    "ClientConfig",
    "ClientResult",
    "CompleteResult",
    "DoneMarker",
    "ErrorCategory",
    "ErrorEvent",
    "ErrorKind",
    "ErrorResult",
    "ExtractedContent",
    "ExtractionError",
    "MetadataEvent",
    "MetadataResult",
    "NutshellError",
    "PatchEvent",
    "PatchOperation",
    "ProgressResult",
    "Sentiment",
    "SessionState",
    "SetField",
    "StreamEvent",
    "StreamSession",
    "StructuredSummary",
    "SummarizeResponse",
    "SummarizerClient",
    "SummaryRequest",
    "SummaryStyle",
    "UserFacingError",
    "ValidationError",
    "extract",
    "fold",
    "stream_summary",
    "summarize",
    "summarize_async",
]


async def stream_summary(
    text: str | None = None,
    url: str | None = None,
    style: str = "executive",
    max_tokens: int = 256,
    include_metadata: bool = True,
    use_cache: bool = True,
    config: ClientConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[ClientResult]:
    """Stream a structured summary of ``text`` or ``url``.

    Args:
        text: Plain text to summarize (mutually exclusive with url).
        url: Web page to scrape and summarize (mutually exclusive with text).
        style: "skimmer", "executive", or "eli5".
        max_tokens: Token budget, 128-2048.
        include_metadata: Ask the server for a leading metadata event.
        use_cache: Advisory caching hint passed to the server.
        config: Client configuration; defaults to ClientConfig().
        http_client: Optional shared httpx client.

    Yields:
        MetadataResult, ProgressResult..., then one CompleteResult or
        ErrorResult. Invalid parameters produce a single ErrorResult with
        kind=ErrorKind.VALIDATION and no network I/O.
    """
    try:
        request = SummaryRequest(
            text=text, url=url, style=style, max_tokens=max_tokens,
            include_metadata=include_metadata, use_cache=use_cache,
        )
    except ValidationError as e:
        yield ErrorResult(str(e), kind=ErrorKind.VALIDATION)
        return

    async with SummarizerClient(config, http_client=http_client) as client:
        async for result in client.stream(request):
            yield result


async def summarize_async(
    text: str | None = None,
    url: str | None = None,
    max_tokens: int = 256,
    config: ClientConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ApiResult[SummarizeResponse]:
    """Non-streaming summary with bounded retry.

    Same inputs as stream_summary() minus the streaming-only options.
    Returns an ApiResult; invalid parameters give an INVALID_REQUEST error
    without any network I/O.
    """
    try:
        request = SummaryRequest(text=text, url=url, max_tokens=max_tokens)
    except ValidationError as e:
        return ApiResult.failure(UserFacingError(ErrorCategory.INVALID_REQUEST, str(e)))

    async with SummarizerClient(config, http_client=http_client) as client:
        return await client.summarize(request)


def summarize(
    text: str | None = None,
    url: str | None = None,
    max_tokens: int = 256,
    config: ClientConfig | None = None,
) -> ApiResult[SummarizeResponse]:
    """Blocking wrapper around summarize_async().

    Raises:
        NutshellError: If called from inside a running event loop.
    """
    try:
        return asyncio.run(summarize_async(text, url, max_tokens=max_tokens, config=config))
    except RuntimeError as e:
        if "cannot be called from a running event loop" in str(e):
            raise NutshellError(
                "summarize() cannot be called from async context. "
                "Use 'await summarize_async()' instead."
            ) from e
        raise
