"""Streaming summary session: connect, read, fold, emit, terminate.

A session owns one HTTP response. Lines are decoded in arrival order,
patch snapshots are folded into the running summary, and one result is
emitted per event until a terminal event, a transport failure, or
cancellation.

Usage:
    session = StreamSession(client, request, config)
    async for result in session.results():
        ...
    # from the consumer, at any point before a terminal result:
    await session.cancel()
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from enum import Enum

import httpx

from .codec import decode_line
from .config import ClientConfig
from .errors import MalformedEventError, to_user_facing
from .events import ErrorEvent, MetadataEvent, PatchEvent, StreamEvent
from .request import SummaryRequest
from .results import (
    ClientResult,
    CompleteResult,
    ErrorKind,
    ErrorResult,
    MetadataResult,
    ProgressResult,
    TERMINAL_RESULTS,
)
from .summary import StructuredSummary, fold

logger = logging.getLogger(__name__)

STREAM_CLOSED_MESSAGE = "stream closed unexpectedly"


class SessionState(Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    AWAITING_METADATA = "awaiting_metadata"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.FAILED, SessionState.CANCELLED)


class StreamSession:
    """One streaming summarization request.

    Sessions are single-use and share nothing with each other except the
    httpx client's connection pool.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        request: SummaryRequest,
        config: ClientConfig | None = None,
    ) -> None:
        self._client = client
        self._request = request
        self._config = config or ClientConfig()
        self._state = SessionState.IDLE
        self._summary = StructuredSummary()
        self._response: httpx.Response | None = None
        self._cancel_requested = False
        self._last_tokens: int | None = None
        self.metadata: MetadataEvent | None = None
        self.events_seen = 0
        self.patches_seen = 0
        self.malformed_lines = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def summary(self) -> StructuredSummary:
        """Most recently folded snapshot."""
        return self._summary

    @property
    def request(self) -> SummaryRequest:
        return self._request

    async def cancel(self) -> None:
        """Stop the session and close the underlying connection.

        No Complete or Error result is emitted after cancellation. Has no
        effect once the session has reached a terminal state.
        """
        if self._state.is_terminal or self._cancel_requested:
            return
        self._cancel_requested = True
        logger.debug("Cancellation requested in state %s", self._state.value)
        if self._response is not None:
            await self._response.aclose()
        if self._state is SessionState.IDLE:
            self._state = SessionState.CANCELLED

    async def results(self) -> AsyncIterator[ClientResult]:
        """Run the session, yielding results in arrival order.

        Yields at most one CompleteResult or ErrorResult, always last.
        Never raises for transport or protocol failures; those become an
        ErrorResult.

        Raises:
            RuntimeError: If the session was already started.
        """
        if self._state is SessionState.CANCELLED:
            return
        if self._state is not SessionState.IDLE:
            raise RuntimeError("StreamSession can only be run once")

        self._state = SessionState.CONNECTING
        logger.debug(
            "Opening stream: input=%s style=%s max_tokens=%d",
            self._request.input_type, self._request.style.value, self._request.max_tokens,
        )

        try:
            async with self._client.stream(
                "POST",
                self._config.stream_url,
                json=self._request.to_stream_payload(),
                headers={"Accept": "text/event-stream"},
                timeout=httpx.Timeout(
                    self._config.read_timeout, connect=self._config.connect_timeout,
                ),
            ) as response:
                self._response = response
                if self._cancel_requested:
                    await response.aclose()
                    self._state = SessionState.CANCELLED
                    return

                logger.debug("Response status: %d", response.status_code)
                if response.is_error:
                    await response.aclose()
                    self._state = SessionState.FAILED
                    yield ErrorResult(
                        f"Summarization service returned HTTP {response.status_code}",
                        kind=ErrorKind.HTTP_STATUS,
                    )
                    return

                self._state = (
                    SessionState.AWAITING_METADATA
                    if self._request.include_metadata
                    else SessionState.STREAMING
                )

                async for line in response.aiter_lines():
                    if self._cancel_requested:
                        break

                    try:
                        event = decode_line(line)
                    except MalformedEventError as e:
                        self.malformed_lines += 1
                        logger.warning("Skipping malformed stream line: %s", e)
                        continue
                    if event is None:
                        continue

                    self.events_seen += 1
                    result = self._handle_event(event)
                    if result is None:
                        continue

                    if isinstance(result, TERMINAL_RESULTS):
                        await response.aclose()
                        yield result
                        return

                    yield result

                    if self._cancel_requested:
                        break
                    if isinstance(result, ProgressResult) and self._config.pacing_delay > 0:
                        await asyncio.sleep(self._config.pacing_delay)
                        if self._cancel_requested:
                            break

                if self._cancel_requested:
                    self._state = SessionState.CANCELLED
                    logger.debug("Stream cancelled after %d events", self.events_seen)
                    return

                logger.warning(
                    "Stream ended after %d events without a final event", self.events_seen,
                )
                self._state = SessionState.FAILED
                yield ErrorResult(STREAM_CLOSED_MESSAGE, kind=ErrorKind.STREAM_CLOSED)

        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            if self._cancel_requested:
                self._state = SessionState.CANCELLED
                return
            logger.warning("Stream transport failure: %s: %s", type(e).__name__, e)
            self._state = SessionState.FAILED
            yield ErrorResult(to_user_facing(e).message, kind=ErrorKind.TRANSPORT)
        except asyncio.CancelledError:
            self._state = SessionState.CANCELLED
            raise
        finally:
            # Consumer closed the iterator early (aclose / break)
            if not self._state.is_terminal:
                self._state = SessionState.CANCELLED
            self._response = None

    def _handle_event(self, event: StreamEvent) -> ClientResult | None:
        """Apply one decoded event to the session and build its result."""
        if isinstance(event, MetadataEvent):
            if self.metadata is not None or self.patches_seen:
                logger.warning("Dropping unexpected metadata event (state=%s)", self._state.value)
                return None
            self.metadata = event
            self._state = SessionState.STREAMING
            logger.debug("Metadata: input_type=%s style=%s", event.input_type, event.style)
            return MetadataResult(metadata=event)

        if isinstance(event, ErrorEvent):
            logger.warning("Server reported error: %s", event.message)
            self._state = SessionState.FAILED
            return ErrorResult(event.message, kind=ErrorKind.PROTOCOL)

        self.patches_seen += 1
        self._check_tokens(event)
        self._summary = fold(self._summary, event)
        self._state = SessionState.STREAMING
        logger.debug("Patch #%d done=%s tokens=%d", self.events_seen, event.done, event.tokens_used)

        if event.done:
            self._state = SessionState.COMPLETED
            return CompleteResult(
                final_summary=self._summary,
                tokens_used=event.tokens_used,
                latency_ms=event.latency_ms,
            )
        return ProgressResult(
            state=self._summary, tokens_used=event.tokens_used, delta=event.delta,
        )

    def _check_tokens(self, event: PatchEvent) -> None:
        if self._last_tokens is not None and event.tokens_used < self._last_tokens:
            logger.warning(
                "tokens_used decreased from %d to %d; continuing",
                self._last_tokens, event.tokens_used,
            )
        self._last_tokens = event.tokens_used
