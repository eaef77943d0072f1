"""Client facade for the streaming and non-streaming summarize endpoints."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable

import httpx

from .config import ClientConfig
from .errors import ExtractionError, ProtocolError, TransportError, to_user_facing
from .extract import extract
from .network import network_probe_for
from .request import SummaryRequest
from .results import ClientResult, SummarizeResponse
from .retry import ApiResult, execute_with_retry
from .session import StreamSession

logger = logging.getLogger(__name__)


def parse_summarize_response(data: object) -> SummarizeResponse:
    """Validate the non-streaming endpoint payload.

    Raises:
        ProtocolError: If required fields are missing or mistyped.
    """
    if not isinstance(data, dict):
        raise ProtocolError("summarize response is not an object")
    summary = data.get("summary")
    if not isinstance(summary, str):
        raise ProtocolError("summarize response has no summary")

    tokens = data.get("tokens_used")
    latency = data.get("latency_ms")
    try:
        return SummarizeResponse(
            summary=summary,
            model=str(data.get("model") or ""),
            tokens_used=int(tokens) if tokens is not None else None,
            latency_ms=float(latency) if latency is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"summarize response has invalid counters: {e}") from e


class SummarizerClient:
    """Entry point for summarization requests.

    Owns an httpx.AsyncClient unless one is passed in. Any number of
    sessions may run concurrently on the same client.

    Usage:
        async with SummarizerClient() as client:
            async for result in client.stream(SummaryRequest(url=...)):
                ...
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        network_probe: Callable[[], Awaitable[bool]] | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.read_timeout, connect=self.config.connect_timeout),
            follow_redirects=True,
        )
        self._network_probe = network_probe or network_probe_for(self.config.base_url)

    async def __aenter__(self) -> "SummarizerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def session(self, request: SummaryRequest) -> StreamSession:
        """Create an unstarted session (use it when cancellation is needed)."""
        return StreamSession(self._http, request, self.config)

    async def stream(self, request: SummaryRequest) -> AsyncIterator[ClientResult]:
        """Stream results for ``request`` until a terminal result."""
        async for result in self.session(request).results():
            yield result

    async def summarize(self, request: SummaryRequest) -> ApiResult[SummarizeResponse]:
        """Non-streaming summarize with bounded retry.

        URL requests are first turned into text with the extraction chain,
        since this endpoint only accepts text. Never raises for runtime
        failures; inspect ``result.error`` instead.
        """
        text = request.text
        if text is None:
            try:
                content = await extract(
                    request.url, client=self._http, timeout=self.config.extraction_timeout,
                )
            except ExtractionError as e:
                logger.warning("Extraction failed for %s: %s", request.url, e)
                return ApiResult.failure(to_user_facing(e), attempts=0)
            text = content.content

        payload = request.to_summarize_payload(text)
        url = self.config.summarize_url

        async def post() -> SummarizeResponse:
            try:
                response = await self._http.post(url, json=payload)
            except httpx.TransportError as e:
                raise TransportError(f"{type(e).__name__}: {e}") from e
            response.raise_for_status()
            return parse_summarize_response(response.json())

        return await execute_with_retry(
            post,
            max_attempts=self.config.max_attempts,
            base_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
            is_network_available=self._network_probe,
            context=f"Summarizing {len(text)} chars:",
        )
