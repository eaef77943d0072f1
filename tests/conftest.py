"""Shared fixtures for nutshell_client tests."""

import json

import httpx
import pytest

from nutshell_client.config import ClientConfig
from nutshell_client.request import SummaryRequest


def frame(payload: dict) -> str:
    """Encode one event as a ``data: <json>`` frame followed by a blank line."""
    return f"data: {json.dumps(payload)}\n\n"


def metadata_frame(**data) -> str:
    data.setdefault("input_type", "url")
    data.setdefault("style", "executive")
    return frame({"type": "metadata", "data": data})


def patch_frame(state: dict, *, done: bool = False, tokens_used: int = 0, **extra) -> str:
    return frame({"state": state, "done": done, "tokens_used": tokens_used, **extra})


class FrameStream(httpx.AsyncByteStream):
    """Response body that yields one chunk per frame and records reads/closes."""

    def __init__(self, chunks: list[str], *, fail_after: int | None = None) -> None:
        self.chunks = [c.encode() for c in chunks]
        self.fail_after = fail_after
        self.chunks_read = 0
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            if self.fail_after is not None and self.chunks_read >= self.fail_after:
                raise httpx.ReadError("connection reset")
            self.chunks_read += 1
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class RecordingHandler:
    """MockTransport handler that serves a FrameStream and records requests."""

    def __init__(self, stream: FrameStream | None = None, *, status_code: int = 200) -> None:
        self.stream = stream or FrameStream([])
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            headers={"content-type": "text/event-stream"},
            stream=self.stream,
        )

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def fast_config():
    """Config without pacing so tests do not sleep."""
    return ClientConfig(pacing_delay=0.0)


@pytest.fixture
def url_request():
    return SummaryRequest(url="https://example.com/a", style="executive")


@pytest.fixture
def text_request():
    return SummaryRequest(text="Some long article text to summarize.", style="skimmer")


@pytest.fixture
def e2e_frames():
    """Metadata, two progress snapshots, and a final snapshot."""
    return [
        metadata_frame(input_type="url", url="https://example.com/a", style="executive"),
        patch_frame({"title": "X"}, tokens_used=10),
        patch_frame({"title": "X", "main_summary": "Y"}, tokens_used=40),
        patch_frame(
            {"title": "X", "main_summary": "Y", "key_points": ["p1", "p2"]},
            done=True,
            tokens_used=120,
            latency_ms=850.0,
        ),
    ]
