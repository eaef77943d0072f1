"""Turn a shared URL into plain text before summarization.

Strategies run in order and the first one producing enough text wins:
a reader service that renders the page server-side, trafilatura on the
raw HTML, then readability-lxml on the same HTML.
"""

import logging
import re
from dataclasses import dataclass
from html import unescape
from urllib.parse import urlparse

import httpx
import trafilatura
from readability import Document

from .errors import ERROR_MESSAGES, ErrorCategory, ExtractionError

logger = logging.getLogger(__name__)

READER_BASE_URL = "https://r.jina.ai/"

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Maximum HTML size to process (5MB)
MAX_HTML_SIZE = 5 * 1024 * 1024

# Shorter text than this counts as a failed extraction
MIN_CONTENT_LENGTH = 100

MAX_TITLE_LENGTH = 200

PROCESSABLE_CONTENT_TYPES = {"text/html", "application/xhtml+xml", "text/plain"}


@dataclass(frozen=True)
class ExtractedContent:
    """Readable text extracted from a web page."""
    url: str
    title: str
    content: str
    method: str


def clean_text(text: str) -> str:
    """Normalize whitespace while keeping paragraph breaks."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _validate_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        raise ExtractionError(f"Only HTTP and HTTPS URLs are supported: {url!r}")


def _title_from_reader_text(text: str) -> str:
    for line in text.split("\n"):
        line = line.strip()
        if line.lower().startswith("title:"):
            line = line[len("title:"):].strip()
        if line and len(line) < MAX_TITLE_LENGTH:
            return line
    return "Untitled"


async def _try_reader(client: httpx.AsyncClient, url: str) -> ExtractedContent | None:
    """Strategy 1: reader service returning the rendered page as text."""
    try:
        response = await client.get(
            f"{READER_BASE_URL}{url}",
            headers={"Accept": "text/plain", "X-Return-Format": "text"},
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.info("Reader extraction failed for %s: %s", url, e)
        return None

    text = response.text.strip()
    if len(text) < MIN_CONTENT_LENGTH:
        logger.info("Reader returned too little content (%d chars) for %s", len(text), url)
        return None

    return ExtractedContent(
        url=url,
        title=_title_from_reader_text(text)[:MAX_TITLE_LENGTH],
        content=clean_text(text),
        method="reader",
    )


async def fetch_html(client: httpx.AsyncClient, url: str) -> str | None:
    """Fetch a page with a streamed size limit. None on any failure."""
    try:
        async with client.stream("GET", url, headers={"User-Agent": USER_AGENT}) as response:
            response.raise_for_status()

            content_type = response.headers.get("content-type", "").lower()
            media_type = content_type.split(";")[0].strip()
            if media_type and media_type not in PROCESSABLE_CONTENT_TYPES:
                logger.info("Skipping non-HTML content type '%s' from %s", media_type, url)
                return None

            chunks: list[bytes] = []
            total_size = 0
            async for chunk in response.aiter_bytes():
                total_size += len(chunk)
                if total_size > MAX_HTML_SIZE:
                    logger.warning("Response exceeded %d bytes from %s", MAX_HTML_SIZE, url)
                    return None
                chunks.append(chunk)

            encoding = response.encoding or "utf-8"
            return b"".join(chunks).decode(encoding, errors="replace")
    except httpx.HTTPError as e:
        logger.info("Fetching %s failed: %s", url, e)
        return None


def _extract_with_trafilatura(url: str, html: str) -> ExtractedContent | None:
    """Strategy 2: trafilatura main-content extraction."""
    try:
        text = trafilatura.extract(html, include_comments=False, include_tables=True)
        if not text or len(text) < MIN_CONTENT_LENGTH:
            return None
        metadata = trafilatura.extract_metadata(html)
        title = metadata.title if metadata and metadata.title else ""
    except (AttributeError, TypeError, ValueError) as e:
        logger.info("trafilatura failed for %s: %s", url, e)
        return None

    return ExtractedContent(
        url=url,
        title=(title or "Untitled")[:MAX_TITLE_LENGTH],
        content=clean_text(text),
        method="trafilatura",
    )


def _extract_with_readability(url: str, html: str) -> ExtractedContent | None:
    """Strategy 3: readability-lxml, stripping tags from its summary HTML."""
    try:
        doc = Document(html)
        summary_html = doc.summary()
        title = doc.title() or ""
    except (AttributeError, TypeError, ValueError, UnicodeDecodeError) as e:
        logger.info("readability failed for %s: %s", url, e)
        return None

    text = re.sub(r"<[^>]+>", " ", summary_html)
    text = unescape(text)
    text = re.sub(r"[ \t]+", " ", text)
    text = clean_text(text)
    if len(text) < MIN_CONTENT_LENGTH:
        return None

    return ExtractedContent(
        url=url,
        title=(title or "Untitled")[:MAX_TITLE_LENGTH],
        content=text,
        method="readability",
    )


async def extract(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 20.0,
    use_reader: bool = True,
) -> ExtractedContent:
    """Extract readable text and a title from ``url``.

    Args:
        url: The http(s) URL to extract.
        client: Optional shared client; a private one is created otherwise.
        timeout: Per-request timeout when a private client is created.
        use_reader: Try the reader service before local extraction.

    Returns:
        ExtractedContent from the first strategy that succeeded.

    Raises:
        ExtractionError: If the URL is not http(s) or every strategy failed.
    """
    _validate_url(url)

    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
            return await _run_strategies(own_client, url, use_reader)
    return await _run_strategies(client, url, use_reader)


async def _run_strategies(client: httpx.AsyncClient, url: str, use_reader: bool) -> ExtractedContent:
    if use_reader:
        result = await _try_reader(client, url)
        if result:
            logger.debug("Extracted %d chars from %s via reader", len(result.content), url)
            return result

    html = await fetch_html(client, url)
    if html:
        for strategy in (_extract_with_trafilatura, _extract_with_readability):
            result = strategy(url, html)
            if result:
                logger.debug(
                    "Extracted %d chars from %s via %s", len(result.content), url, result.method,
                )
                return result

    logger.warning("All extraction strategies failed for %s", url)
    raise ExtractionError(ERROR_MESSAGES[ErrorCategory.EXTRACTION])
