#!/usr/bin/env python3
"""CLI for the Nutshell summarization client."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from nutshell_client.api import SummarizerClient
from nutshell_client.config import ClientConfig
from nutshell_client.errors import ExtractionError, ValidationError
from nutshell_client.extract import extract
from nutshell_client.formatting import format_summary
from nutshell_client.request import DEFAULT_MAX_TOKENS, SummaryRequest, SummaryStyle
from nutshell_client.results import (
    CompleteResult,
    ErrorResult,
    MetadataResult,
    ProgressResult,
)


def looks_like_url(value: str) -> bool:
    return value.strip().lower().startswith(("http://", "https://"))


def build_request(args: argparse.Namespace) -> SummaryRequest:
    """Map parsed arguments to a SummaryRequest.

    Raises:
        ValidationError: If the input combination or parameters are invalid.
        OSError: If --file cannot be read.
    """
    text = None
    url = None
    if args.file is not None:
        if args.input is not None:
            raise ValidationError("Cannot provide both an input argument and --file")
        text = args.file.read_text()
    elif args.input is not None:
        if looks_like_url(args.input):
            url = args.input.strip()
        else:
            text = args.input

    return SummaryRequest(
        text=text,
        url=url,
        style=args.style,
        max_tokens=args.max_tokens,
        include_metadata=not args.no_metadata,
        use_cache=not args.no_cache,
    )


def _print_progress(result: ProgressResult) -> None:
    state = result.state
    shown = state.title or state.main_summary or ""
    print(f"\r[{result.tokens_used} tokens] {shown[:60]}", end="", file=sys.stderr, flush=True)


async def run_stream(client: SummarizerClient, request: SummaryRequest, fallback: bool) -> int:
    """Stream one request, printing progress to stderr. Returns an exit code."""
    async for result in client.stream(request):
        if isinstance(result, MetadataResult):
            meta = result.metadata
            if meta.title:
                print(f"Source: {meta.title}", file=sys.stderr)
        elif isinstance(result, ProgressResult):
            _print_progress(result)
        elif isinstance(result, CompleteResult):
            print(file=sys.stderr)
            print(format_summary(result.final_summary))
            return 0
        elif isinstance(result, ErrorResult):
            print(f"\nError: {result.message}", file=sys.stderr)
            if fallback:
                print("Falling back to non-streaming request...", file=sys.stderr)
                return await run_once(client, request)
            return 1
    return 130  # cancelled


async def run_once(client: SummarizerClient, request: SummaryRequest) -> int:
    """Non-streaming request with retry. Returns an exit code."""
    result = await client.summarize(request)
    if not result:
        print(f"Error: {result.error.message}", file=sys.stderr)
        return 1
    print(result.value.summary)
    return 0


async def run(args: argparse.Namespace, config: ClientConfig) -> int:
    request = build_request(args)
    async with SummarizerClient(config) as client:
        if args.extract and request.url is not None:
            content = await extract(request.url, timeout=config.extraction_timeout)
            print(f"Extracted {len(content.content)} chars via {content.method}", file=sys.stderr)
            request = SummaryRequest(
                text=content.content,
                style=request.style,
                max_tokens=request.max_tokens,
                include_metadata=request.include_metadata,
                use_cache=request.use_cache,
            )
        if args.no_stream:
            return await run_once(client, request)
        return await run_stream(client, request, fallback=args.fallback)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize text or a web page into a structured summary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Styles:
  skimmer    Fast scan: short title and key points
  executive  Balanced summary for decision makers [default]
  eli5       Plain-language explanation

Examples:
  nutshell https://example.com/article
  nutshell "Some long text to summarize..." --style eli5
  nutshell --file notes.txt --max-tokens 512
  nutshell https://example.com/article --no-stream
        """,
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="URL or text to summarize",
    )
    parser.add_argument(
        "--file", "-f",
        type=Path,
        default=None,
        help="Read text to summarize from a file",
    )
    parser.add_argument(
        "--style", "-s",
        choices=[s.value for s in SummaryStyle],
        default=SummaryStyle.EXECUTIVE.value,
        help="Summary style (default: executive)",
    )
    parser.add_argument(
        "--max-tokens", "-n",
        type=int,
        default=DEFAULT_MAX_TOKENS,
        help=f"Token budget, 128-2048 (default: {DEFAULT_MAX_TOKENS})",
    )
    parser.add_argument(
        "--no-metadata",
        action="store_true",
        help="Do not request the leading metadata event",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ask the server not to use cached summaries",
    )
    parser.add_argument(
        "--no-stream",
        action="store_true",
        help="Use the non-streaming endpoint with retries",
    )
    parser.add_argument(
        "--fallback",
        action="store_true",
        help="Retry on the non-streaming endpoint if streaming fails",
    )
    parser.add_argument(
        "--extract",
        action="store_true",
        help="Extract URL content locally and send it as text",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main() -> None:
    # Load environment variables from .env file
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args()

    if args.input is None and args.file is None:
        parser.print_help()
        sys.exit(2)

    # Configure logging (after parsing so --verbose is available)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    try:
        config = ClientConfig.from_env()
        exit_code = asyncio.run(run(args, config))
    except (ValidationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except ExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
