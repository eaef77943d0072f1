"""Tests for the nutshell command-line interface."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nutshell_client.cli import (
    build_parser,
    build_request,
    looks_like_url,
    main,
    run_once,
    run_stream,
)
from nutshell_client.errors import ErrorCategory, UserFacingError, ValidationError
from nutshell_client.events import MetadataEvent
from nutshell_client.request import SummaryStyle
from nutshell_client.results import (
    CompleteResult,
    ErrorKind,
    ErrorResult,
    MetadataResult,
    ProgressResult,
    SummarizeResponse,
)
from nutshell_client.retry import ApiResult
from nutshell_client.summary import StructuredSummary


def _parse(*argv):
    return build_parser().parse_args(list(argv))


def _client_streaming(*results):
    """Fake SummarizerClient whose stream() yields the given results."""
    async def stream(request):
        for result in results:
            yield result

    client = MagicMock()
    client.stream = stream
    client.summarize = AsyncMock()
    return client


class TestLooksLikeUrl:
    @pytest.mark.parametrize("value", ["https://example.com", " HTTP://example.com/x "])
    def test_urls(self, value):
        assert looks_like_url(value)

    @pytest.mark.parametrize("value", ["example.com", "Some text about https://x.com"])
    def test_not_urls(self, value):
        assert not looks_like_url(value)


class TestBuildRequest:
    def test_url_input(self):
        request = build_request(_parse("https://example.com/a", "--style", "eli5"))
        assert request.url == "https://example.com/a"
        assert request.style is SummaryStyle.ELI5

    def test_text_input(self):
        request = build_request(_parse("Plain text to summarize", "-n", "512", "--no-cache"))
        assert request.text == "Plain text to summarize"
        assert request.max_tokens == 512
        assert request.use_cache is False
        assert request.include_metadata is True

    def test_file_input(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Text from a file")
        request = build_request(_parse("--file", str(path), "--no-metadata"))
        assert request.text == "Text from a file"
        assert request.include_metadata is False

    def test_file_and_input(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x")
        with pytest.raises(ValidationError, match="--file"):
            build_request(_parse("text", "--file", str(path)))

    def test_bad_token_budget(self):
        with pytest.raises(ValidationError, match="max_tokens"):
            build_request(_parse("text", "--max-tokens", "5000"))

    def test_unknown_style_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            _parse("text", "--style", "haiku")


class TestRunStream:
    @pytest.mark.asyncio
    async def test_prints_final_summary(self, capsys, text_request):
        client = _client_streaming(
            MetadataResult(MetadataEvent(input_type="url", style="executive", title="Page")),
            ProgressResult(StructuredSummary(title="X"), 10),
            CompleteResult(StructuredSummary(title="X", main_summary="Y"), 20),
        )

        code = await run_stream(client, text_request, fallback=False)

        out, err = capsys.readouterr()
        assert code == 0
        assert out == "X\n\nY\n"
        assert "Source: Page" in err
        assert "[10 tokens] X" in err

    @pytest.mark.asyncio
    async def test_error_exit_code(self, capsys, text_request):
        client = _client_streaming(ErrorResult("busy", kind=ErrorKind.PROTOCOL))

        code = await run_stream(client, text_request, fallback=False)

        assert code == 1
        assert "Error: busy" in capsys.readouterr().err
        client.summarize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_to_non_streaming(self, capsys, text_request):
        client = _client_streaming(ErrorResult("reset", kind=ErrorKind.TRANSPORT))
        client.summarize.return_value = ApiResult.success(
            SummarizeResponse(summary="Fallback summary", model="m"),
        )

        code = await run_stream(client, text_request, fallback=True)

        assert code == 0
        client.summarize.assert_awaited_once_with(text_request)
        assert "Fallback summary" in capsys.readouterr().out


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_failure(self, capsys, text_request):
        client = MagicMock()
        client.summarize = AsyncMock(return_value=ApiResult.failure(
            UserFacingError.from_category(ErrorCategory.TIMEOUT), attempts=3,
        ))

        code = await run_once(client, text_request)

        assert code == 1
        assert "timed out" in capsys.readouterr().err


class TestMain:
    def test_no_input_prints_help(self, capsys):
        with patch("sys.argv", ["nutshell"]), patch("nutshell_client.cli.load_dotenv"):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().out

    def test_validation_error_exit_code(self, capsys):
        with patch("sys.argv", ["nutshell", "text", "--max-tokens", "1"]), \
                patch("nutshell_client.cli.load_dotenv"):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2
        assert "max_tokens" in capsys.readouterr().err

    def test_bad_environment_exit_code(self, capsys, monkeypatch):
        monkeypatch.setenv("NUTSHELL_READ_TIMEOUT", "forever")
        with patch("sys.argv", ["nutshell", "text"]), patch("nutshell_client.cli.load_dotenv"):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2
        assert "NUTSHELL_READ_TIMEOUT" in capsys.readouterr().err

    def test_success_exit_code(self):
        with patch("sys.argv", ["nutshell", "text"]), \
                patch("nutshell_client.cli.load_dotenv"), \
                patch("nutshell_client.cli.run", new_callable=AsyncMock, return_value=0) as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 0
        mock_run.assert_awaited_once()
