"""Summary request parameters and their validation."""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from .errors import ValidationError

MIN_MAX_TOKENS = 128
MAX_MAX_TOKENS = 2048
DEFAULT_MAX_TOKENS = 256

ALLOWED_URL_SCHEMES = {"http", "https"}

SUMMARIZE_PROMPT = "Summarize the following text concisely:"


class SummaryStyle(str, Enum):
    SKIMMER = "skimmer"
    EXECUTIVE = "executive"
    ELI5 = "eli5"

    @classmethod
    def from_name(cls, name: "str | SummaryStyle") -> "SummaryStyle":
        """Get a style by name.

        Raises:
            ValidationError: If the name is not a known style.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValidationError(f"Invalid style: {name!r}. Must be one of: {valid}")


def _validate_url(url: str) -> list[str]:
    try:
        parsed = urlparse(url)
    except ValueError:
        return [f"url is not a valid URL: {url!r}"]
    errors = []
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        errors.append("url must use http or https")
    if not parsed.hostname:
        errors.append("url must include a host")
    return errors


@dataclass(frozen=True)
class SummaryRequest:
    """One summarization request: exactly one of ``text`` or ``url``.

    Raises:
        ValidationError: If both or neither input is supplied, the style is
            unknown, or ``max_tokens`` is outside 128-2048.
    """
    text: str | None = None
    url: str | None = None
    style: SummaryStyle = SummaryStyle.EXECUTIVE
    max_tokens: int = DEFAULT_MAX_TOKENS
    include_metadata: bool = True
    use_cache: bool = True  # advisory only

    def __post_init__(self) -> None:
        if self.text is not None and self.url is not None:
            raise ValidationError("Cannot provide both text and url")
        if self.text is None and self.url is None:
            raise ValidationError("Either text or url must be provided")

        # Accept style names as plain strings
        object.__setattr__(self, "style", SummaryStyle.from_name(self.style))

        errors = []
        if self.text is not None and not self.text.strip():
            errors.append("text cannot be empty")
        if self.url is not None:
            errors.extend(_validate_url(self.url))
        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int):
            errors.append(f"max_tokens must be an integer, got {self.max_tokens!r}")
        elif not (MIN_MAX_TOKENS <= self.max_tokens <= MAX_MAX_TOKENS):
            errors.append(
                f"max_tokens must be between {MIN_MAX_TOKENS} and "
                f"{MAX_MAX_TOKENS}, got {self.max_tokens}"
            )

        if errors:
            raise ValidationError(f"Invalid request: {'; '.join(errors)}")

    @property
    def input_type(self) -> str:
        return "url" if self.url is not None else "text"

    def to_stream_payload(self) -> dict:
        """JSON body for the streaming endpoint."""
        payload: dict = {}
        if self.text is not None:
            payload["text"] = self.text
        if self.url is not None:
            payload["url"] = self.url
        payload["style"] = self.style.value
        payload["max_tokens"] = self.max_tokens
        payload["include_metadata"] = self.include_metadata
        payload["use_cache"] = self.use_cache
        return payload

    def to_summarize_payload(self, text: str) -> dict:
        """JSON body for the non-streaming endpoint, which only accepts text."""
        return {
            "text": text,
            "max_tokens": self.max_tokens,
            "prompt": SUMMARIZE_PROMPT,
        }
