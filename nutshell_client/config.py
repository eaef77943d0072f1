"""Client configuration: endpoints, timeouts, pacing, and retry limits."""

import os
from dataclasses import dataclass

from .errors import CONNECT_TIMEOUT, READ_TIMEOUT

DEFAULT_BASE_URL = "https://colin730-summarizerapp.hf.space"
STREAM_PATH = "/api/v4/scrape-and-summarize/stream-ndjson"
SUMMARIZE_PATH = "/api/v1/summarize/"

# Environment variable -> (field name, converter)
_ENV_FIELDS = {
    "NUTSHELL_BASE_URL": ("base_url", str),
    "NUTSHELL_CONNECT_TIMEOUT": ("connect_timeout", float),
    "NUTSHELL_READ_TIMEOUT": ("read_timeout", float),
    "NUTSHELL_PACING_DELAY_MS": ("pacing_delay", lambda v: float(v) / 1000),
    "NUTSHELL_MAX_ATTEMPTS": ("max_attempts", int),
}


@dataclass(frozen=True)
class ClientConfig:
    """Configuration shared by streaming and non-streaming requests.

    ``pacing_delay`` throttles how fast progress results are handed to the
    consumer (a UI smoothing heuristic, not backpressure). Set it to 0 to
    emit results as fast as they arrive.
    """

    base_url: str = DEFAULT_BASE_URL
    stream_path: str = STREAM_PATH
    summarize_path: str = SUMMARIZE_PATH
    connect_timeout: float = CONNECT_TIMEOUT
    read_timeout: float = READ_TIMEOUT
    pacing_delay: float = 0.03
    max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 5.0
    extraction_timeout: float = 20.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        errors = []

        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must start with http:// or https://, got {self.base_url!r}")
        if self.connect_timeout <= 0:
            errors.append(f"connect_timeout must be > 0, got {self.connect_timeout}")
        if self.read_timeout <= 0:
            errors.append(f"read_timeout must be > 0, got {self.read_timeout}")
        if self.pacing_delay < 0:
            errors.append(f"pacing_delay must be >= 0, got {self.pacing_delay}")
        if self.max_attempts < 1:
            errors.append(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.retry_base_delay < 0:
            errors.append(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < self.retry_base_delay:
            errors.append(
                f"retry_max_delay ({self.retry_max_delay}) must be >= "
                f"retry_base_delay ({self.retry_base_delay})"
            )
        if self.extraction_timeout <= 0:
            errors.append(f"extraction_timeout must be > 0, got {self.extraction_timeout}")

        if errors:
            raise ValueError(f"Invalid ClientConfig: {'; '.join(errors)}")

    @property
    def stream_url(self) -> str:
        return self.base_url.rstrip("/") + self.stream_path

    @property
    def summarize_url(self) -> str:
        return self.base_url.rstrip("/") + self.summarize_path

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config from NUTSHELL_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable cannot be converted or the resulting
                configuration is invalid.
        """
        overrides = {}
        for env_name, (field_name, convert) in _ENV_FIELDS.items():
            raw = os.environ.get(env_name)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[field_name] = convert(raw.strip())
            except ValueError:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}")
        return cls(**overrides)
