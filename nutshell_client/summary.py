"""Structured summary document and the fold step that advances it.

The server sends a complete snapshot of the document with every patch
event, so folding is a wholesale replacement: the previous state is never
merged with the new one and the advisory delta is never applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import MalformedEventError

if TYPE_CHECKING:
    from .events import PatchEvent

logger = logging.getLogger(__name__)


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


# Wire field names of the structured summary, in display order
KNOWN_FIELDS = (
    "title",
    "main_summary",
    "key_points",
    "category",
    "sentiment",
    "read_time_min",
)


@dataclass(frozen=True)
class StructuredSummary:
    """Title, main summary, key points, category, sentiment, read time.

    Every field is optional until the server sets it. Instances are frozen;
    the snapshot attached to a completed stream is the final result.
    """
    title: str | None = None
    main_summary: str | None = None
    key_points: tuple[str, ...] = ()
    category: str | None = None
    sentiment: Sentiment | None = None
    read_time_minutes: int | None = None

    @property
    def is_empty(self) -> bool:
        return self == StructuredSummary()

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return {
            "title": self.title,
            "main_summary": self.main_summary,
            "key_points": list(self.key_points),
            "category": self.category,
            "sentiment": self.sentiment.value if self.sentiment else None,
            "read_time_min": self.read_time_minutes,
        }


def _optional_str(obj: dict, key: str) -> str | None:
    value = obj.get(key)
    if value is None:
        return None
    return str(value)


def _parse_sentiment(value: Any) -> Sentiment | None:
    if value is None:
        return None
    try:
        return Sentiment(str(value).lower())
    except ValueError:
        logger.warning("Ignoring unknown sentiment %r", value)
        return None


def _parse_read_time(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedEventError(f"read_time_min must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise MalformedEventError(f"read_time_min must be an integer, got {value!r}")


def parse_state(obj: Any) -> StructuredSummary:
    """Build a StructuredSummary from the wire ``state`` object.

    Absent keys and explicit nulls both leave a field unset.

    Raises:
        MalformedEventError: If the object or one of its fields has the
            wrong shape.
    """
    if not isinstance(obj, dict):
        raise MalformedEventError(f"state must be an object, got {type(obj).__name__}")

    raw_points = obj.get("key_points")
    if raw_points is None:
        key_points: tuple[str, ...] = ()
    elif isinstance(raw_points, list):
        key_points = tuple(str(p) for p in raw_points if p is not None)
    else:
        raise MalformedEventError("key_points must be an array")

    return StructuredSummary(
        title=_optional_str(obj, "title"),
        main_summary=_optional_str(obj, "main_summary"),
        key_points=key_points,
        category=_optional_str(obj, "category"),
        sentiment=_parse_sentiment(obj.get("sentiment")),
        read_time_minutes=_parse_read_time(obj.get("read_time_min")),
    )


def fold(current: StructuredSummary, event: PatchEvent) -> StructuredSummary:
    """Advance the document by one patch event.

    Returns ``event.state`` regardless of ``current``, which makes folding
    idempotent: re-applying an event to any prior state yields the same
    result.
    """
    if current != event.state:
        logger.debug("Fold replaced state (delta=%r)", event.delta)
    return event.state
