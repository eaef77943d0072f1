"""Decoding of ``data: <json>`` frames into stream events."""

import json
import logging
import math

from .errors import MalformedEventError
from .events import ErrorEvent, MetadataEvent, PatchEvent, StreamEvent
from .patch import classify
from .summary import parse_state

logger = logging.getLogger(__name__)

EVENT_PREFIX = "data:"


def _optional_text(data: dict, key: str) -> str | None:
    """String field where absent, null and empty all mean unset."""
    value = data.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _optional_float(data: dict, key: str, line: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedEventError(f"{key} must be numeric, got {value!r}", line=line)
    try:
        number = float(value)
    except OverflowError:
        raise MalformedEventError(f"{key} is out of range: {value!r}", line=line)
    if not math.isfinite(number):
        raise MalformedEventError(f"{key} must be finite, got {value!r}", line=line)
    return number


def _optional_int(data: dict, key: str, line: str) -> int | None:
    """Integer field. Integral floats such as 10.0 are accepted; 10.7, "10",
    NaN and infinities are not.
    """
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedEventError(f"{key} must be an integer, got {value!r}", line=line)
    if isinstance(value, float) and not value.is_integer():
        raise MalformedEventError(f"{key} must be an integer, got {value!r}", line=line)
    return int(value)


def _required_int(obj: dict, key: str, line: str) -> int:
    if key not in obj:
        raise MalformedEventError(f"missing {key}", line=line)
    value = _optional_int(obj, key, line)
    if value is None:
        raise MalformedEventError(f"{key} cannot be null", line=line)
    return value


def _decode_metadata(obj: dict, line: str) -> MetadataEvent:
    data = obj.get("data")
    if not isinstance(data, dict):
        raise MalformedEventError("metadata event without data object", line=line)

    input_type = _optional_text(data, "input_type")
    style = _optional_text(data, "style")
    if input_type is None or style is None:
        raise MalformedEventError("metadata requires input_type and style", line=line)

    return MetadataEvent(
        input_type=input_type,
        style=style,
        url=_optional_text(data, "url"),
        title=_optional_text(data, "title"),
        author=_optional_text(data, "author"),
        date=_optional_text(data, "date"),
        site_name=_optional_text(data, "site_name"),
        scrape_method=_optional_text(data, "scrape_method"),
        scrape_latency_ms=_optional_float(data, "scrape_latency_ms", line),
        extracted_text_length=_optional_int(data, "extracted_text_length", line),
        text_length=_optional_int(data, "text_length", line),
    )


def _decode_patch(obj: dict, line: str) -> PatchEvent:
    done = obj.get("done")
    if not isinstance(done, bool):
        raise MalformedEventError(f"done must be a boolean, got {done!r}", line=line)

    try:
        state = parse_state(obj["state"])
    except MalformedEventError as e:
        raise MalformedEventError(str(e), line=line) from e

    return PatchEvent(
        state=state,
        done=done,
        tokens_used=_required_int(obj, "tokens_used", line),
        delta=classify(obj.get("delta")),
        latency_ms=_optional_float(obj, "latency_ms", line),
    )


def _decode_error(obj: dict, line: str) -> ErrorEvent:
    # The error itself is what matters; a bad counter must not hide it
    try:
        tokens = _optional_int(obj, "tokens_used", line)
    except MalformedEventError as e:
        logger.warning("Ignoring invalid tokens_used on error event: %s", e)
        tokens = None
    return ErrorEvent(
        message=str(obj["error"]),
        tokens_used=tokens if tokens is not None else 0,
    )


def decode_line(line: str) -> StreamEvent | None:
    """Decode one line of the response body.

    Returns None for lines that are not event frames (blank keep-alives,
    ``event:``/``id:`` fields, comments).

    Raises:
        MalformedEventError: If the frame payload is not a JSON object or
            does not match any known event shape.
    """
    if not line.startswith(EVENT_PREFIX):
        return None

    payload = line[len(EVENT_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]

    try:
        obj = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedEventError(f"invalid JSON: {e.msg}", line=line) from e

    if not isinstance(obj, dict):
        raise MalformedEventError("event payload is not an object", line=line)

    if obj.get("type") == "metadata":
        return _decode_metadata(obj, line)

    if "state" in obj:
        if obj.get("error") is not None:
            return _decode_error(obj, line)
        return _decode_patch(obj, line)

    if obj.get("error") is not None:
        return _decode_error(obj, line)

    raise MalformedEventError("unrecognized event shape", line=line)
