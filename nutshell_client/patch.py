"""Classification of the advisory ``delta`` carried by patch events.

Operations are informational only. They tell a consumer what just changed
(useful for highlighting) but state is always taken from the snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Any, Union

from .summary import KNOWN_FIELDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetField:
    """Set or overwrite a scalar field. ``value`` may be None (explicit null)."""
    field: str
    value: str | int | float | bool | None

    @property
    def is_known_field(self) -> bool:
        return self.field in KNOWN_FIELDS


@dataclass(frozen=True)
class AppendItem:
    """Append an item to a list field (normally ``key_points``)."""
    field: str
    value: str

    @property
    def is_known_field(self) -> bool:
        return self.field in KNOWN_FIELDS


@dataclass(frozen=True)
class DoneMarker:
    """Explicit completion marker."""
    pass


PatchOperation = Union[SetField, AppendItem, DoneMarker]


def classify(raw_delta: Any) -> PatchOperation | None:
    """Turn a raw delta object into a PatchOperation.

    Total over the ``set``, ``append`` and ``done`` tags. Anything else,
    including unknown tags and deltas missing required keys, yields None
    so that folding is never blocked by an operation the client does not
    understand.
    """
    if not isinstance(raw_delta, dict):
        return None

    op = raw_delta.get("op")
    field = raw_delta.get("field")

    if op == "done":
        return DoneMarker()

    if op == "set":
        if not isinstance(field, str) or "value" not in raw_delta:
            logger.debug("Unclassifiable set delta: %r", raw_delta)
            return None
        value = raw_delta["value"]
        if isinstance(value, (dict, list)):
            logger.debug("Set delta with non-scalar value for %s", field)
            return None
        return SetField(field=field, value=value)

    if op == "append":
        value = raw_delta.get("value")
        if not isinstance(field, str) or value is None:
            logger.debug("Unclassifiable append delta: %r", raw_delta)
            return None
        return AppendItem(field=field, value=str(value))

    logger.debug("Unknown delta op %r", op)
    return None


def changed_field(op: PatchOperation | None) -> str | None:
    """Name of the field an operation touches, or None."""
    if isinstance(op, (SetField, AppendItem)):
        return op.field
    return None
