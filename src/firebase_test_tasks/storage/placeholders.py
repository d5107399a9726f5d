"""Decode transport-safe placeholder objects into native Firestore values.

Task payloads cross a JSON boundary, so rich values arrive flattened:

* ``{"_methodName": "serverTimestamp"}`` / ``{"_methodName": "deleteField"}``
  (``FieldValue.serverTimestamp`` / ``FieldValue.delete`` in older clients)
* ``{"seconds": ..., "nanoseconds": ...}`` for timestamps
* ``{"latitude": ..., "longitude": ...}`` for geo points

The admin SDK serializes its own values with a leading underscore
(``_seconds``, ``_latitude``); both spellings are accepted.

Shapes are matched in the order above. Ordinary data that happens to carry
``seconds``/``nanoseconds`` or ``latitude``/``longitude`` as numbers is decoded
as a timestamp / geo point.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping

from google.api_core.datetime_helpers import DatetimeWithNanoseconds
from google.cloud.firestore import DELETE_FIELD, SERVER_TIMESTAMP, DocumentReference, GeoPoint
from google.protobuf.timestamp_pb2 import Timestamp


METHOD_NAME_KEY = "_methodName"
RTDB_SERVER_TIMESTAMP = {".sv": "timestamp"}
NANOS_PER_SECOND = 1_000_000_000
_UTC_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class PlaceholderKind(str, Enum):
    SERVER_TIMESTAMP = "SERVER_TIMESTAMP"
    DELETE_FIELD = "DELETE_FIELD"
    TIMESTAMP = "TIMESTAMP"
    GEO_POINT = "GEO_POINT"


METHOD_NAMES: dict[str, PlaceholderKind] = {
    "FieldValue.serverTimestamp": PlaceholderKind.SERVER_TIMESTAMP,
    "serverTimestamp": PlaceholderKind.SERVER_TIMESTAMP,
    "FieldValue.delete": PlaceholderKind.DELETE_FIELD,
    "deleteField": PlaceholderKind.DELETE_FIELD,
}


@dataclass(frozen=True)
class Placeholder:
    kind: PlaceholderKind
    raw: Mapping[str, Any]
    first: int | float | None = None
    second: int | float | None = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numeric_pair(value: Mapping[str, Any], first_key: str, second_key: str) -> tuple[Any, Any] | None:
    for prefix in ("", "_"):
        first = value.get(f"{prefix}{first_key}")
        second = value.get(f"{prefix}{second_key}")
        if _is_number(first) and _is_number(second):
            return first, second
    return None


def decode_placeholder(value: Any) -> Placeholder | None:
    """Match ``value`` against the known wire shapes, in priority order."""

    if not isinstance(value, Mapping):
        return None

    method_name = value.get(METHOD_NAME_KEY)
    if isinstance(method_name, str) and method_name in METHOD_NAMES:
        return Placeholder(kind=METHOD_NAMES[method_name], raw=value)

    seconds_pair = _numeric_pair(value, "seconds", "nanoseconds")
    if seconds_pair is not None:
        seconds, nanoseconds = seconds_pair
        if float(seconds).is_integer() and float(nanoseconds).is_integer() and 0 <= nanoseconds < NANOS_PER_SECOND:
            return Placeholder(kind=PlaceholderKind.TIMESTAMP, raw=value, first=int(seconds), second=int(nanoseconds))

    geo_pair = _numeric_pair(value, "latitude", "longitude")
    if geo_pair is not None:
        latitude, longitude = geo_pair
        return Placeholder(kind=PlaceholderKind.GEO_POINT, raw=value, first=latitude, second=longitude)

    return None


def _firestore_value(placeholder: Placeholder) -> Any:
    if placeholder.kind is PlaceholderKind.SERVER_TIMESTAMP:
        return SERVER_TIMESTAMP
    if placeholder.kind is PlaceholderKind.DELETE_FIELD:
        return DELETE_FIELD
    if placeholder.kind is PlaceholderKind.TIMESTAMP:
        return DatetimeWithNanoseconds.from_timestamp_pb(
            Timestamp(seconds=placeholder.first, nanos=placeholder.second)
        )
    return GeoPoint(float(placeholder.first), float(placeholder.second))


def _rtdb_value(placeholder: Placeholder) -> Any:
    # RTDB has no timestamp / geo point types; those stay plain data.
    if placeholder.kind is PlaceholderKind.SERVER_TIMESTAMP:
        return dict(RTDB_SERVER_TIMESTAMP)
    if placeholder.kind is PlaceholderKind.DELETE_FIELD:
        return None
    return _walk(dict(placeholder.raw), _rtdb_value, skip_decode=True)


def _walk(
    data: Any,
    materialize: Callable[[Placeholder], Any],
    *,
    skip_decode: bool = False,
) -> Any:
    if not skip_decode:
        placeholder = decode_placeholder(data)
        if placeholder is not None:
            return materialize(placeholder)
    if isinstance(data, Mapping):
        return {key: _walk(value, materialize) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_walk(item, materialize) for item in data]
    return data


def normalize_value(data: Any) -> Any:
    """Replace placeholder objects in ``data`` with native Firestore values."""

    return _walk(data, _firestore_value)


def normalize_rtdb_value(data: Any) -> Any:
    """Replace placeholder objects in ``data`` with Realtime Database equivalents."""

    return _walk(data, _rtdb_value)


def _timestamp_parts(value: datetime) -> tuple[int, int]:
    if isinstance(value, DatetimeWithNanoseconds):
        stamp = value.timestamp_pb()
        return stamp.seconds, stamp.nanos
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _UTC_EPOCH
    return delta.days * 86400 + delta.seconds, delta.microseconds * 1000


def encode_value(value: Any) -> Any:
    """Flatten native store values into JSON-safe placeholder shapes."""

    if isinstance(value, datetime):
        seconds, nanoseconds = _timestamp_parts(value)
        return {"seconds": seconds, "nanoseconds": nanoseconds}
    if isinstance(value, GeoPoint):
        return {"latitude": value.latitude, "longitude": value.longitude}
    if isinstance(value, DocumentReference):
        return value.path
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, Mapping):
        return {str(key): encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value
