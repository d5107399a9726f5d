from __future__ import annotations

from typing import Any

from firebase_test_tasks.options import RtdbOptions
from firebase_test_tasks.storage.firestore_paths import rtdb_path


# (option attribute, Reference/Query method), applied in this order.
RTDB_QUERY_ORDER: tuple[tuple[str, str], ...] = (
    ("order_by_child", "order_by_child"),
    ("order_by_key", "order_by_key"),
    ("order_by_value", "order_by_value"),
    ("start_at", "start_at"),
    ("start_after", "start_after"),
    ("end_at", "end_at"),
    ("end_before", "end_before"),
    ("equal_to", "equal_to"),
    ("limit_to_first", "limit_to_first"),
    ("limit_to_last", "limit_to_last"),
)

_FLAG_OPTIONS = {"order_by_key", "order_by_value"}
_LIMIT_OPTIONS = {"limit_to_first", "limit_to_last"}


def _query_args(option_name: str, value: Any) -> tuple[Any, ...] | None:
    if option_name in _FLAG_OPTIONS:
        return () if value else None
    if option_name in _LIMIT_OPTIONS:
        if value is None or value is False:
            return None
        return (1,) if value is True else (value,)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def apply_rtdb_query(ref: Any, options: RtdbOptions | None = None) -> Any:
    if options is None:
        return ref
    query = ref
    for option_name, method_name in RTDB_QUERY_ORDER:
        args = _query_args(option_name, getattr(options, option_name))
        if args is None:
            continue
        query = getattr(query, method_name)(*args)
    return query


def resolve_rtdb_ref(connection: Any, path: str, options: RtdbOptions | None = None) -> Any:
    options = options or RtdbOptions()
    ref = connection.rtdb_reference(
        rtdb_path(path),
        instance=options.instance,
        app_name=options.app_name,
    )
    return apply_rtdb_query(ref, options)
