"""Action dispatchers for the Realtime Database and Firestore tasks.

Both dispatchers take an explicit :class:`FirebaseConnection`, an action verb,
a slash path, an options bag and an optional JSON payload. Request-shape
problems raise :class:`TaskRequestError` before any store I/O. Store errors
are logged with the action and path, then re-raised unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from firebase_test_tasks.options import (
    FirestoreOptions,
    RtdbOptions,
    TaskEnvelope,
    TaskRequestError,
    UnknownTaskError,
    parse_firestore_options,
    parse_rtdb_options,
)
from firebase_test_tasks.storage.firestore_delete import delete_collection
from firebase_test_tasks.storage.firestore_paths import is_root_path
from firebase_test_tasks.storage.firestore_query import CollectionTarget, DocumentTarget, resolve_firestore_ref
from firebase_test_tasks.storage.placeholders import encode_value, normalize_rtdb_value, normalize_value
from firebase_test_tasks.storage.rtdb_query import resolve_rtdb_ref


LOGGER = logging.getLogger(__name__)

RTDB_ACTIONS = frozenset({"get", "set", "update", "push", "remove", "delete"})
FIRESTORE_ACTIONS = frozenset({"get", "set", "update", "add", "delete"})
RTDB_ACTION_ALIASES = {"delete": "remove"}

TASK_CALL_RTDB = "callRtdb"
TASK_CALL_FIRESTORE = "callFirestore"


def _require_data(store: str, action: str, data: Any) -> None:
    if data is None:
        raise TaskRequestError(f'data is required for {store} action "{action}"')


def call_rtdb(
    connection: Any,
    action: str,
    path: str,
    options: Mapping[str, Any] | RtdbOptions | None = None,
    data: Any = None,
) -> Any:
    if action not in RTDB_ACTIONS:
        raise TaskRequestError(f'Unsupported RTDB action "{action}"')
    action = RTDB_ACTION_ALIASES.get(action, action)
    if is_root_path(path) and action != "get":
        raise TaskRequestError(f'path is required for RTDB action "{action}"')
    if action in {"set", "update", "push"}:
        _require_data("RTDB", action, data)
    if action == "update" and not isinstance(data, Mapping):
        raise TaskRequestError('data for RTDB action "update" must be an object')
    parsed = parse_rtdb_options(options)

    try:
        if action == "get":
            value = resolve_rtdb_ref(connection, path, parsed).get()
            # A query matching nothing comes back as an empty container.
            if isinstance(value, (dict, list)) and not value:
                return None
            return value

        # Writes never carry query clauses.
        ref = resolve_rtdb_ref(connection, path, RtdbOptions(instance=parsed.instance, app_name=parsed.app_name))
        if action == "push":
            return ref.push(normalize_rtdb_value(data)).key
        if action == "set":
            ref.set(normalize_rtdb_value(data))
        elif action == "update":
            ref.update(normalize_rtdb_value(data))
        else:
            ref.delete()
        return None
    except Exception:
        LOGGER.exception('Error with RTDB "%s" at path "%s"', action, path)
        raise


def call_firestore(
    connection: Any,
    action: str,
    path: str,
    options: Mapping[str, Any] | FirestoreOptions | None = None,
    data: Any = None,
) -> Any:
    if action not in FIRESTORE_ACTIONS:
        raise TaskRequestError(f'Unsupported Firestore action "{action}"')
    if action in {"set", "update", "add"}:
        _require_data("Firestore", action, data)
    parsed = parse_firestore_options(options)

    try:
        client = connection.firestore(parsed.app_name)
        target = resolve_firestore_ref(client, path, parsed)
        if action in {"set", "update"} and not isinstance(target, DocumentTarget):
            raise TaskRequestError(f'Firestore action "{action}" requires a document path: {path}')
        if action == "add" and not isinstance(target, CollectionTarget):
            raise TaskRequestError(f'Firestore action "add" requires a collection path: {path}')

        if action == "get":
            return _firestore_get(target)
        if action == "delete":
            if isinstance(target, DocumentTarget):
                target.ref.delete()
            else:
                delete_collection(client, target, parsed, default_batch_size=connection.default_batch_size)
            return None
        if action == "set":
            target.ref.set(normalize_value(data), merge=parsed.merge)
            return None
        if action == "update":
            target.ref.update(normalize_value(data))
            return None
        _, doc_ref = client.collection(target.path).add(normalize_value(data))
        return doc_ref.id
    except TaskRequestError:
        raise
    except Exception:
        LOGGER.exception('Error with Firestore "%s" at path "%s"', action, path)
        raise


def _firestore_get(target: DocumentTarget | CollectionTarget) -> Any:
    if isinstance(target, CollectionTarget):
        # get() rather than stream(): limit_to_last queries cannot be streamed.
        snapshots = target.query.get()
        if not snapshots:
            return None
        return [{**(snapshot.to_dict() or {}), "id": snapshot.id} for snapshot in snapshots]

    snapshot = target.ref.get()
    if not snapshot.exists:
        return None
    return snapshot.to_dict() or {}


TASKS: dict[str, Callable[..., Any]] = {
    TASK_CALL_RTDB: call_rtdb,
    TASK_CALL_FIRESTORE: call_firestore,
}


def parse_envelope(envelope: Mapping[str, Any] | TaskEnvelope) -> TaskEnvelope:
    if isinstance(envelope, TaskEnvelope):
        return envelope
    try:
        return TaskEnvelope.model_validate(dict(envelope))
    except ValidationError as exc:
        raise TaskRequestError(f"Invalid task envelope: {exc}") from exc


def run_task(connection: Any, task_name: str, envelope: Mapping[str, Any] | TaskEnvelope) -> Any:
    """Run a registered task with a ``{action, path, options, data}`` envelope.

    The result is encoded into JSON-safe shapes.
    """

    task = TASKS.get(task_name)
    if task is None:
        raise UnknownTaskError(f"Unknown task: {task_name}")
    parsed = parse_envelope(envelope)
    result = task(connection, parsed.action, parsed.path, parsed.options, parsed.data)
    return encode_value(result)
