from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from firebase_test_tasks.options import FirestoreOptions, TaskRequestError
from firebase_test_tasks.storage.firestore_paths import clean_firestore_path, is_document_path, path_segments


DIRECTION_ASCENDING = "ASCENDING"
DIRECTION_DESCENDING = "DESCENDING"

_DIRECTION_ALIASES = {
    "asc": DIRECTION_ASCENDING,
    "ascending": DIRECTION_ASCENDING,
    "desc": DIRECTION_DESCENDING,
    "descending": DIRECTION_DESCENDING,
}


@dataclass(frozen=True)
class DocumentTarget:
    path: str
    ref: Any


@dataclass(frozen=True)
class CollectionTarget:
    path: str
    query: Any
    ordered: bool = False
    limited: bool = False


FirestoreTarget = DocumentTarget | CollectionTarget


def normalize_direction(direction: str | None) -> str:
    if direction is None:
        return DIRECTION_ASCENDING
    normalized = _DIRECTION_ALIASES.get(direction.strip().lower())
    if normalized is None:
        # Let the client reject unknown directions with its own message.
        return direction
    return normalized


def resolve_firestore_ref(client: Any, path: str, options: FirestoreOptions | None = None) -> FirestoreTarget:
    """Resolve a slash path and options into a document or collection target.

    Clauses are applied in a fixed order: orderBy, where, limit, limitToLast.
    """

    if not path_segments(path):
        raise TaskRequestError("Path is required to make Firestore Reference")
    options = options or FirestoreOptions()
    clean_path = clean_firestore_path(path)

    if is_document_path(clean_path):
        return DocumentTarget(path=clean_path, ref=client.document(clean_path))

    query = client.collection(clean_path)
    if options.order_by is not None:
        field_path, direction = options.order_by
        query = query.order_by(field_path, direction=normalize_direction(direction))
    if options.where:
        for field_path, op_string, value in options.where:
            query = query.where(field_path, op_string, value)
    if options.limit is not None:
        query = query.limit(options.limit)
    if options.limit_to_last is not None:
        query = query.limit_to_last(options.limit_to_last)

    return CollectionTarget(
        path=clean_path,
        query=query,
        ordered=options.order_by is not None,
        limited=options.limit is not None or options.limit_to_last is not None,
    )
