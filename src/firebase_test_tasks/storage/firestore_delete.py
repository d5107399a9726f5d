from __future__ import annotations

import logging
from typing import Any

from firebase_test_tasks.options import FirestoreOptions
from firebase_test_tasks.storage.firestore_paths import DOCUMENT_ID_FIELD
from firebase_test_tasks.storage.firestore_query import CollectionTarget


LOGGER = logging.getLogger(__name__)
DEFAULT_BATCH_SIZE = 500


def build_delete_query(
    target: CollectionTarget,
    options: FirestoreOptions | None = None,
    *,
    default_batch_size: int = DEFAULT_BATCH_SIZE,
) -> Any:
    options = options or FirestoreOptions()
    query = target.query
    if not target.ordered:
        query = query.order_by(DOCUMENT_ID_FIELD)
    if not target.limited:
        query = query.limit(options.batch_size or default_batch_size)
    return query


def delete_collection(
    client: Any,
    target: CollectionTarget,
    options: FirestoreOptions | None = None,
    *,
    default_batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Delete every document matched by ``target`` one page at a time.

    Each page is removed in a single batch write and the next page is only
    fetched after that batch commits. Pages already committed stay deleted if
    a later page fails. Returns the number of deleted documents.
    """

    query = build_delete_query(target, options, default_batch_size=default_batch_size)
    deleted = 0
    page = 0
    while True:
        snapshots = query.get()
        if not snapshots:
            break

        batch = client.batch()
        for snapshot in snapshots:
            batch.delete(snapshot.reference)
        batch.commit()

        page += 1
        deleted += len(snapshots)
        LOGGER.debug("deleted page %s of %s: %s docs", page, target.path, len(snapshots))

    LOGGER.info("deleted %s docs from %s in %s pages", deleted, target.path, page)
    return deleted
