from __future__ import annotations


PATH_SEPARATOR = "/"
DOCUMENT_ID_FIELD = "__name__"


def path_segments(path: str) -> list[str]:
    trimmed = path.strip(PATH_SEPARATOR)
    if not trimmed:
        return []
    return trimmed.split(PATH_SEPARATOR)


def is_document_path(path: str) -> bool:
    """Return True when a slash path addresses a Firestore document.

    Collection and document segments alternate, so an even segment count is a
    document and an odd count is a collection.
    """

    return len(path_segments(path)) % 2 == 0


def clean_firestore_path(path: str) -> str:
    return path.strip(PATH_SEPARATOR)


def rtdb_path(path: str) -> str:
    if path.startswith(PATH_SEPARATOR):
        return path
    return f"{PATH_SEPARATOR}{path}"


def is_root_path(path: str) -> bool:
    return not path.strip(PATH_SEPARATOR)
