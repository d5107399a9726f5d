from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import itertools

from google.api_core.exceptions import NotFound
from google.cloud.firestore import DELETE_FIELD


def _segments(path: str) -> list[str]:
    trimmed = path.strip("/")
    return trimmed.split("/") if trimmed else []


# ---------------------------------------------------------------- Firestore


@dataclass
class FakeSnapshot:
    id: str
    reference: "FakeDocumentRef"
    exists: bool
    data: dict | None = None

    def to_dict(self) -> dict | None:
        return dict(self.data) if self.data is not None else None


@dataclass
class FakeDocumentRef:
    path: str
    client: "FakeFirestoreClient"

    @property
    def id(self) -> str:
        return _segments(self.path)[-1]

    def get(self) -> FakeSnapshot:
        data = self.client.db.get(self.path)
        return FakeSnapshot(id=self.id, reference=self, exists=data is not None, data=data)

    def set(self, data: dict, merge: bool = False) -> None:
        if merge and self.path in self.client.db:
            merged = dict(self.client.db[self.path])
            merged.update(data)
            self.client.db[self.path] = _drop_deleted(merged)
            return
        self.client.db[self.path] = _drop_deleted(dict(data))

    def update(self, data: dict) -> None:
        if self.path not in self.client.db:
            raise NotFound(f"No document to update: {self.path}")
        merged = dict(self.client.db[self.path])
        merged.update(data)
        self.client.db[self.path] = _drop_deleted(merged)

    def delete(self) -> None:
        self.client.db.pop(self.path, None)


def _drop_deleted(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not DELETE_FIELD}


_OPERATORS = {
    "==": lambda left, right: left == right,
    "!=": lambda left, right: left != right,
    "<": lambda left, right: left < right,
    "<=": lambda left, right: left <= right,
    ">": lambda left, right: left > right,
    ">=": lambda left, right: left >= right,
    "in": lambda left, right: left in right,
    "array-contains": lambda left, right: isinstance(left, list) and right in left,
}


@dataclass
class FakeQuery:
    path: str
    client: "FakeFirestoreClient"
    filters: tuple[tuple[str, str, Any], ...] = ()
    orders: tuple[tuple[str, str], ...] = ()
    limit_count: int | None = None
    limit_last_count: int | None = None

    def _copy(self, **changes: Any) -> "FakeQuery":
        values = {
            "path": self.path,
            "client": self.client,
            "filters": self.filters,
            "orders": self.orders,
            "limit_count": self.limit_count,
            "limit_last_count": self.limit_last_count,
        }
        values.update(changes)
        return FakeQuery(**values)

    def where(self, field_path: str, op_string: str, value: Any) -> "FakeQuery":
        if op_string not in _OPERATORS:
            raise ValueError(f"Operator string {op_string!r} is invalid.")
        return self._copy(filters=self.filters + ((field_path, op_string, value),))

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "FakeQuery":
        if direction not in {"ASCENDING", "DESCENDING"}:
            raise ValueError(f"Invalid direction: {direction}")
        return self._copy(orders=self.orders + ((field_path, direction),))

    def limit(self, count: int) -> "FakeQuery":
        return self._copy(limit_count=count, limit_last_count=None)

    def limit_to_last(self, count: int) -> "FakeQuery":
        return self._copy(limit_last_count=count, limit_count=None)

    def _matches(self, doc_id: str, data: dict) -> bool:
        for field_path, op_string, value in self.filters:
            if field_path not in data:
                return False
            if not _OPERATORS[op_string](data[field_path], value):
                return False
        for field_path, _ in self.orders:
            if field_path != "__name__" and field_path not in data:
                return False
        return True

    def get(self) -> list[FakeSnapshot]:
        self.client.reads.append(self.path)
        if self.client.fail_on_read is not None and len(self.client.reads) >= self.client.fail_on_read:
            raise RuntimeError("read failed")
        if self.limit_last_count is not None and not self.orders:
            raise ValueError("limit_to_last() requires at least one order_by()")

        depth = len(_segments(self.path)) + 1
        prefix = f"{self.path}/"
        rows = []
        for doc_path, data in self.client.db.items():
            if not doc_path.startswith(prefix) or len(_segments(doc_path)) != depth:
                continue
            doc_id = _segments(doc_path)[-1]
            if self._matches(doc_id, data):
                rows.append((doc_id, doc_path, data))

        for field_path, direction in reversed(self.orders):
            rows.sort(
                key=lambda row: row[0] if field_path == "__name__" else row[2][field_path],
                reverse=direction == "DESCENDING",
            )
        if self.limit_count is not None:
            rows = rows[: self.limit_count]
        if self.limit_last_count is not None:
            rows = rows[-self.limit_last_count :]

        return [
            FakeSnapshot(
                id=doc_id,
                reference=FakeDocumentRef(path=doc_path, client=self.client),
                exists=True,
                data=dict(data),
            )
            for doc_id, doc_path, data in rows
        ]

    def stream(self) -> list[FakeSnapshot]:
        if self.limit_last_count is not None:
            raise ValueError("Query results for queries that include limit_to_last() constraints cannot be streamed.")
        return self.get()


@dataclass
class FakeCollectionRef(FakeQuery):
    def document(self, document_id: str) -> FakeDocumentRef:
        return FakeDocumentRef(path=f"{self.path}/{document_id}", client=self.client)

    def add(self, data: dict) -> tuple[None, FakeDocumentRef]:
        ref = self.document(f"auto{next(self.client.ids)}")
        ref.set(data)
        return None, ref


@dataclass
class FakeBatch:
    client: "FakeFirestoreClient"
    refs: list[FakeDocumentRef] = field(default_factory=list)

    def delete(self, ref: FakeDocumentRef) -> None:
        self.refs.append(ref)

    def commit(self) -> None:
        if len(self.refs) > self.client.max_batch_size:
            raise ValueError("maximum 500 writes allowed per request")
        if self.client.fail_on_commit is not None and len(self.client.commits) + 1 >= self.client.fail_on_commit:
            raise RuntimeError("commit failed")
        for ref in self.refs:
            ref.delete()
        self.client.commits.append(len(self.refs))


@dataclass
class FakeFirestoreClient:
    db: dict[str, dict] = field(default_factory=dict)
    commits: list[int] = field(default_factory=list)
    reads: list[str] = field(default_factory=list)
    max_batch_size: int = 500
    fail_on_commit: int | None = None
    fail_on_read: int | None = None
    ids: Any = field(default_factory=lambda: itertools.count(1))

    def collection(self, path: str) -> FakeCollectionRef:
        return FakeCollectionRef(path=path.strip("/"), client=self)

    def document(self, path: str) -> FakeDocumentRef:
        return FakeDocumentRef(path=path.strip("/"), client=self)

    def batch(self) -> FakeBatch:
        return FakeBatch(client=self)

    def seed(self, collection: str, count: int, **fields: Any) -> None:
        for index in range(count):
            self.db[f"{collection}/doc{index:05d}"] = {"index": index, **fields}


# ---------------------------------------------------------------- Realtime Database


@dataclass
class FakeRealtimeDatabase:
    root: dict = field(default_factory=dict)
    keys: Any = field(default_factory=lambda: itertools.count(1))

    def reference(self, path: str) -> "FakeRtdbRef":
        return FakeRtdbRef(db=self, path=path)

    def read(self, path: str) -> Any:
        node: Any = self.root
        for segment in _segments(path):
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    def write(self, path: str, value: Any) -> None:
        segments = _segments(path)
        if not segments:
            self.root = value if isinstance(value, dict) else {}
            return
        node = self.root
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        if value is None:
            node.pop(segments[-1], None)
        else:
            node[segments[-1]] = value


@dataclass
class FakeRtdbQuery:
    db: FakeRealtimeDatabase
    path: str
    order: tuple[str, str | None] | None = None
    bounds: tuple[tuple[str, Any], ...] = ()
    first: int | None = None
    last: int | None = None

    def _copy(self, **changes: Any) -> "FakeRtdbQuery":
        values = {
            "db": self.db,
            "path": self.path,
            "order": self.order,
            "bounds": self.bounds,
            "first": self.first,
            "last": self.last,
        }
        values.update(changes)
        return FakeRtdbQuery(**values)

    def start_at(self, value: Any) -> "FakeRtdbQuery":
        return self._copy(bounds=self.bounds + (("start_at", value),))

    def end_at(self, value: Any) -> "FakeRtdbQuery":
        return self._copy(bounds=self.bounds + (("end_at", value),))

    def equal_to(self, value: Any) -> "FakeRtdbQuery":
        return self._copy(bounds=self.bounds + (("equal_to", value),))

    def limit_to_first(self, count: int) -> "FakeRtdbQuery":
        return self._copy(first=count)

    def limit_to_last(self, count: int) -> "FakeRtdbQuery":
        return self._copy(last=count)

    def _sort_value(self, key: str, value: Any) -> Any:
        assert self.order is not None
        kind, child = self.order
        if kind == "key":
            return key
        if kind == "value":
            return value
        return value.get(child) if isinstance(value, dict) else None

    def get(self) -> Any:
        node = self.db.read(self.path)
        if not isinstance(node, dict) or self.order is None:
            return node
        items = sorted(node.items(), key=lambda item: (self._sort_value(*item) is not None, self._sort_value(*item)))
        for bound, expected in self.bounds:
            if bound == "start_at":
                items = [item for item in items if self._sort_value(*item) is not None and self._sort_value(*item) >= expected]
            elif bound == "end_at":
                items = [item for item in items if self._sort_value(*item) is not None and self._sort_value(*item) <= expected]
            else:
                items = [item for item in items if self._sort_value(*item) == expected]
        if self.first is not None:
            items = items[: self.first]
        if self.last is not None:
            items = items[-self.last :]
        return dict(items)


@dataclass
class FakeRtdbRef:
    db: FakeRealtimeDatabase
    path: str

    @property
    def key(self) -> str | None:
        segments = _segments(self.path)
        return segments[-1] if segments else None

    def child(self, path: str) -> "FakeRtdbRef":
        return FakeRtdbRef(db=self.db, path=f"{self.path.rstrip('/')}/{path}")

    def order_by_child(self, path: str) -> FakeRtdbQuery:
        return FakeRtdbQuery(db=self.db, path=self.path, order=("child", path))

    def order_by_key(self) -> FakeRtdbQuery:
        return FakeRtdbQuery(db=self.db, path=self.path, order=("key", None))

    def order_by_value(self) -> FakeRtdbQuery:
        return FakeRtdbQuery(db=self.db, path=self.path, order=("value", None))

    def get(self) -> Any:
        return self.db.read(self.path)

    def set(self, value: Any) -> None:
        if value is None:
            raise ValueError("Value must not be None.")
        self.db.write(self.path, value)

    def update(self, value: dict) -> None:
        if not value or not isinstance(value, dict):
            raise ValueError("Value argument must be a non-empty dictionary.")
        for key, item in value.items():
            self.db.write(f"{self.path.rstrip('/')}/{key}", item)

    def push(self, value: Any = "") -> "FakeRtdbRef":
        new_ref = self.child(f"-key{next(self.db.keys):04d}")
        new_ref.set(value)
        return new_ref

    def delete(self) -> None:
        self.db.write(self.path, None)


# ---------------------------------------------------------------- Connection


@dataclass
class FakeConnection:
    firestore_client: FakeFirestoreClient = field(default_factory=FakeFirestoreClient)
    rtdb: FakeRealtimeDatabase = field(default_factory=FakeRealtimeDatabase)
    default_batch_size: int = 500
    rtdb_calls: list[dict[str, Any]] = field(default_factory=list)
    firestore_calls: list[str | None] = field(default_factory=list)
    unknown_apps: set[str] = field(default_factory=set)

    def firestore(self, app_name: str | None = None) -> FakeFirestoreClient:
        self.firestore_calls.append(app_name)
        if app_name in self.unknown_apps:
            raise ValueError(f'Firebase app named "{app_name}" does not exist.')
        return self.firestore_client

    def rtdb_reference(self, path: str, *, instance: str | None = None, app_name: str | None = None) -> FakeRtdbRef:
        self.rtdb_calls.append({"path": path, "instance": instance, "app_name": app_name})
        return self.rtdb.reference(path)


# ---------------------------------------------------------------- Recording doubles


@dataclass
class RecordingQuery:
    calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = field(default_factory=list)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)

        def _record(*args: Any, **kwargs: Any) -> "RecordingQuery":
            self.calls.append((name, args, kwargs))
            return self

        return _record


@dataclass
class RecordingClient:
    query: RecordingQuery = field(default_factory=RecordingQuery)
    opened: list[tuple[str, str]] = field(default_factory=list)

    def collection(self, path: str) -> RecordingQuery:
        self.opened.append(("collection", path))
        return self.query

    def document(self, path: str) -> str:
        self.opened.append(("document", path))
        return f"doc:{path}"
