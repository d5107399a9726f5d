from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class TaskRequestError(ValueError):
    """Raised when a task request is malformed, before any store I/O."""


class UnknownTaskError(TaskRequestError):
    """Raised when a task name is not registered."""


class _OptionsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class RtdbOptions(_OptionsModel):
    order_by_child: str | None = Field(default=None, alias="orderByChild")
    order_by_key: bool = Field(default=False, alias="orderByKey")
    order_by_value: bool = Field(default=False, alias="orderByValue")
    start_at: Any = Field(default=None, alias="startAt")
    start_after: Any = Field(default=None, alias="startAfter")
    end_at: Any = Field(default=None, alias="endAt")
    end_before: Any = Field(default=None, alias="endBefore")
    equal_to: Any = Field(default=None, alias="equalTo")
    limit_to_first: bool | int | None = Field(default=None, alias="limitToFirst")
    limit_to_last: bool | int | None = Field(default=None, alias="limitToLast")
    instance: str | None = None
    app_name: str | None = Field(default=None, alias="appName")


WhereClause = tuple[str, str, Any]


class FirestoreOptions(_OptionsModel):
    where: list[WhereClause] | None = None
    order_by: tuple[str, str | None] | None = Field(default=None, alias="orderBy")
    limit: int | None = Field(default=None, gt=0)
    limit_to_last: int | None = Field(default=None, alias="limitToLast", gt=0)
    batch_size: int | None = Field(default=None, alias="batchSize", gt=0)
    merge: bool = False
    recursive: bool = False
    app_name: str | None = Field(default=None, alias="appName")

    @field_validator("where", mode="before")
    @classmethod
    def _coerce_where(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, (list, tuple)) or not value:
            raise ValueError("where must be [field, op, value] or a list of them")
        clauses = list(value) if isinstance(value[0], (list, tuple)) else [value]
        if len(clauses) > 2:
            raise ValueError("where supports at most two clauses")
        for clause in clauses:
            if len(clause) != 3:
                raise ValueError(f"where clause must be [field, op, value]: {clause}")
        return clauses

    @field_validator("order_by", mode="before")
    @classmethod
    def _coerce_order_by(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return (value, None)
        if isinstance(value, (list, tuple)) and len(value) in (1, 2):
            return (value[0], value[1] if len(value) == 2 else None)
        raise ValueError("orderBy must be a field name or [field, direction]")


class TaskEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str
    path: str = ""
    options: dict[str, Any] | None = None
    data: Any = None


def _parse(model: type[_OptionsModel], options: Mapping[str, Any] | _OptionsModel | None) -> Any:
    if isinstance(options, model):
        return options
    try:
        return model.model_validate(dict(options or {}))
    except ValidationError as exc:
        raise TaskRequestError(f"Invalid options: {exc}") from exc


def parse_rtdb_options(options: Mapping[str, Any] | RtdbOptions | None) -> RtdbOptions:
    return _parse(RtdbOptions, options)


def parse_firestore_options(options: Mapping[str, Any] | FirestoreOptions | None) -> FirestoreOptions:
    return _parse(FirestoreOptions, options)
