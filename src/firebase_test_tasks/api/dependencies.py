from __future__ import annotations

from typing import Any, Callable

from fastapi import Request

from firebase_test_tasks.connection import FirebaseConnection, create_connection
from firebase_test_tasks.settings import load_settings


def create_default_connection() -> FirebaseConnection:
    return create_connection(load_settings())


def _resolve_dependency(
    request: Request,
    *,
    value_key: str,
    factory_key: str,
    missing_message: str,
) -> Any:
    dependency = getattr(request.app.state, value_key, None)
    if dependency is not None:
        return dependency

    factory: Callable[[], Any] | None = getattr(request.app.state, factory_key, None)
    if factory is None:
        raise RuntimeError(missing_message)
    dependency = factory()
    setattr(request.app.state, value_key, dependency)
    return dependency


def get_connection(request: Request) -> Any:
    return _resolve_dependency(
        request,
        value_key="connection",
        factory_key="connection_factory",
        missing_message="connection が初期化されていません。",
    )
